"""Meta store schema and engine helpers."""
