"""shardreset - per-shard test-environment reset service."""
