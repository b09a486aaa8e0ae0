"""Reset pipeline: invalidation, teardown, seeding dispatch, user sweep.

The entry point is :class:`shardreset.reset.orchestrator.ResetOrchestrator`.
"""
