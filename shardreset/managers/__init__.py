"""Data access managers for the meta store.

Each module provides async functions that encapsulate CRUD operations on one
entity.  Managers accept ``AsyncSession`` as a parameter and raise domain
exceptions (``LookupError``, ``ValueError``), never HTTP exceptions -- that
translation is the router's responsibility.  Read paths that go through the
cache take a ``Cache`` as well.
"""
