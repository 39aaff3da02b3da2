"""
Storage Infrastructure
======================

Unit-of-work backends shared by all modules:
- database: async SQLAlchemy engine, sessions and unit of work
- memory: process-local store with optimistic commit checks
"""
