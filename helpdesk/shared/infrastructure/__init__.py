"""
Infrastructure Layer
=====================

Low-level technical concerns shared by every module:
- Structured logging
- Transaction runner with conflict retries
"""
