"""
Shared Kernel Module
====================

Shared infrastructure used across all bounded contexts (tickets, agents,
assignment, analytics, notifications).

Architecture Pattern: Modular Monolith
- Each module is a bounded context
- Shared kernel contains only generic infrastructure

DO NOT add ticket or assignment business logic to the shared kernel.
"""
