"""
Assignment Module
=================

Bounded context routing tickets to agents.

Responsibilities:
- Pick the least loaded available agent of the ticket's department
- Manual reassignment
- Own every change to an agent's load counter
"""
