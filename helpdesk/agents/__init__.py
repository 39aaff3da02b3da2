"""
Agent Directory Module
======================

Bounded Context for users and agents as the helpdesk sees them.

Responsibilities:
- Register users, agents and admins supplied by the identity provider
- Track agent department and availability
- Expose the load counter the Assignment Engine maintains
"""
