"""
Notification Module
===================

Bounded context turning ticket lifecycle transitions into events and
delivering them without ever blocking or failing the transition.

Responsibilities:
- Define lifecycle event kinds and payloads
- Dispatch events in the background after commit
- Deliver to the log and, when configured, a JSON webhook
"""
