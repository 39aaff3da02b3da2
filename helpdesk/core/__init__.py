"""
Core Module
============

Shared core utilities and abstractions used across the application.

This module contains framework-agnostic code that defines the fundamental
building blocks of the system: the error taxonomy, the clock, the acting
identity and the storage/notification interfaces.
"""

from helpdesk.core.exceptions import (
    ApplicationException,
    ValidationException,
    InvalidTransitionException,
    ResourceNotFoundException,
    ConflictException,
    PolicyViolationException,
    ExternalServiceException,
    NotificationException,
)
from helpdesk.core.clock import Clock, SystemClock, FixedClock
from helpdesk.core.interfaces import (
    Actor,
    ITicketRepository,
    IUserRepository,
    IUnitOfWork,
    INotifier,
)

__all__ = [
    "ApplicationException",
    "ValidationException",
    "InvalidTransitionException",
    "ResourceNotFoundException",
    "ConflictException",
    "PolicyViolationException",
    "ExternalServiceException",
    "NotificationException",
    "Clock",
    "SystemClock",
    "FixedClock",
    "Actor",
    "ITicketRepository",
    "IUserRepository",
    "IUnitOfWork",
    "INotifier",
]
