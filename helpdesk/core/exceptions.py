"""
Core Exceptions
================

Custom exceptions for the helpdesk core.

These exceptions define domain-specific errors that can be caught and
translated to user-facing codes by whatever transport layer sits on top.
"""

from typing import Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationException(ApplicationException):
    """Exception for validation errors."""


class InvalidTransitionException(ValidationException):
    """Exception for a status change the ticket state machine does not allow."""

    def __init__(self, ticket_id: str, old_status: str, new_status: str):
        self.ticket_id = ticket_id
        self.old_status = old_status
        self.new_status = new_status
        super().__init__(
            f"Ticket {ticket_id} cannot move from {old_status} to {new_status}",
            {"ticket_id": ticket_id, "old_status": old_status, "new_status": new_status}
        )


class ResourceNotFoundException(ApplicationException):
    """Exception when a requested resource is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.resource_type = resource_type
        self.resource_id = resource_id
        message = f"{resource_type}"
        if resource_id:
            message += f" with id '{resource_id}'"
        message += " not found"
        super().__init__(message, details)


class ConflictException(ApplicationException):
    """
    Exception when a concurrent update won the race for the same record.

    Raised by storage adapters on a failed version check or
    compare-and-increment; the operation may be retried on fresh state.
    """

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.resource_type = resource_type
        self.resource_id = resource_id
        message = f"Concurrent modification of {resource_type}"
        if resource_id:
            message += f" '{resource_id}'"
        super().__init__(message, details)


class PolicyViolationException(ApplicationException):
    """Exception raised by the authorization layer when an actor may not act."""


class ExternalServiceException(ApplicationException):
    """Base exception for external service failures."""

    def __init__(
        self,
        service_name: str,
        message: str,
        details: Optional[dict] = None
    ):
        self.service_name = service_name
        super().__init__(f"{service_name}: {message}", details)


class NotificationException(ExternalServiceException):
    """Exception for notifier delivery failures."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__("Notifier", message, details)
