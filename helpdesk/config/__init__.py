"""
Configuration Module
====================

Application settings and configuration management using Pydantic.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="helpdesk-core", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # ========== Storage ==========
    storage_backend: Literal["memory", "database"] = Field(
        default="memory",
        description="Ticket/agent store: in-process memory or SQL database"
    )
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/helpdesk",
        description="Database connection URL (async driver)"
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size", ge=1)
    db_max_overflow: int = Field(default=10, description="Max overflow connections", ge=0)
    create_tables_on_startup: bool = Field(
        default=True,
        description="Create tables at startup (development only, use migrations in production)"
    )

    # ========== Tickets ==========
    ticket_id_prefix: str = Field(default="TKT", min_length=1, description="Ticket identifier prefix")
    ticket_id_width: int = Field(default=5, ge=1, le=12, description="Zero padding of ticket numbers")

    # ========== Assignment ==========
    assignment_max_retries: int = Field(
        default=5,
        ge=1,
        description="Attempts for a lifecycle operation that lost a concurrent update"
    )

    # ========== Notifications ==========
    notification_webhook_url: Optional[str] = Field(
        default=None,
        description="Webhook receiving lifecycle events as JSON (events are only logged when unset)"
    )
    notification_timeout_seconds: float = Field(
        default=5.0,
        description="Timeout for webhook calls",
        ge=0.1,
        le=30
    )
    notification_max_retries: int = Field(default=3, ge=1, le=10, description="Webhook delivery attempts")
    notification_failure_threshold: int = Field(
        default=5,
        ge=1,
        description="Consecutive failures before the webhook circuit opens"
    )
    notification_recovery_timeout: float = Field(
        default=60.0,
        ge=1,
        description="Seconds before an open circuit allows a test request"
    )

    # ========== Analytics ==========
    trend_window_days: int = Field(default=7, ge=1, le=366, description="Trailing window for ticket trends")
    trend_zero_fill: bool = Field(
        default=False,
        description="Emit zero-count trend buckets for days without tickets"
    )
    top_agents_limit: int = Field(default=10, ge=1, description="Agents reported in agent performance")
    recent_tickets_limit: int = Field(default=10, ge=1, description="Tickets reported as recent")
    analytics_report_interval: int = Field(
        default=0,
        ge=0,
        description="Seconds between periodic analytics reports (0 disables)"
    )

    # ========== Seeding ==========
    seed_path: Path = Field(default=Path("seed.yaml"), description="YAML file with users and agents")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return v.upper()


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


# ========== Constants ==========

class Priority(str, Enum):
    """Ticket priority levels."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class TicketStatus(str, Enum):
    """Ticket lifecycle statuses."""
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"
    CLOSED = "Closed"


class Category(str, Enum):
    """Ticket categories, also used as agent departments."""
    IT = "IT"
    HR = "HR"
    GENERAL = "General"


class UserRole(str, Enum):
    """Roles supplied by the identity provider."""
    USER = "user"
    AGENT = "agent"
    ADMIN = "admin"


class NotificationEvent(str, Enum):
    """Lifecycle events handed to notifiers."""
    TICKET_CREATED = "TicketCreated"
    TICKET_ASSIGNED = "TicketAssigned"
    STATUS_CHANGED = "StatusChanged"
    TICKET_RESOLVED = "TicketResolved"


# ========== Status groups ==========

TERMINAL_STATUSES = frozenset({TicketStatus.RESOLVED, TicketStatus.CLOSED})
ACTIVE_STATUSES = frozenset({TicketStatus.OPEN, TicketStatus.IN_PROGRESS})
