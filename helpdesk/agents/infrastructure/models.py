"""
Agent Infrastructure Models
===========================

SQLAlchemy ORM model for users and agents.
"""

from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from helpdesk.config import Category, UserRole
from helpdesk.infrastructure.database import Base


class UserModel(Base):
    """
    Database model for User entity.

    Maps to the 'users' table. ``assigned_tickets`` is only ever written
    through a conditional UPDATE (compare-and-increment).
    """
    __tablename__ = "users"

    # Identity provider id
    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    role: Mapped[UserRole] = mapped_column(String(20), nullable=False, default=UserRole.USER, index=True)
    department: Mapped[Optional[Category]] = mapped_column(String(20), nullable=True, index=True)

    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    assigned_tickets: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("assigned_tickets >= 0", name="ck_users_assigned_tickets_non_negative"),
    )
