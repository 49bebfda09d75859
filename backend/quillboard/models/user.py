"""
Quillboard Backend: User SQLAlchemy Model
==========================================

What:  ORM model for the `users` table.
Who:   Written by AuthService at registration; read by Access Control when a
       bearer token is resolved to an identity.

Table Design:
    - email is stored lower-cased and carries a unique constraint, so
      duplicate registrations are caught both in the service and by the DB
    - password_hash holds a bcrypt hash; the plain password is never stored
    - role is a short string ('user' | 'admin') so SQLite and PostgreSQL
      share one schema
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from quillboard.database import Base


class UserRole(str, enum.Enum):
    """Roles a user can hold. Registration always assigns USER."""

    USER = "user"
    ADMIN = "admin"


class User(Base):
    """
    A registered author or reader.

    Lifecycle:
        Created at registration with role 'user'. Admins are promoted out of
        band (directly in the database). Users are never deleted by the API.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(50), nullable=False)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Lower-cased login email",
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash (passlib)",
    )

    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=UserRole.USER.value,
        comment="user | admin",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
