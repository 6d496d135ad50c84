"""
RICHIEAT Backend — Advisor SQLAlchemy Model
=============================================

What:  ORM model for the `advisors` table (the Credential Store).
Who:   Used by SessionIssuer for registration/login and by the auth routes.

Table Design:
    - UUID primary key: non-sequential, embedded as `sub` in session tokens
    - email: unique, stored lower-cased; the unique index is what makes
      duplicate registration atomic under concurrent requests
    - password_hash: bcrypt hash; the plaintext password is never stored
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from richieat.database import Base

if TYPE_CHECKING:
    from richieat.models.client import Client


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Advisor(Base):
    """
    An account-holding financial advisor.

    Lifecycle:
        1. Created by POST /api/auth/register
        2. Read on login and profile fetch; last_login_at stamped on login
        3. Profile fields updated by PUT /api/auth/profile
        4. Never deleted by the auth flow
    """

    __tablename__ = "advisors"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    firm_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )
    last_login_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    clients: Mapped[List["Client"]] = relationship(
        back_populates="advisor",
        cascade="all, delete-orphan",
        lazy="raise",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<Advisor(id={self.id}, email='{self.email}')>"
