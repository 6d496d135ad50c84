"""
RICHIEAT Backend — Client SQLAlchemy Model
============================================

What:  ORM model for the `clients` table: people an advisor manages.
Who:   Used by ClientService for CRUD and onboarding.

Ownership:
    Every client belongs to exactly one advisor (advisor_id FK). All queries
    filter on advisor_id; the advisor id always comes from the verified
    session token, never from the request body.

Onboarding:
    A client can be created as `pending` with a random onboarding_token. The
    client fills in their details through the public onboarding form; on
    completion the status becomes `active` and the token is cleared.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional, TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from richieat.database import Base

if TYPE_CHECKING:
    from richieat.models.advisor import Advisor

CLIENT_STATUSES = ("pending", "active", "inactive")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Client(Base):
    """A client record owned by one advisor."""

    __tablename__ = "clients"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    advisor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("advisors.id", ondelete="CASCADE"),
        nullable=False,
    )

    first_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # pending → active | inactive
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")

    onboarding_token: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        unique=True,
    )
    onboarded_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

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

    advisor: Mapped["Advisor"] = relationship(back_populates="clients", lazy="raise")

    # Dashboard lists are always "this advisor's clients, newest first".
    __table_args__ = (
        Index("idx_clients_advisor_created", "advisor_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Client(id={self.id}, advisor_id={self.advisor_id}, "
            f"status='{self.status}')>"
        )
