"""
RICHIEAT Backend — Client Service
===================================

What:  CRUD over an advisor's clients plus the invitation/onboarding flow.
Who:   Called by the /api/clients route handlers.

Scoping:
    Every authenticated operation takes the advisor id from the verified
    session and filters on it. A client owned by someone else is reported
    exactly like a missing one (NotFoundError).

Onboarding Flow:
    1. Advisor requests an onboarding link → pending client + random token
    2. Client opens /client-onboarding/<token> → public read of the invite
    3. Client submits the form → details saved, status=active, token cleared
"""

import logging
import secrets
import uuid
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from richieat.exceptions import DatabaseError, NotFoundError, ValidationError
from richieat.models.advisor import Advisor
from richieat.models.client import CLIENT_STATUSES, Client
from richieat.schemas.client import (
    ClientCreate,
    ClientUpdate,
    OnboardingLinkRequest,
    OnboardingSubmission,
)

logger = logging.getLogger(__name__)


class ClientService:
    """Business logic for client records. Stateless; one shared instance."""

    async def list_clients(
        self,
        db: AsyncSession,
        advisor_id: uuid.UUID,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Client]:
        if status is not None and status not in CLIENT_STATUSES:
            raise ValidationError(
                message=f"Invalid status '{status}'. Must be one of: {', '.join(CLIENT_STATUSES)}",
                field="status",
            )

        query = select(Client).where(Client.advisor_id == advisor_id)
        if status:
            query = query.where(Client.status == status)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(
                or_(
                    Client.first_name.ilike(pattern),
                    Client.last_name.ilike(pattern),
                    Client.email.ilike(pattern),
                )
            )
        query = query.order_by(Client.created_at.desc())

        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Database error listing clients for %s: %s", advisor_id, str(e))
            raise DatabaseError(
                message="Could not retrieve clients. Please try again.",
                context={"advisor_id": str(advisor_id)},
            )
        return list(result.scalars().all())

    async def create_client(
        self, db: AsyncSession, advisor_id: uuid.UUID, data: ClientCreate
    ) -> Client:
        client = Client(advisor_id=advisor_id, **data.model_dump())
        await self._flush(db, client, "creating client")
        logger.info("Client %s created for advisor %s", client.id, advisor_id)
        return client

    async def get_client(
        self, db: AsyncSession, advisor_id: uuid.UUID, client_id: uuid.UUID
    ) -> Client:
        try:
            result = await db.execute(
                select(Client).where(
                    Client.id == client_id,
                    Client.advisor_id == advisor_id,
                )
            )
        except SQLAlchemyError as e:
            logger.error("Database error fetching client %s: %s", client_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the client. Please try again.",
                context={"client_id": str(client_id)},
            )
        client = result.scalar_one_or_none()
        if client is None:
            raise NotFoundError(resource="client", resource_id=str(client_id))
        return client

    async def update_client(
        self,
        db: AsyncSession,
        advisor_id: uuid.UUID,
        client_id: uuid.UUID,
        changes: ClientUpdate,
    ) -> Client:
        client = await self.get_client(db, advisor_id, client_id)
        for field, value in changes.model_dump(exclude_unset=True).items():
            if value is None and field in ("first_name", "last_name", "status"):
                continue
            setattr(client, field, value)
        await self._flush(db, client, "updating client")
        return client

    async def delete_client(
        self, db: AsyncSession, advisor_id: uuid.UUID, client_id: uuid.UUID
    ) -> None:
        client = await self.get_client(db, advisor_id, client_id)
        try:
            await db.delete(client)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting client %s: %s", client_id, str(e))
            raise DatabaseError(context={"client_id": str(client_id)})
        logger.info("Client %s deleted by advisor %s", client_id, advisor_id)

    # ── Onboarding ────────────────────────────────────────────────────────

    async def create_onboarding_link(
        self,
        db: AsyncSession,
        advisor_id: uuid.UUID,
        data: OnboardingLinkRequest,
    ) -> Tuple[Client, str]:
        token = secrets.token_urlsafe(32)
        client = Client(
            advisor_id=advisor_id,
            first_name=data.first_name or "",
            last_name=data.last_name or "",
            email=data.email,
            status="pending",
            onboarding_token=token,
        )
        await self._flush(db, client, "creating onboarding invite")
        logger.info("Onboarding invite created: client %s", client.id)
        return client, token

    async def get_onboarding(
        self, db: AsyncSession, token: str
    ) -> Tuple[Client, Advisor]:
        try:
            result = await db.execute(
                select(Client, Advisor)
                .join(Advisor, Client.advisor_id == Advisor.id)
                .where(Client.onboarding_token == token)
            )
        except SQLAlchemyError as e:
            logger.error("Database error resolving onboarding token: %s", str(e))
            raise DatabaseError()
        row = result.first()
        if row is None:
            raise NotFoundError(resource="onboarding invitation")
        return row[0], row[1]

    async def complete_onboarding(
        self, db: AsyncSession, token: str, submission: OnboardingSubmission
    ) -> Client:
        client, _ = await self.get_onboarding(db, token)
        client.first_name = submission.first_name
        client.last_name = submission.last_name
        client.email = submission.email
        client.phone = submission.phone
        client.status = "active"
        client.onboarding_token = None
        client.onboarded_at = datetime.now(timezone.utc)
        await self._flush(db, client, "completing onboarding")
        logger.info("Client %s completed onboarding", client.id)
        return client

    async def _flush(self, db: AsyncSession, client: Client, action: str) -> None:
        try:
            db.add(client)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error %s: %s", action, str(e))
            raise DatabaseError(context={"original_error": type(e).__name__})


client_service = ClientService()
