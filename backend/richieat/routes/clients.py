"""
RICHIEAT Backend — Client Route Handlers
==========================================

What:  CRUD over the calling advisor's clients, onboarding invitations, and
       the public onboarding form endpoints.
Who:   Dashboard, clients page, client detail view and the onboarding form.

Route Inventory:
    GET    /api/clients                      list (filter: status, search)
    POST   /api/clients                      create
    POST   /api/clients/onboarding-link      create a pending client + link
    GET    /api/clients/onboarding/{token}   public: read the invitation
    POST   /api/clients/onboarding/{token}   public: submit the form
    GET    /api/clients/{client_id}          detail
    PUT    /api/clients/{client_id}          partial update
    DELETE /api/clients/{client_id}          delete
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from richieat.config import settings
from richieat.database import get_db_session
from richieat.dependencies import get_current_advisor
from richieat.models.advisor import Advisor
from richieat.schemas.client import (
    ClientCreate,
    ClientDetailResponse,
    ClientListResponse,
    ClientResponse,
    ClientUpdate,
    OnboardingLinkRequest,
    OnboardingLinkResponse,
    OnboardingSubmission,
    OnboardingView,
    OnboardingViewResponse,
)
from richieat.schemas.common import ErrorResponse, MessageResponse
from richieat.services.client_service import client_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/clients", tags=["Clients"])

_not_found = {404: {"description": "Client not found", "model": ErrorResponse}}


@router.get("", response_model=ClientListResponse, summary="List the advisor's clients")
async def list_clients(
    status: Optional[str] = Query(default=None, description="pending, active or inactive"),
    search: Optional[str] = Query(default=None, max_length=100),
    advisor: Advisor = Depends(get_current_advisor),
    db: AsyncSession = Depends(get_db_session),
) -> ClientListResponse:
    clients = await client_service.list_clients(db, advisor.id, status=status, search=search)
    return ClientListResponse(
        count=len(clients),
        clients=[ClientResponse.model_validate(c) for c in clients],
    )


@router.post(
    "",
    status_code=201,
    response_model=ClientDetailResponse,
    summary="Create a client",
)
async def create_client(
    body: ClientCreate,
    advisor: Advisor = Depends(get_current_advisor),
    db: AsyncSession = Depends(get_db_session),
) -> ClientDetailResponse:
    client = await client_service.create_client(db, advisor.id, body)
    return ClientDetailResponse(client=ClientResponse.model_validate(client))


@router.post(
    "/onboarding-link",
    status_code=201,
    response_model=OnboardingLinkResponse,
    summary="Invite a client to fill in the onboarding form",
)
async def create_onboarding_link(
    body: OnboardingLinkRequest,
    advisor: Advisor = Depends(get_current_advisor),
    db: AsyncSession = Depends(get_db_session),
) -> OnboardingLinkResponse:
    client, token = await client_service.create_onboarding_link(db, advisor.id, body)
    return OnboardingLinkResponse(
        client=ClientResponse.model_validate(client),
        onboarding_token=token,
        onboarding_url=f"{settings.frontend_url.rstrip('/')}/client-onboarding/{token}",
    )


@router.get(
    "/onboarding/{token}",
    response_model=OnboardingViewResponse,
    responses={404: {"description": "Unknown or used invitation", "model": ErrorResponse}},
    summary="Public: read an onboarding invitation",
)
async def get_onboarding(
    token: str,
    db: AsyncSession = Depends(get_db_session),
) -> OnboardingViewResponse:
    client, advisor = await client_service.get_onboarding(db, token)
    return OnboardingViewResponse(
        client=OnboardingView(
            first_name=client.first_name,
            last_name=client.last_name,
            email=client.email,
            advisor_name=advisor.full_name,
        )
    )


@router.post(
    "/onboarding/{token}",
    response_model=MessageResponse,
    responses={404: {"description": "Unknown or used invitation", "model": ErrorResponse}},
    summary="Public: submit the onboarding form",
)
async def submit_onboarding(
    token: str,
    body: OnboardingSubmission,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await client_service.complete_onboarding(db, token, body)
    return MessageResponse(message="Onboarding completed successfully")


@router.get(
    "/{client_id}",
    response_model=ClientDetailResponse,
    responses=_not_found,
    summary="Get one client",
)
async def get_client(
    client_id: UUID,
    advisor: Advisor = Depends(get_current_advisor),
    db: AsyncSession = Depends(get_db_session),
) -> ClientDetailResponse:
    client = await client_service.get_client(db, advisor.id, client_id)
    return ClientDetailResponse(client=ClientResponse.model_validate(client))


@router.put(
    "/{client_id}",
    response_model=ClientDetailResponse,
    responses=_not_found,
    summary="Update a client",
)
async def update_client(
    client_id: UUID,
    body: ClientUpdate,
    advisor: Advisor = Depends(get_current_advisor),
    db: AsyncSession = Depends(get_db_session),
) -> ClientDetailResponse:
    client = await client_service.update_client(db, advisor.id, client_id, body)
    return ClientDetailResponse(client=ClientResponse.model_validate(client))


@router.delete(
    "/{client_id}",
    response_model=MessageResponse,
    responses=_not_found,
    summary="Delete a client",
)
async def delete_client(
    client_id: UUID,
    advisor: Advisor = Depends(get_current_advisor),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await client_service.delete_client(db, advisor.id, client_id)
    return MessageResponse(message="Client deleted successfully")
