"""
RICHIEAT Backend — Auth Route Handlers
========================================

What:  POST /api/auth/register, POST /api/auth/login, GET/PUT
       /api/auth/profile, POST /api/auth/logout.
How:   Thin handlers: validate the body (pydantic), delegate to the
       SessionIssuer, shape the JSON. Failures are raised as AuthError
       subclasses and rendered by the global handlers.

Logout:
    Tokens are not revoked server-side; the endpoint exists so the client
    has a uniform call to make and so logouts appear in the logs.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from richieat.database import get_db_session
from richieat.dependencies import get_current_advisor
from richieat.models.advisor import Advisor
from richieat.schemas.advisor import (
    AdvisorResponse,
    AuthResponse,
    LoginRequest,
    ProfileResponse,
    ProfileUpdateRequest,
    RegisterRequest,
)
from richieat.schemas.common import ErrorResponse, MessageResponse
from richieat.services.session_issuer import session_issuer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=AuthResponse,
    responses={
        400: {"description": "Invalid registration data", "model": ErrorResponse},
        409: {"description": "Email already registered", "model": ErrorResponse},
    },
    summary="Register a new advisor",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    token, advisor = await session_issuer.register(db, body)
    return AuthResponse(
        message="Advisor registered successfully",
        token=token,
        advisor=AdvisorResponse.model_validate(advisor),
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        401: {"description": "Invalid email or password", "model": ErrorResponse},
    },
    summary="Log in with email and password",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    token, advisor = await session_issuer.login(db, body.email, body.password)
    return AuthResponse(
        message="Login successful",
        token=token,
        advisor=AdvisorResponse.model_validate(advisor),
    )


@router.get(
    "/profile",
    response_model=ProfileResponse,
    responses={401: {"description": "Missing, invalid or expired token", "model": ErrorResponse}},
    summary="Current advisor profile",
)
async def get_profile(advisor: Advisor = Depends(get_current_advisor)) -> ProfileResponse:
    return ProfileResponse(advisor=AdvisorResponse.model_validate(advisor))


@router.put(
    "/profile",
    response_model=ProfileResponse,
    responses={401: {"description": "Missing, invalid or expired token", "model": ErrorResponse}},
    summary="Update the current advisor profile",
)
async def update_profile(
    body: ProfileUpdateRequest,
    advisor: Advisor = Depends(get_current_advisor),
    db: AsyncSession = Depends(get_db_session),
) -> ProfileResponse:
    advisor = await session_issuer.update_profile(db, advisor, body)
    return ProfileResponse(advisor=AdvisorResponse.model_validate(advisor))


@router.post(
    "/logout",
    response_model=MessageResponse,
    responses={401: {"description": "Missing, invalid or expired token", "model": ErrorResponse}},
    summary="Log out (client-side session clear)",
)
async def logout(advisor: Advisor = Depends(get_current_advisor)) -> MessageResponse:
    logger.info("Advisor logged out: %s", advisor.id)
    return MessageResponse(message="Logged out successfully")
