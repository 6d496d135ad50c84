"""
RICHIEAT Backend — Client Schemas
===================================

What:  Request/response contracts for /api/clients and the public
       onboarding form.
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import EmailStr, Field

from richieat.schemas.common import ApiModel

ClientStatus = Literal["pending", "active", "inactive"]


class ClientCreate(ApiModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=30)
    notes: Optional[str] = None
    status: ClientStatus = "active"


class ClientUpdate(ApiModel):
    """Partial update; omitted fields are left untouched."""
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=30)
    notes: Optional[str] = None
    status: Optional[ClientStatus] = None


class ClientResponse(ApiModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None
    status: str
    onboarded_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class ClientDetailResponse(ApiModel):
    success: bool = True
    client: ClientResponse


class ClientListResponse(ApiModel):
    success: bool = True
    count: int
    clients: List[ClientResponse]


# ── Onboarding ────────────────────────────────────────────────────────────


class OnboardingLinkRequest(ApiModel):
    """Optional pre-filled details for the invited client."""
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    email: Optional[EmailStr] = None


class OnboardingLinkResponse(ApiModel):
    success: bool = True
    client: ClientResponse
    onboarding_token: str
    onboarding_url: str


class OnboardingView(ApiModel):
    """What the public onboarding form may see: no notes, no ids."""
    first_name: str
    last_name: str
    email: Optional[str] = None
    advisor_name: str


class OnboardingViewResponse(ApiModel):
    success: bool = True
    client: OnboardingView


class OnboardingSubmission(ApiModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=30)
