"""
RICHIEAT Backend — Advisor & Auth Schemas
===========================================

What:  Request/response contracts for /api/auth.
Why:   The response models are the only way advisor data leaves the server,
       so `password_hash` can never be serialized by accident.
"""

import uuid
from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, EmailStr, Field, field_validator

from richieat.schemas.common import ApiModel

# bcrypt only looks at the first 72 bytes of a password.
MAX_PASSWORD_BYTES = 72


def _check_password_bytes(v: str) -> str:
    if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return v


# ══════════════════════════════════════════════════════════════════════════
# Requests
# ══════════════════════════════════════════════════════════════════════════


class LoginRequest(ApiModel):
    email: EmailStr
    password: Annotated[str, AfterValidator(_check_password_bytes)] = Field(min_length=1)


class RegisterRequest(ApiModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: Annotated[str, AfterValidator(_check_password_bytes)] = Field(min_length=6)
    phone: Optional[str] = Field(default=None, max_length=30)
    firm_name: Optional[str] = Field(default=None, max_length=200)

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped


class ProfileUpdateRequest(ApiModel):
    """Partial update; omitted fields are left untouched."""
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=30)
    firm_name: Optional[str] = Field(default=None, max_length=200)


# ══════════════════════════════════════════════════════════════════════════
# Responses
# ══════════════════════════════════════════════════════════════════════════


class AdvisorResponse(ApiModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    firm_name: Optional[str] = None
    created_at: datetime
    last_login_at: Optional[datetime] = None


class AuthResponse(ApiModel):
    """Returned by login and register."""
    success: bool = True
    message: str
    token: str
    advisor: AdvisorResponse


class ProfileResponse(ApiModel):
    success: bool = True
    advisor: AdvisorResponse
