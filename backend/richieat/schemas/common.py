"""
RICHIEAT Backend — Shared Pydantic Schemas
============================================

What:  Base model and envelope schemas shared by every endpoint.
Why:   The frontend reads camelCase JSON (`requestId`, `firstName`); Python
       code uses snake_case. `ApiModel` maps between the two and FastAPI
       serializes response models by alias.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base for all API schemas: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(ApiModel):
    success: bool = True
    message: str


class FieldError(ApiModel):
    field: str
    message: str


class ErrorResponse(ApiModel):
    """
    Standardized error envelope for all API errors.

    Example:
        {
            "success": false,
            "error": "invalid_credentials",
            "message": "Invalid email or password",
            "requestId": "3f1c2a9e8b7d4c6f9a0b1c2d3e4f5a6b"
        }
    """
    success: bool = False
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[List[Any]] = Field(default=None, description="Field-level errors")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(ApiModel):
    """Returned by GET / for monitoring and load balancer health checks."""
    success: bool = True
    message: str
    version: str
    status: str = Field(description="active")
    timestamp: datetime
    environment: str
    database: str = Field(description="connected or disconnected")
    uptime: float = Field(description="Seconds since the process started")
