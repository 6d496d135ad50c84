"""
RICHIEAT Backend — Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for the different error scenarios.
How:   Each exception carries a message, an optional context dict, an HTTP
       status and a machine-readable error code. Global exception handlers
       (registered in main.py) turn them into the JSON error envelope:

           {"success": false, "error": <code>, "message": ..., "requestId": ...}

Exception Hierarchy:
    RichieatError (base)
    ├── ValidationError               → 400 Bad Request
    ├── AuthError                     → 401 Unauthorized
    │   ├── InvalidCredentialsError   → 401
    │   ├── DuplicateEmailError       → 409 Conflict
    │   ├── TokenInvalidError         → 401
    │   └── TokenExpiredError         → 401
    ├── NotFoundError                 → 404 Not Found
    ├── PayloadTooLargeError          → 413 Payload Too Large
    └── DatabaseError                 → 500 Internal Server Error

Anything outside the hierarchy is answered by the catch-all handler (500).
"""

from typing import Any, Dict, Optional


class RichieatError(Exception):
    """
    Base exception for all RICHIEAT application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(RichieatError):
    """Client input failed validation (400)."""

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthError(RichieatError):
    """
    Authentication failed.

    The concrete subclasses name the reason; handlers only need the base
    class because status and code travel with the instance.
    """

    status_code = 401
    error_code = "auth_error"

    def __init__(
        self,
        message: str = "Not authorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidCredentialsError(AuthError):
    error_code = "invalid_credentials"

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Invalid email or password", context=context)


class DuplicateEmailError(AuthError):
    status_code = 409
    error_code = "duplicate_email"

    def __init__(self, email: str = "", context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        if email:
            ctx["email"] = email
        super().__init__(
            message="An advisor with this email already exists", context=ctx
        )


class TokenInvalidError(AuthError):
    error_code = "token_invalid"

    def __init__(
        self,
        message: str = "Not authorized, token invalid",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class TokenExpiredError(AuthError):
    error_code = "token_expired"

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Not authorized, token expired", context=context)


class NotFoundError(RichieatError):
    """
    Raised when a requested resource does not exist.

    Also used for resources owned by another advisor, so existence of
    foreign records is never disclosed.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class PayloadTooLargeError(RichieatError):
    """Request body exceeded the fixed size ceiling (413)."""

    status_code = 413
    error_code = "payload_too_large"

    def __init__(self, limit: int, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["limit_bytes"] = limit
        super().__init__(
            message=f"Request body exceeds the {limit // (1024 * 1024)}MB limit",
            context=ctx,
        )
        self.limit = limit


class DatabaseError(RichieatError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; the context
    (constraint names, original exception type) is logged server-side only.
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
