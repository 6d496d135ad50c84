"""
RICHIEAT Backend — Error Envelope
===================================

Builds the JSON error response used by every layer (pipeline stages and
the global exception handlers), so all errors share one shape and always
carry the request's correlation ID in both the body and the header.
"""

from typing import Any, Dict, List, Optional

from fastapi.responses import JSONResponse
from starlette.types import Scope

from richieat.middleware.request_id import REQUEST_ID_HEADER, request_id_var


def scope_request_id(scope: Scope) -> str:
    state = scope.get("state") or {}
    return state.get("request_id") or request_id_var.get("")


def error_response(
    scope: Scope,
    status_code: int,
    error: str,
    message: str,
    details: Optional[List[Any]] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    rid = scope_request_id(scope)
    content: Dict[str, Any] = {
        "success": False,
        "error": error,
        "message": message,
        "requestId": rid,
    }
    if details:
        content["details"] = details
    if extra:
        content.update(extra)
    headers = {REQUEST_ID_HEADER: rid} if rid else None
    return JSONResponse(status_code=status_code, content=content, headers=headers)
