"""
RICHIEAT Backend — Route Dependencies
=======================================

What:  `get_current_advisor`, the protected-route dependency.
How:   Reads the bearer token, verifies it with the SessionIssuer, loads the
       advisor and records the advisor id on the request so the access log
       can attribute the request.
"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from richieat.database import get_db_session
from richieat.exceptions import TokenInvalidError
from richieat.models.advisor import Advisor
from richieat.services.session_issuer import session_issuer

# auto_error=False: a missing header becomes our 401 envelope, not FastAPI's 403.
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_advisor(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> Advisor:
    if credentials is None or not credentials.credentials:
        raise TokenInvalidError(message="Not authorized, no token")

    advisor_id = session_issuer.verify(credentials.credentials)
    advisor = await session_issuer.get_advisor(db, advisor_id)
    request.state.advisor_id = str(advisor.id)
    return advisor
