"""
RICHIEAT Backend — Session Issuer
===================================

What:  Credential checks, advisor registration, and bearer token issue/verify.
How:   bcrypt for password hashing, PyJWT (HS256) for signed tokens.
Who:   Called by the auth routes and by the `get_current_advisor` dependency.

Token format:
    {"sub": "<advisor uuid>", "iat": <issued, unix seconds>, "exp": <expiry>}

    Signature checks happen inside PyJWT (HMAC compared with
    hmac.compare_digest). Expiry is checked here against an injectable clock:
    a token is valid up to and including `exp`, and expired strictly after.

Revocation:
    There is none. Logout only clears client-side state, so a token stays
    valid until it expires.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Tuple

import bcrypt
import jwt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from richieat.config import settings
from richieat.exceptions import (
    DatabaseError,
    DuplicateEmailError,
    InvalidCredentialsError,
    TokenExpiredError,
    TokenInvalidError,
)
from richieat.models.advisor import Advisor
from richieat.schemas.advisor import (
    MAX_PASSWORD_BYTES,
    ProfileUpdateRequest,
    RegisterRequest,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionIssuer:
    """
    Issues and verifies session tokens and owns the credential checks.

    Stateless apart from configuration: the database session is passed to
    each call, so one instance serves every request.
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        expires_in: Optional[timedelta] = None,
        bcrypt_rounds: Optional[int] = None,
        clock: Optional[Clock] = None,
    ):
        self.secret_key = secret_key or settings.jwt_secret
        self.algorithm = algorithm or settings.jwt_algorithm
        self.expires_in = expires_in or timedelta(minutes=settings.jwt_expires_minutes)
        self.bcrypt_rounds = bcrypt_rounds or settings.bcrypt_rounds
        self._clock = clock or _utcnow
        self._dummy_hash: Optional[bytes] = None

    # ── Passwords ─────────────────────────────────────────────────────────

    def hash_password(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def check_password(self, password: str, password_hash: str) -> bool:
        secret = password.encode("utf-8")
        if len(secret) > MAX_PASSWORD_BYTES:
            # Never hashed at registration, so it cannot match.
            self._burn_password_check(password)
            return False
        try:
            return bcrypt.checkpw(secret, password_hash.encode("utf-8"))
        except ValueError:
            # Malformed stored hash
            logger.error("Stored password hash is not a valid bcrypt hash")
            return False

    def _burn_password_check(self, password: str) -> None:
        """Spend one bcrypt check so unknown emails cost the same as wrong passwords."""
        if self._dummy_hash is None:
            self._dummy_hash = bcrypt.hashpw(
                b"richieat-unknown-account", bcrypt.gensalt(rounds=self.bcrypt_rounds)
            )
        bcrypt.checkpw(password.encode("utf-8")[:MAX_PASSWORD_BYTES], self._dummy_hash)

    # ── Tokens ────────────────────────────────────────────────────────────

    def issue(self, advisor_id: uuid.UUID) -> str:
        now = self._clock()
        payload = {
            "sub": str(advisor_id),
            "iat": int(now.timestamp()),
            "exp": int((now + self.expires_in).timestamp()),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> uuid.UUID:
        """
        Return the advisor id embedded in a valid token.

        Raises:
            TokenInvalidError: malformed token, bad signature, missing claims
            TokenExpiredError: the clock is strictly past the `exp` claim
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={
                    "require": ["sub", "exp"],
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidTokenError as e:
            raise TokenInvalidError(context={"reason": str(e)})

        exp = payload["exp"]
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            raise TokenInvalidError(context={"reason": "exp claim is not numeric"})
        if self._clock().timestamp() > exp:
            raise TokenExpiredError(context={"exp": exp})

        try:
            return uuid.UUID(str(payload["sub"]))
        except ValueError:
            raise TokenInvalidError(context={"reason": "sub claim is not an advisor id"})

    # ── Accounts ──────────────────────────────────────────────────────────

    async def register(
        self, db: AsyncSession, data: RegisterRequest
    ) -> Tuple[str, Advisor]:
        """
        Create an advisor and return a fresh session for it.

        The pre-check gives a clean error in the common case; the unique
        index on `advisors.email` catches the concurrent case.

        Raises:
            DuplicateEmailError: the email is already registered
            DatabaseError: the insert failed for another reason
        """
        email = data.email.lower()
        existing = await self._find_by_email(db, email)
        if existing is not None:
            logger.info("Registration rejected: email already registered")
            raise DuplicateEmailError(email=email)

        advisor = Advisor(
            first_name=data.first_name,
            last_name=data.last_name,
            email=email,
            phone=data.phone,
            firm_name=data.firm_name,
            password_hash=self.hash_password(data.password),
        )
        try:
            db.add(advisor)
            await db.flush()
        except IntegrityError:
            raise DuplicateEmailError(email=email)
        except SQLAlchemyError as e:
            logger.error("Database error registering advisor: %s", str(e))
            raise DatabaseError(context={"original_error": type(e).__name__})

        logger.info("Advisor registered: %s", advisor.id)
        return self.issue(advisor.id), advisor

    async def login(
        self, db: AsyncSession, email: str, password: str
    ) -> Tuple[str, Advisor]:
        """
        Check credentials and return a fresh session.

        Raises:
            InvalidCredentialsError: unknown email or wrong password; the two
                cases are indistinguishable to the caller
        """
        advisor = await self._find_by_email(db, email.lower())
        if advisor is None:
            self._burn_password_check(password)
            raise InvalidCredentialsError(context={"reason": "unknown_email"})
        if not self.check_password(password, advisor.password_hash):
            raise InvalidCredentialsError(
                context={"reason": "password_mismatch", "advisor_id": str(advisor.id)}
            )

        advisor.last_login_at = self._clock()
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Could not stamp last login for %s: %s", advisor.id, str(e))
            raise DatabaseError(context={"original_error": type(e).__name__})

        logger.info("Advisor logged in: %s", advisor.id)
        return self.issue(advisor.id), advisor

    async def get_advisor(self, db: AsyncSession, advisor_id: uuid.UUID) -> Advisor:
        """Load the advisor a verified token points at."""
        try:
            advisor = await db.get(Advisor, advisor_id)
        except SQLAlchemyError as e:
            logger.error("Database error loading advisor %s: %s", advisor_id, str(e))
            raise DatabaseError(context={"advisor_id": str(advisor_id)})
        if advisor is None:
            raise TokenInvalidError(
                message="Not authorized, advisor not found",
                context={"advisor_id": str(advisor_id)},
            )
        return advisor

    async def update_profile(
        self, db: AsyncSession, advisor: Advisor, changes: ProfileUpdateRequest
    ) -> Advisor:
        for field, value in changes.model_dump(exclude_unset=True).items():
            if value is None and field in ("first_name", "last_name"):
                continue
            setattr(advisor, field, value)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating advisor %s: %s", advisor.id, str(e))
            raise DatabaseError(context={"advisor_id": str(advisor.id)})
        return advisor

    async def _find_by_email(self, db: AsyncSession, email: str) -> Optional[Advisor]:
        try:
            result = await db.execute(select(Advisor).where(Advisor.email == email))
        except SQLAlchemyError as e:
            logger.error("Database error looking up advisor by email: %s", str(e))
            raise DatabaseError(context={"original_error": type(e).__name__})
        return result.scalar_one_or_none()


session_issuer = SessionIssuer()
