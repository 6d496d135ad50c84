"""
RICHIEAT Backend — Session Issuer Unit Tests
==============================================

What we test:
    ✅ Register then verify the issued token
    ✅ Duplicate email (case-insensitive) is rejected, also when the
       unique index catches it
    ✅ Expiry boundary: valid at exp, expired one second later
    ✅ Tampered and foreign-secret tokens are rejected
    ✅ Stored hash never equals the plaintext password
    ✅ Unknown email and wrong password fail identically
"""

import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from sqlalchemy import func, select

from richieat.exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    TokenExpiredError,
    TokenInvalidError,
)
from richieat.models.advisor import Advisor
from richieat.schemas.advisor import RegisterRequest
from richieat.services.session_issuer import SessionIssuer

SECRET = "unit-test-secret-0123456789"
ISSUED_AT = datetime(2030, 1, 1, tzinfo=timezone.utc)
TTL = timedelta(days=7)


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def make_issuer(clock=None) -> SessionIssuer:
    return SessionIssuer(secret_key=SECRET, expires_in=TTL, bcrypt_rounds=4, clock=clock)


def make_registration(**overrides) -> RegisterRequest:
    data = {
        "first_name": "Grace",
        "last_name": "Hopper",
        "email": "grace@example.com",
        "password": "cobol-rules",
    }
    data.update(overrides)
    return RegisterRequest(**data)


class TestTokens:

    def test_issue_then_verify_returns_subject(self):
        issuer = make_issuer()
        advisor_id = uuid.uuid4()
        assert issuer.verify(issuer.issue(advisor_id)) == advisor_id

    def test_token_valid_at_exact_expiry(self):
        clock = FakeClock(ISSUED_AT)
        issuer = make_issuer(clock)
        advisor_id = uuid.uuid4()
        token = issuer.issue(advisor_id)

        clock.now = ISSUED_AT + TTL
        assert issuer.verify(token) == advisor_id

    def test_token_expired_one_second_after_expiry(self):
        clock = FakeClock(ISSUED_AT)
        issuer = make_issuer(clock)
        token = issuer.issue(uuid.uuid4())

        clock.now = ISSUED_AT + TTL + timedelta(seconds=1)
        with pytest.raises(TokenExpiredError):
            issuer.verify(token)

    def test_tampered_token_rejected(self):
        issuer = make_issuer()
        token = issuer.issue(uuid.uuid4())
        header, payload, signature = token.split(".")
        flipped = signature[:-2] + ("AA" if signature[-2:] != "AA" else "BB")

        with pytest.raises(TokenInvalidError):
            issuer.verify(f"{header}.{payload}.{flipped}")

    def test_token_signed_with_other_secret_rejected(self):
        forged = jwt.encode(
            {"sub": str(uuid.uuid4()), "exp": 4102444800},
            "some-other-secret-entirely",
            algorithm="HS256",
        )
        with pytest.raises(TokenInvalidError):
            make_issuer().verify(forged)

    def test_garbage_token_rejected(self):
        with pytest.raises(TokenInvalidError):
            make_issuer().verify("not-a-token")

    def test_missing_exp_rejected(self):
        token = jwt.encode({"sub": str(uuid.uuid4())}, SECRET, algorithm="HS256")
        with pytest.raises(TokenInvalidError):
            make_issuer().verify(token)

    def test_non_uuid_subject_rejected(self):
        token = jwt.encode({"sub": "42", "exp": 4102444800}, SECRET, algorithm="HS256")
        with pytest.raises(TokenInvalidError):
            make_issuer().verify(token)


class TestPasswords:

    def test_hash_is_not_plaintext(self):
        issuer = make_issuer()
        hashed = issuer.hash_password("hunter22")
        assert hashed != "hunter22"
        assert issuer.check_password("hunter22", hashed)
        assert not issuer.check_password("hunter23", hashed)

    def test_malformed_hash_is_a_mismatch(self):
        assert make_issuer().check_password("anything", "not-bcrypt") is False

    def test_overlong_password_is_a_mismatch(self):
        issuer = make_issuer()
        hashed = issuer.hash_password("hunter22")
        assert issuer.check_password("hunter22" + "x" * 80, hashed) is False

    @pytest.mark.asyncio
    async def test_overlong_password_unknown_email_is_invalid_credentials(self, db_session):
        with pytest.raises(InvalidCredentialsError):
            await make_issuer().login(db_session, "nobody@example.com", "x" * 80)


class TestAccounts:

    @pytest.mark.asyncio
    async def test_register_then_verify(self, db_session):
        issuer = make_issuer()
        token, advisor = await issuer.register(db_session, make_registration())

        assert issuer.verify(token) == advisor.id
        assert advisor.email == "grace@example.com"
        assert advisor.password_hash != "cobol-rules"

    @pytest.mark.asyncio
    async def test_register_duplicate_email_case_insensitive(self, db_session):
        issuer = make_issuer()
        await issuer.register(db_session, make_registration())

        with pytest.raises(DuplicateEmailError):
            await issuer.register(db_session, make_registration(email="GRACE@example.com"))

    @pytest.mark.asyncio
    async def test_unique_index_race_maps_to_duplicate_email(self, db_session, monkeypatch):
        issuer = make_issuer()
        await issuer.register(db_session, make_registration())
        await db_session.commit()

        # A concurrent insert landed between the lookup and the flush
        async def nobody(db, email):
            return None

        monkeypatch.setattr(issuer, "_find_by_email", nobody)

        with pytest.raises(DuplicateEmailError):
            await issuer.register(db_session, make_registration(email="GRACE@example.com"))

        await db_session.rollback()
        count = await db_session.scalar(select(func.count()).select_from(Advisor))
        assert count == 1

    @pytest.mark.asyncio
    async def test_login_stamps_last_login(self, db_session):
        issuer = make_issuer(FakeClock(ISSUED_AT))
        await issuer.register(db_session, make_registration())

        token, advisor = await issuer.login(db_session, "Grace@Example.com", "cobol-rules")

        assert issuer.verify(token) == advisor.id
        assert advisor.last_login_at == ISSUED_AT

    @pytest.mark.asyncio
    async def test_unknown_email_and_wrong_password_look_the_same(self, db_session):
        issuer = make_issuer()
        await issuer.register(db_session, make_registration())

        with pytest.raises(InvalidCredentialsError) as wrong_password:
            await issuer.login(db_session, "grace@example.com", "wrong-password")
        with pytest.raises(InvalidCredentialsError) as unknown_email:
            await issuer.login(db_session, "nobody@example.com", "cobol-rules")

        assert wrong_password.value.message == unknown_email.value.message
        assert wrong_password.value.status_code == unknown_email.value.status_code == 401

    @pytest.mark.asyncio
    async def test_get_advisor_missing_raises_token_invalid(self, mock_db_session):
        mock_db_session.get.return_value = None

        with pytest.raises(TokenInvalidError, match="advisor not found"):
            await make_issuer().get_advisor(mock_db_session, uuid.uuid4())
