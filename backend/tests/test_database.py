"""
RICHIEAT Backend — Database Connectivity Tests
================================================

connect_with_retry is driven with a mocked engine whose connect() fails a
set number of times; the retry delay is zero so the test runs instantly.
"""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import InvalidRequestError

from richieat import database
from richieat.models.advisor import Advisor


def flaky_engine(failures: int):
    """Engine stand-in whose connect() raises OSError `failures` times."""
    calls = {"count": 0}
    conn = MagicMock()
    conn.execute = AsyncMock()

    @asynccontextmanager
    async def connect():
        calls["count"] += 1
        if calls["count"] <= failures:
            raise OSError("connection refused")
        yield conn

    engine = MagicMock()
    engine.connect = connect
    return engine, calls


class TestConnectWithRetry:

    @pytest.mark.asyncio
    async def test_retries_until_connected(self):
        engine, calls = flaky_engine(failures=2)

        await database.connect_with_retry(target=engine, retry_delay=0)

        assert calls["count"] == 3
        assert database.connection_state.connected is True
        assert database.connection_state.attempts == 3

    @pytest.mark.asyncio
    async def test_first_try_success(self):
        engine, calls = flaky_engine(failures=0)

        await database.connect_with_retry(target=engine, retry_delay=0)

        assert calls["count"] == 1


class TestPing:

    @pytest.mark.asyncio
    async def test_ping_false_when_unreachable(self):
        engine, _ = flaky_engine(failures=1)
        assert await database.ping(engine) is False

    @pytest.mark.asyncio
    async def test_ping_true_on_real_database(self, db_engine):
        assert await database.ping(db_engine) is True


class TestSessionDependency:

    @pytest.mark.asyncio
    async def test_rolls_back_and_reraises(self, db_engine):
        dependency = database.get_db_session()
        session = await dependency.__anext__()

        with pytest.raises(RuntimeError):
            await dependency.athrow(RuntimeError("handler failed"))
        assert not session.in_transaction()


class TestRelationships:

    @pytest.mark.asyncio
    async def test_unloaded_clients_collection_refuses_implicit_io(self, session_factory):
        async with session_factory() as session:
            advisor = Advisor(
                first_name="Ada",
                last_name="Lovelace",
                email="ada@example.com",
                password_hash="x",
            )
            session.add(advisor)
            await session.commit()
            advisor_id = advisor.id

        async with session_factory() as session:
            loaded = await session.get(Advisor, advisor_id)
            with pytest.raises(InvalidRequestError):
                loaded.clients
