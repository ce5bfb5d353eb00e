"""
Scrol Backend — Request Transaction Tests
==========================================

What:  HTTP requests against a real SQLite database through the production
       get_db_session dependency. Only the token verifier and the notifier
       are patched.

What we test:
    ✅ /update followed by POST / returns the submitted values
    ✅ /block commits both BLOCKED edges
    ✅ An invalid token leaves the friends table untouched
    ✅ A failing commit answers 500 and persists nothing
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from scrol.exceptions import InvalidTokenError
from scrol.models import Candidate, Friend, FriendStatus


class FailingCommitSession(AsyncSession):
    async def commit(self):
        raise RuntimeError("database went away")


async def stored_edges(engine):
    factory = async_sessionmaker(engine, class_=AsyncSession)
    async with factory() as session:
        result = await session.execute(select(Friend))
        return {(f.candidate_id, f.friend_id): f.status for f in result.scalars().all()}


async def stored_candidate(engine, email):
    factory = async_sessionmaker(engine, class_=AsyncSession)
    async with factory() as session:
        result = await session.execute(select(Candidate).where(Candidate.email == email))
        return result.scalar_one()


@pytest.fixture
def as_alice():
    with patch("scrol.dependencies.token_verifier") as mock_verifier:
        mock_verifier.verify = AsyncMock(return_value="alice@example.com")
        yield mock_verifier


@pytest.fixture
def mock_notifier():
    with patch("scrol.services.friend_service.notifier") as notifier:
        notifier.send = AsyncMock()
        yield notifier


class TestProfileRoundTrip:

    @pytest.mark.asyncio
    async def test_update_then_view(self, live_client, db_engine, seed_candidates, as_alice):
        submitted = {"name": "Alice Wong", "gender": "F", "sector": "Finance", "jobTitle": "Analyst"}

        update = await live_client.post("/update", json={"token": "t", "candidate": submitted})
        view = await live_client.post("/", json={"token": "t"})

        assert update.status_code == 200
        assert view.status_code == 200
        body = view.json()
        assert body["name"] == "Alice Wong"
        assert body["sector"] == "Finance"
        assert body["jobTitle"] == "Analyst"

        stored = await stored_candidate(db_engine, "alice@example.com")
        assert stored.name == "Alice Wong"
        assert stored.company is None


class TestFriendWrites:

    @pytest.mark.asyncio
    async def test_block_commits_both_directions(self, live_client, db_engine, db_session, seed_candidates, as_alice):
        alice, bob = seed_candidates["alice"], seed_candidates["bob"]
        now = datetime.now(timezone.utc)
        db_session.add_all([
            Friend(candidate_id=alice.id, friend_id=bob.id, created=now, status=FriendStatus.ACTIVE.value),
            Friend(candidate_id=bob.id, friend_id=alice.id, created=now, status=FriendStatus.ACTIVE.value),
        ])
        await db_session.commit()

        response = await live_client.post(f"/block?friendId={bob.id}", json={"token": "t"})

        assert response.status_code == 200
        assert await stored_edges(db_engine) == {
            (alice.id, bob.id): "BLOCKED",
            (bob.id, alice.id): "BLOCKED",
        }

    @pytest.mark.asyncio
    async def test_addfriend_commits(self, live_client, db_engine, seed_candidates, as_alice, mock_notifier):
        alice, bob = seed_candidates["alice"], seed_candidates["bob"]

        response = await live_client.post(f"/addfriend?friendId={bob.id}", json={"token": "t"})

        assert response.status_code == 200
        assert await stored_edges(db_engine) == {(alice.id, bob.id): "ACTIVE"}
        mock_notifier.send.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_invalid_token_changes_nothing(self, live_client, db_engine, seed_candidates, mock_notifier):
        bob = seed_candidates["bob"]

        with patch("scrol.dependencies.token_verifier") as mock_verifier:
            mock_verifier.verify = AsyncMock(side_effect=InvalidTokenError())
            added = await live_client.post(f"/addfriend?friendId={bob.id}", json={"token": "bad"})
            blocked = await live_client.post(f"/block?friendId={bob.id}", json={"token": "bad"})

        assert added.status_code == 400
        assert blocked.status_code == 400
        assert await stored_edges(db_engine) == {}
        mock_notifier.send.assert_not_awaited()


class TestCommitFailure:

    @pytest.mark.asyncio
    async def test_failed_commit_is_a_500(self, live_client, db_engine, seed_candidates, as_alice, mock_notifier):
        bob = seed_candidates["bob"]
        failing = async_sessionmaker(db_engine, class_=FailingCommitSession, expire_on_commit=False)

        with patch("scrol.database.async_session_factory", failing):
            response = await live_client.post(f"/addfriend?friendId={bob.id}", json={"token": "t"})

        assert response.status_code == 500
        assert response.json()["error"] == "Internal Server Error"
        assert await stored_edges(db_engine) == {}

    @pytest.mark.asyncio
    async def test_failed_commit_on_update(self, live_client, db_engine, seed_candidates, as_alice):
        failing = async_sessionmaker(db_engine, class_=FailingCommitSession, expire_on_commit=False)

        with patch("scrol.database.async_session_factory", failing):
            response = await live_client.post(
                "/update", json={"token": "t", "candidate": {"name": "Nobody"}}
            )

        assert response.status_code == 500
        stored = await stored_candidate(db_engine, "alice@example.com")
        assert stored.name == "Alice Tan"
