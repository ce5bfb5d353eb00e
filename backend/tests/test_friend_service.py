"""
Scrol Backend — Friend Service Tests
=====================================

What:  Search, add, accept, block and list against a real SQLite database;
       notifications are patched out.

What we test:
    ✅ Search is case-insensitive over email and name; wildcards are literal
    ✅ Add inserts exactly one edge and notifies the friend
    ✅ Add with an unknown user inserts nothing
    ✅ Notification or duplicate-edge failure → OperationFailedError
    ✅ Accept flips a PENDING request and creates the reverse edge
    ✅ Block marks both directions BLOCKED; unknown caller changes nothing
    ✅ Friend list covers both directions, ACTIVE only, paginated
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from sqlalchemy import select

from scrol.exceptions import CandidateNotFoundError, NotificationError, OperationFailedError
from scrol.models import Candidate, Friend, FriendStatus
from scrol.services.friend_service import FriendService, friend_request_message


async def all_edges(db):
    result = await db.execute(select(Friend))
    return {(f.candidate_id, f.friend_id): f.status for f in result.scalars().all()}


def edge(owner, peer, status=FriendStatus.ACTIVE):
    return Friend(
        candidate_id=owner.id,
        friend_id=peer.id,
        created=datetime.now(timezone.utc),
        status=status.value,
    )


class TestFind:

    def setup_method(self):
        self.service = FriendService()

    @pytest.mark.asyncio
    async def test_matches_name_case_insensitive(self, db_session, seed_candidates):
        hits = await self.service.find(db_session, "alice")
        assert [h.email for h in hits] == ["alice@example.com"]

    @pytest.mark.asyncio
    async def test_matches_email_substring(self, db_session, seed_candidates):
        hits = await self.service.find(db_session, "EXAMPLE.COM")
        assert {h.email for h in hits} == {"alice@example.com", "bob@example.com", "carol@example.com"}

    @pytest.mark.asyncio
    async def test_wildcards_are_literal(self, db_session, seed_candidates):
        assert await self.service.find(db_session, "%") == []
        assert await self.service.find(db_session, "_") == []

    @pytest.mark.asyncio
    async def test_store_failure(self, mock_db_session):
        mock_db_session.execute = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(OperationFailedError, match="Unable to run find query"):
            await self.service.find(mock_db_session, "x")


class TestAddFriend:

    def setup_method(self):
        self.service = FriendService()

    @pytest.mark.asyncio
    async def test_creates_one_active_edge_and_notifies(self, db_session, seed_candidates):
        alice, bob = seed_candidates["alice"], seed_candidates["bob"]

        with patch("scrol.services.friend_service.notifier") as mock_notifier:
            mock_notifier.send = AsyncMock()
            result = await self.service.add_friend(db_session, bob.id, alice.email)

        assert result.message == "Friend added successfully"
        assert await all_edges(db_session) == {(alice.id, bob.id): "ACTIVE"}
        mock_notifier.send.assert_awaited_once_with(bob.email, friend_request_message("Alice Tan"))

    @pytest.mark.asyncio
    async def test_pending_when_accept_required(self, db_session, seed_candidates):
        alice, bob = seed_candidates["alice"], seed_candidates["bob"]

        with patch("scrol.services.friend_service.notifier") as mock_notifier:
            mock_notifier.send = AsyncMock()
            await self.service.add_friend(db_session, bob.id, alice.email, require_accept=True)

        assert await all_edges(db_session) == {(alice.id, bob.id): "PENDING"}

    @pytest.mark.asyncio
    async def test_unknown_friend_inserts_nothing(self, db_session, seed_candidates):
        with patch("scrol.services.friend_service.notifier") as mock_notifier:
            mock_notifier.send = AsyncMock()
            with pytest.raises(CandidateNotFoundError, match="Users do not exist"):
                await self.service.add_friend(db_session, 9999, "alice@example.com")

        assert await all_edges(db_session) == {}
        mock_notifier.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_caller_inserts_nothing(self, db_session, seed_candidates):
        with pytest.raises(CandidateNotFoundError, match="Users do not exist"):
            await self.service.add_friend(db_session, seed_candidates["bob"].id, "ghost@example.com")

        assert await all_edges(db_session) == {}

    @pytest.mark.asyncio
    async def test_notification_failure(self, db_session, seed_candidates):
        alice, bob = seed_candidates["alice"], seed_candidates["bob"]

        with patch("scrol.services.friend_service.notifier") as mock_notifier:
            mock_notifier.send = AsyncMock(side_effect=NotificationError())
            with pytest.raises(OperationFailedError, match="Unable to add friend"):
                await self.service.add_friend(db_session, bob.id, alice.email)

        # The request transaction rolls the insert back
        await db_session.rollback()
        assert await all_edges(db_session) == {}

    @pytest.mark.asyncio
    async def test_duplicate_edge(self, db_session, seed_candidates):
        alice, bob = seed_candidates["alice"], seed_candidates["bob"]
        db_session.add(edge(alice, bob))
        await db_session.commit()

        with patch("scrol.services.friend_service.notifier") as mock_notifier:
            mock_notifier.send = AsyncMock()
            with pytest.raises(OperationFailedError, match="Unable to add friend"):
                await self.service.add_friend(db_session, bob.id, alice.email)

        mock_notifier.send.assert_not_awaited()


class TestAcceptFriend:

    def setup_method(self):
        self.service = FriendService()

    @pytest.mark.asyncio
    async def test_accept_pending(self, db_session, seed_candidates):
        alice, bob = seed_candidates["alice"], seed_candidates["bob"]
        db_session.add(edge(alice, bob, FriendStatus.PENDING))
        await db_session.commit()

        result = await self.service.accept_friend(db_session, alice.id, bob.email)

        assert result.message == "Friend request accepted"
        assert await all_edges(db_session) == {
            (alice.id, bob.id): "ACTIVE",
            (bob.id, alice.id): "ACTIVE",
        }

    @pytest.mark.asyncio
    async def test_nothing_pending(self, db_session, seed_candidates):
        alice, bob = seed_candidates["alice"], seed_candidates["bob"]
        db_session.add(edge(alice, bob, FriendStatus.ACTIVE))
        await db_session.commit()

        with pytest.raises(OperationFailedError, match="No pending friend request"):
            await self.service.accept_friend(db_session, alice.id, bob.email)


class TestBlockFriend:

    def setup_method(self):
        self.service = FriendService()

    @pytest.mark.asyncio
    async def test_blocks_both_directions(self, db_session, seed_candidates):
        alice, bob, carol = seed_candidates["alice"], seed_candidates["bob"], seed_candidates["carol"]
        db_session.add_all([edge(alice, bob), edge(bob, alice), edge(alice, carol)])
        await db_session.commit()

        result = await self.service.block_friend(db_session, bob.id, alice.email)

        assert result.message == f"{bob.id} has been blocked"
        assert await all_edges(db_session) == {
            (alice.id, bob.id): "BLOCKED",
            (bob.id, alice.id): "BLOCKED",
            (alice.id, carol.id): "ACTIVE",
        }

    @pytest.mark.asyncio
    async def test_no_edges_still_succeeds(self, db_session, seed_candidates):
        result = await self.service.block_friend(
            db_session, seed_candidates["carol"].id, "bob@example.com"
        )
        assert "has been blocked" in result.message

    @pytest.mark.asyncio
    async def test_unknown_caller_changes_nothing(self, db_session, seed_candidates):
        alice, bob = seed_candidates["alice"], seed_candidates["bob"]
        db_session.add(edge(alice, bob))
        await db_session.commit()

        with pytest.raises(OperationFailedError, match="Unable to block friend"):
            await self.service.block_friend(db_session, bob.id, "ghost@example.com")

        assert await all_edges(db_session) == {(alice.id, bob.id): "ACTIVE"}


class TestListFriends:

    def setup_method(self):
        self.service = FriendService()

    @pytest_asyncio.fixture
    async def network(self, db_session, seed_candidates):
        """Alice with four ACTIVE friends in mixed directions, one BLOCKED and one PENDING."""
        extra = [Candidate(email=f"user{i}@example.com", name=f"User {i}") for i in range(4)]
        db_session.add_all(extra)
        await db_session.commit()

        alice, bob, carol = seed_candidates["alice"], seed_candidates["bob"], seed_candidates["carol"]
        db_session.add_all([
            edge(alice, bob),
            edge(carol, alice),
            edge(alice, extra[0]),
            edge(extra[1], alice),
            edge(alice, extra[2], FriendStatus.BLOCKED),
            edge(extra[3], alice, FriendStatus.PENDING),
        ])
        await db_session.commit()
        active = {bob.id, carol.id, extra[0].id, extra[1].id}
        return alice, active

    @pytest.mark.asyncio
    async def test_both_directions_active_only(self, db_session, network):
        alice, active = network

        rows = await self.service.list_friends(db_session, alice.email, limit=100, page=1)

        assert {r.friend_id for r in rows} == active
        assert all(r.created is not None for r in rows)

    @pytest.mark.asyncio
    async def test_names_are_the_peer(self, db_session, network, seed_candidates):
        alice, _ = network

        rows = await self.service.list_friends(db_session, alice.email, limit=100, page=1)
        names = {r.friend_id: r.name for r in rows}

        assert names[seed_candidates["bob"].id] == "Bob Lim"
        assert names[seed_candidates["carol"].id] == "Carol Ng"

    @pytest.mark.asyncio
    async def test_pagination(self, db_session, network):
        alice, active = network

        page1 = await self.service.list_friends(db_session, alice.email, limit=2, page=1)
        page2 = await self.service.list_friends(db_session, alice.email, limit=2, page=2)
        page3 = await self.service.list_friends(db_session, alice.email, limit=2, page=3)

        assert len(page1) == 2
        assert len(page2) == 2
        assert page3 == []
        ids1 = {r.friend_id for r in page1}
        ids2 = {r.friend_id for r in page2}
        assert ids1.isdisjoint(ids2)
        assert ids1 | ids2 == active

    @pytest.mark.asyncio
    async def test_wire_shape(self, db_session, network):
        alice, _ = network

        rows = await self.service.list_friends(db_session, alice.email, limit=1, page=1)

        assert set(rows[0].model_dump(by_alias=True, mode="json")) == {"friendId", "created", "name"}

    @pytest.mark.asyncio
    async def test_store_failure(self, mock_db_session):
        mock_db_session.execute = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(OperationFailedError, match="Unable to list friends"):
            await self.service.list_friends(mock_db_session, "alice@example.com", limit=10, page=1)
