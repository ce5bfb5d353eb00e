"""
Scrol Backend — Friend Service
===============================

What:  Candidate search and the friend graph: add, accept, block, list.
How:   Friend edges are directed rows in `friends`. Every statement runs on
       the request's session, so the statements of one operation commit or
       roll back together (see database.get_db_session).
Who:   Called by the public router (search) and the friends router.

Failure policy:
    Friend operations answer 400 with the operation's own message for any
    failure after the request was accepted (store error, duplicate edge,
    notification failure). The only distinct answer is "Users do not exist"
    when add/accept is asked about an unknown candidate.

Friend list query (both directions, ACTIVE only):
    SELECT f.friend_id AS friendId, f.created, peer.candidate_name AS name
      FROM friends f JOIN candidate me ON me.candidate_id = f.candidate_id
                     JOIN candidate peer ON peer.candidate_id = f.friend_id
     WHERE me.candidate_email = :email AND f.status = 'ACTIVE'
    UNION
    SELECT f.candidate_id AS friendId, f.created, peer.candidate_name AS name
      FROM friends f JOIN candidate me ON me.candidate_id = f.friend_id
                     JOIN candidate peer ON peer.candidate_id = f.candidate_id
     WHERE me.candidate_email = :email AND f.status = 'ACTIVE'
    LIMIT :limit OFFSET :offset

    No ORDER BY: row order is whatever the store produces for the union.
"""

import logging
from datetime import datetime, timezone
from typing import List

from sqlalchemy import or_, select, union, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from scrol.config import settings
from scrol.exceptions import CandidateNotFoundError, OperationFailedError, ScrolError
from scrol.models.candidate import Candidate
from scrol.models.friend import Friend, FriendStatus
from scrol.schemas.common import MessageResponse
from scrol.schemas.friend import CandidateSummary, FriendListItem
from scrol.services.candidate_service import LookupKey, find_candidate
from scrol.services.notifier import notifier

logger = logging.getLogger(__name__)


def friend_request_message(sender_name: str) -> str:
    """Notification text sent to the candidate who received a friend request."""
    return (
        f"{sender_name} has sent you a friend request! visit "
        f'<a href="{settings.friends_page_url}">Your Friends List</a> to view.'
    )


class FriendService:
    """Business logic for search and friend relationships."""

    async def find(self, db: AsyncSession, query: str) -> List[CandidateSummary]:
        """
        Case-insensitive substring search over candidate email and name.

        LIKE wildcards typed by the user (% and _) are matched literally.

        Raises:
            OperationFailedError: query execution failed (→ 400)
        """
        try:
            stmt = select(Candidate.id, Candidate.name, Candidate.email).where(
                or_(
                    Candidate.email.icontains(query, autoescape=True),
                    Candidate.name.icontains(query, autoescape=True),
                )
            )
            result = await db.execute(stmt)
            return [
                CandidateSummary(id=row.id, name=row.name, email=row.email)
                for row in result.all()
            ]
        except Exception as e:
            logger.error("Unable to run find query %r: %s", query, str(e), exc_info=True)
            raise OperationFailedError(
                message="Unable to run find query",
                context={"error_type": type(e).__name__},
            )

    async def add_friend(
        self,
        db: AsyncSession,
        friend_id: int,
        email: str,
        require_accept: bool = False,
    ) -> MessageResponse:
        """
        Insert the edge caller → friend and notify the friend.

        What:    One directed row is created; the reverse edge is not. With
                 require_accept the row starts PENDING and only becomes part
                 of the friend list after accept_friend().
        Flow:
            1. Resolve caller (by email) and friend (by id)
            2. Insert the edge with the current timestamp
            3. Notify the friend by email

        Raises:
            CandidateNotFoundError: caller or friend unknown (→ 400 "Users do not exist")
            OperationFailedError:   insert or notification failed (→ 400)
        """
        logger.info("Adding friend %s for email %s", friend_id, email)
        try:
            caller = await find_candidate(db, email, LookupKey.EMAIL)
            friend = await find_candidate(db, friend_id, LookupKey.ID)
        except Exception as e:
            logger.error("Unable to add friend: lookup failed: %s", str(e), exc_info=True)
            raise OperationFailedError(message="Unable to add friend")

        if caller is None or friend is None:
            raise CandidateNotFoundError(
                message="Users do not exist",
                context={"email": email, "friend_id": friend_id},
            )

        status = FriendStatus.PENDING if require_accept else FriendStatus.ACTIVE
        try:
            db.add(
                Friend(
                    candidate_id=caller.id,
                    friend_id=friend.id,
                    created=datetime.now(timezone.utc),
                    status=status.value,
                )
            )
            await db.flush()

            await notifier.send(friend.email, friend_request_message(caller.name or caller.email))

        except Exception as e:
            # Raising rolls back the insert with the request transaction
            logger.error("Unable to add friend %s for %s: %s", friend_id, email, str(e), exc_info=True)
            raise OperationFailedError(
                message="Unable to add friend",
                context={"error_type": type(e).__name__},
            )

        logger.info("Edge %s -> %s created with status %s", caller.id, friend.id, status.value)
        return MessageResponse(message="Friend added successfully")

    async def accept_friend(self, db: AsyncSession, friend_id: int, email: str) -> MessageResponse:
        """
        Accept a pending request sent by `friend_id` to the caller.

        Flips the PENDING edge friend → caller to ACTIVE and makes the
        reverse edge caller → friend ACTIVE, creating it if needed.

        Raises:
            CandidateNotFoundError: caller unknown (→ 400 "Users do not exist")
            OperationFailedError:   no pending request, or store failure (→ 400)
        """
        logger.info("Accepting friend %s for email %s", friend_id, email)
        try:
            caller = await find_candidate(db, email, LookupKey.EMAIL)
            if caller is None:
                raise CandidateNotFoundError(message="Users do not exist", context={"email": email})

            result = await db.execute(
                select(Friend).where(
                    Friend.candidate_id == friend_id,
                    Friend.friend_id == caller.id,
                    Friend.status == FriendStatus.PENDING.value,
                )
            )
            request = result.scalar_one_or_none()
            if request is None:
                raise OperationFailedError(
                    message="No pending friend request",
                    context={"friend_id": friend_id, "email": email},
                )
            request.status = FriendStatus.ACTIVE.value

            result = await db.execute(
                select(Friend).where(
                    Friend.candidate_id == caller.id,
                    Friend.friend_id == friend_id,
                )
            )
            reverse = result.scalar_one_or_none()
            if reverse is None:
                db.add(
                    Friend(
                        candidate_id=caller.id,
                        friend_id=friend_id,
                        created=datetime.now(timezone.utc),
                        status=FriendStatus.ACTIVE.value,
                    )
                )
            else:
                reverse.status = FriendStatus.ACTIVE.value

            await db.flush()
            return MessageResponse(message="Friend request accepted")

        except ScrolError:
            raise
        except Exception as e:
            logger.error("Unable to accept friend %s for %s: %s", friend_id, email, str(e), exc_info=True)
            raise OperationFailedError(message="Unable to accept friend")

    async def block_friend(self, db: AsyncSession, friend_id: int, email: str) -> MessageResponse:
        """
        Mark both directed edges between caller and friend as BLOCKED.

        Each UPDATE is a no-op when its row does not exist; no edge has to
        exist for the call to succeed.

        Raises:
            OperationFailedError: caller unknown or store failure (→ 400)
        """
        logger.info("Blocking friend with id %s for email %s", friend_id, email)
        try:
            caller = await find_candidate(db, email, LookupKey.EMAIL)
            if caller is None:
                raise CandidateNotFoundError(message=f"User with email {email} does not exist")

            for owner, peer in ((caller.id, friend_id), (friend_id, caller.id)):
                await db.execute(
                    update(Friend)
                    .where(Friend.candidate_id == owner, Friend.friend_id == peer)
                    .values(status=FriendStatus.BLOCKED.value)
                )

            logger.info("[%s] and [%s] blocked", friend_id, caller.id)
            return MessageResponse(message=f"{friend_id} has been blocked")

        except Exception as e:
            logger.error("Unable to block friend %s for %s: %s", friend_id, email, str(e))
            raise OperationFailedError(
                message="Unable to block friend",
                context={"error_type": type(e).__name__},
            )

    async def list_friends(
        self,
        db: AsyncSession,
        email: str,
        limit: int,
        page: int,
    ) -> List[FriendListItem]:
        """
        One page of the caller's ACTIVE friends, both edge directions.

        Pagination is offset-based on the union: offset = (page - 1) * limit.

        Raises:
            OperationFailedError: query execution failed (→ 400)
        """
        offset = (page - 1) * limit
        me = aliased(Candidate)
        peer = aliased(Candidate)

        outgoing = (
            select(
                Friend.friend_id.label("friendId"),
                Friend.created.label("created"),
                peer.name.label("name"),
            )
            .join(me, me.id == Friend.candidate_id)
            .join(peer, peer.id == Friend.friend_id)
            .where(me.email == email, Friend.status == FriendStatus.ACTIVE.value)
        )
        incoming = (
            select(
                Friend.candidate_id.label("friendId"),
                Friend.created.label("created"),
                peer.name.label("name"),
            )
            .join(me, me.id == Friend.friend_id)
            .join(peer, peer.id == Friend.candidate_id)
            .where(me.email == email, Friend.status == FriendStatus.ACTIVE.value)
        )
        stmt = union(outgoing, incoming).limit(limit).offset(offset)

        try:
            result = await db.execute(stmt)
            rows = result.mappings().all()
        except Exception as e:
            logger.error("Unable to list friends for %s: %s", email, str(e), exc_info=True)
            raise OperationFailedError(
                message="Unable to list friends",
                context={"error_type": type(e).__name__},
            )

        return [
            FriendListItem(friend_id=row["friendId"], created=row["created"], name=row["name"])
            for row in rows
        ]


# ── Singleton Instance ────────────────────────────────────────────────────
friend_service = FriendService()
