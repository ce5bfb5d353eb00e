"""
Scrol Backend — Friend Relationship Model
==========================================

What:  ORM model for the `friends` table: one directed edge per row.
How:   (candidate_id, friend_id) is the primary key, so an edge exists at most
       once per direction. A mutual friendship is two rows.

Status values:
    PENDING  → request sent, waiting for the other side to accept
    ACTIVE   → counted by the friend list
    BLOCKED  → hidden from the friend list in both directions
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from scrol.database import Base


class FriendStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    BLOCKED = "BLOCKED"


class Friend(Base):
    """Directed edge candidate → friend."""

    __tablename__ = "friends"

    candidate_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("candidate.candidate_id"),
        primary_key=True,
    )
    friend_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("candidate.candidate_id"),
        primary_key=True,
    )

    created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=FriendStatus.ACTIVE.value,
        server_default=text("'ACTIVE'"),
    )

    # The friend list scans by both ends of the edge
    __table_args__ = (
        Index("idx_friends_friend_id", "friend_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Friend(candidate_id={self.candidate_id}, friend_id={self.friend_id}, "
            f"status='{self.status}')>"
        )
