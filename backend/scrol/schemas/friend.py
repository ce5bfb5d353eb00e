"""
Scrol Backend — Friend Schemas
===============================

What:  Response models for search results and the friend list.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class CandidateSummary(BaseModel):
    """One search hit returned by GET /find."""

    id: int
    name: Optional[str] = None
    email: str


class FriendListItem(BaseModel):
    """
    What:  One row of POST /myfriends.
    How:   friendId is always the peer, whichever direction the edge points.
    """

    friend_id: int = Field(alias="friendId")
    created: Optional[datetime] = None
    name: Optional[str] = None

    model_config = {"populate_by_name": True}
