"""
Scrol Backend — Friend Route Handlers
======================================

What:  POST /addfriend, /acceptfriend, /block and /myfriends.
How:   `friendId`, `limit` and `page` come from the query string. The caller
       is the verified principal; the token is checked before any query
       parameter. /acceptfriend exists only while
       `friend_requests_require_accept` is on.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from scrol.config import settings
from scrol.database import get_db_session
from scrol.dependencies import (
    PageParams,
    Principal,
    get_friend_id,
    get_page_params,
    get_principal,
    require_feature,
)
from scrol.schemas.common import ErrorResponse, MessageResponse
from scrol.services.friend_service import friend_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Friends"])

_errors = {400: {"description": "Invalid request or operation failed", "model": ErrorResponse}}


@router.post("/addfriend", response_model=MessageResponse, responses=_errors, summary="Send a friend request")
async def add_friend(
    principal: Principal = Depends(get_principal),
    friend_id: int = Depends(get_friend_id),
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> MessageResponse:
    return await friend_service.add_friend(
        db,
        friend_id,
        principal.email,
        require_accept=settings.friend_requests_require_accept,
    )


@router.post(
    "/acceptfriend",
    response_model=MessageResponse,
    responses=_errors,
    dependencies=[Depends(require_feature("friend_requests_require_accept"))],
    summary="Accept a pending friend request",
)
async def accept_friend(
    principal: Principal = Depends(get_principal),
    friend_id: int = Depends(get_friend_id),
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> MessageResponse:
    return await friend_service.accept_friend(db, friend_id, principal.email)


@router.post("/block", response_model=MessageResponse, responses=_errors, summary="Block a candidate")
async def block_friend(
    principal: Principal = Depends(get_principal),
    friend_id: int = Depends(get_friend_id),
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> MessageResponse:
    return await friend_service.block_friend(db, friend_id, principal.email)


@router.post("/myfriends", responses=_errors, summary="List the caller's friends")
async def list_friends(
    principal: Principal = Depends(get_principal),
    page_params: PageParams = Depends(get_page_params),
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> list:
    friends = await friend_service.list_friends(
        db, principal.email, page_params.limit, page_params.page
    )
    return [item.model_dump(by_alias=True, mode="json") for item in friends]
