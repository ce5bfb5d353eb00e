"""
Scrol Backend — Public Route Handlers
======================================

What:  The unauthenticated part of the API: candidate search, public profile
       view and public photo.
Who:   Anyone; the whole router is switched by `feature_public_profiles`.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from scrol.config import settings
from scrol.database import get_db_session
from scrol.dependencies import require_feature
from scrol.exceptions import ValidationError
from scrol.routes.photos import picture_response
from scrol.schemas.common import ErrorResponse
from scrol.schemas.friend import CandidateSummary
from scrol.services.candidate_service import LookupKey, candidate_service
from scrol.services.friend_service import friend_service
from scrol.services.photo_service import photo_service

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Public"],
    dependencies=[Depends(require_feature("feature_public_profiles"))],
)


def _require_candidate_id(candidate_id: Optional[str]) -> str:
    if not candidate_id:
        raise ValidationError(message="Missing Candidate Id", field="candidateId")
    return candidate_id


@router.get(
    "/find",
    response_model=List[CandidateSummary],
    responses={400: {"description": "Missing query or query failed", "model": ErrorResponse}},
    summary="Search candidates by email or name",
)
async def find_candidates(
    query: Optional[str] = Query(default=None, description="Substring of email or name"),
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> List[CandidateSummary]:
    if not query:
        raise ValidationError(message="Missing query", field="query")
    return await friend_service.find(db, query)


@router.get(
    "/viewprofile",
    responses={400: {"description": "Missing or unknown candidate id", "model": ErrorResponse}},
    summary="View a candidate profile by id",
)
async def view_profile(
    candidate_id: Optional[str] = Query(default=None, alias="candidateId"),
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> dict:
    value = _require_candidate_id(candidate_id)
    candidate = await candidate_service.get_candidate(db, value, LookupKey.ID)
    return candidate.to_wire(settings.feature_company_field)


@router.get(
    "/getpicture",
    response_class=StreamingResponse,
    responses={
        200: {"description": "Photo bytes", "content": {"image/*": {}}},
        400: {"description": "Missing or unknown candidate id", "model": ErrorResponse},
        404: {"description": "Photo blob missing", "model": ErrorResponse},
    },
    summary="Get a candidate's photo by id",
)
async def get_picture(
    candidate_id: Optional[str] = Query(default=None, alias="candidateId"),
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> StreamingResponse:
    value = _require_candidate_id(candidate_id)
    blob, content_type = await photo_service.get_picture(db, value, LookupKey.ID)
    return picture_response(blob, content_type)
