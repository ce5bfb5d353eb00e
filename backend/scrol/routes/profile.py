"""
Scrol Backend — Profile Route Handlers
=======================================

What:  The caller's own profile: POST / (view), POST /update, POST /listcvs.
How:   Every route depends on get_principal; the verified email selects the
       candidate row, never a value from the body.
"""

import logging

from fastapi import APIRouter, Depends
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from scrol.config import settings
from scrol.database import get_db_session
from scrol.dependencies import Principal, get_principal
from scrol.exceptions import ValidationError
from scrol.schemas.candidate import CandidateUpdate
from scrol.schemas.common import ErrorResponse
from scrol.services.candidate_service import LookupKey, candidate_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Profile"])


@router.post(
    "/",
    responses={400: {"description": "Unknown candidate or invalid token", "model": ErrorResponse}},
    summary="Get the caller's profile",
)
async def get_own_profile(
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> dict:
    candidate = await candidate_service.get_candidate(db, principal.email, LookupKey.EMAIL)
    return candidate.to_wire(settings.feature_company_field)


@router.post(
    "/update",
    responses={400: {"description": "Missing candidate, unknown candidate or invalid token", "model": ErrorResponse}},
    summary="Overwrite the caller's profile",
    description=(
        "Body: {\"token\": ..., \"candidate\": {name, gender, sector, jobTitle, company}}. "
        "Fields left out of `candidate` are cleared."
    ),
)
async def update_profile(
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> dict:
    submitted = principal.body.get("candidate")
    if not isinstance(submitted, dict):
        raise ValidationError(message="Candidate is required", field="candidate")

    try:
        changes = CandidateUpdate.model_validate(submitted)
    except PydanticValidationError as e:
        raise ValidationError(
            message="Invalid candidate",
            field="candidate",
            context={"errors": e.errors(include_url=False)},
        )

    include_company = settings.feature_company_field
    candidate = await candidate_service.update_candidate(
        db, principal.email, changes, include_company=include_company
    )
    return {
        "message": "Candidate updated successfully",
        "candidate": candidate.to_wire(include_company),
    }


@router.post(
    "/listcvs",
    responses={400: {"description": "Unknown candidate or invalid token", "model": ErrorResponse}},
    summary="List the caller's CVs",
)
async def list_cvs(
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> list:
    cvs = await candidate_service.list_cvs(db, principal.email)
    return [cv.model_dump(by_alias=True, mode="json") for cv in cvs]
