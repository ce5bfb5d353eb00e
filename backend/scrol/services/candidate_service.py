"""
Scrol Backend — Candidate Service (Profile & CV Operations)
============================================================

What:  Profile lookup, profile update and CV listing.
How:   Each method runs one or two statements on the request's session and
       translates "no row" into CandidateNotFoundError and any store failure
       into DatabaseError (→ 500).
Who:   Called by the profile and public routers; `find_candidate` is shared
       with FriendService and PhotoService.

Operations:
    get_candidate()     SELECT candidate by id or email → projection
    update_candidate()  SELECT by email, overwrite profile columns, re-read
    list_cvs()          SELECT candidate by email, SELECT its CVs
"""

import enum
import logging
from typing import List, Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from scrol.exceptions import CandidateNotFoundError, DatabaseError, ScrolError
from scrol.models.candidate import Candidate
from scrol.models.cv import CV
from scrol.schemas.candidate import CandidateResponse, CandidateUpdate, CVResponse

logger = logging.getLogger(__name__)


class LookupKey(str, enum.Enum):
    """Which candidate column a lookup value refers to."""

    ID = "id"
    EMAIL = "email"


async def find_candidate(
    db: AsyncSession,
    value: Union[str, int],
    by: LookupKey = LookupKey.EMAIL,
) -> Optional[Candidate]:
    """
    Fetch one candidate by id or email.

    Returns None when no row matches. An id that is not an integer cannot
    match any row and also returns None.
    """
    if by == LookupKey.ID:
        try:
            candidate_id = int(value)
        except (TypeError, ValueError):
            return None
        stmt = select(Candidate).where(Candidate.id == candidate_id)
    else:
        stmt = select(Candidate).where(Candidate.email == value)

    result = await db.execute(stmt)
    return result.scalar_one_or_none()


class CandidateService:
    """Business logic for candidate profiles and their CVs."""

    async def get_candidate(
        self,
        db: AsyncSession,
        value: Union[str, int],
        by: LookupKey,
    ) -> CandidateResponse:
        """
        Retrieve a candidate projection by id or email.

        Raises:
            CandidateNotFoundError: no candidate for the value (→ 400)
            DatabaseError: query execution failed (→ 500)
        """
        logger.info("Retrieving candidate data with %s %s", by.value, value)
        try:
            candidate = await find_candidate(db, value, by)
            if candidate is None:
                raise CandidateNotFoundError(lookup_value=str(value))
            return CandidateResponse.from_candidate(candidate)

        except ScrolError:
            raise
        except Exception as e:
            logger.error("Error fetching candidate with %s %s: %s", by.value, value, str(e), exc_info=True)
            raise DatabaseError(context={"lookup": by.value, "error_type": type(e).__name__})

    async def update_candidate(
        self,
        db: AsyncSession,
        email: str,
        changes: CandidateUpdate,
        include_company: bool = True,
    ) -> CandidateResponse:
        """
        Overwrite the candidate's profile columns.

        What:    name, gender, sector, job title and (when enabled) company are
                 replaced with the submitted values; a field missing from the
                 request clears its column. Email is the lookup key and is never
                 changed.
        Returns: The projection re-read from the store after the update.

        Raises:
            CandidateNotFoundError: no candidate with this email (→ 400)
            DatabaseError: update or re-read failed (→ 500)
        """
        logger.info("Updating candidate data with email %s", email)
        try:
            candidate = await find_candidate(db, email, LookupKey.EMAIL)
            if candidate is None:
                raise CandidateNotFoundError(
                    message=f"No user found with email {email}",
                    lookup_value=email,
                )

            candidate.name = changes.name
            candidate.gender = changes.gender
            candidate.sector = changes.sector
            candidate.job_title = changes.job_title
            if include_company:
                candidate.company = changes.company

            await db.flush()
            await db.refresh(candidate)
            return CandidateResponse.from_candidate(candidate)

        except ScrolError:
            raise
        except Exception as e:
            logger.error("Error updating candidate with email %s: %s", email, str(e), exc_info=True)
            raise DatabaseError(context={"email": email, "error_type": type(e).__name__})

    async def list_cvs(self, db: AsyncSession, email: str) -> List[CVResponse]:
        """
        List every CV owned by the candidate with this email.

        Raises:
            CandidateNotFoundError: no candidate with this email (→ 400)
            DatabaseError: query execution failed (→ 500)
        """
        logger.info("Fetching candidate cvs using email %s", email)
        try:
            candidate = await find_candidate(db, email, LookupKey.EMAIL)
            if candidate is None:
                raise CandidateNotFoundError(
                    message=f"No user found with email {email}",
                    lookup_value=email,
                )

            result = await db.execute(select(CV).where(CV.candidate_email == email))
            cvs = list(result.scalars().all())
            logger.info("Found %d cvs for email %s", len(cvs), email)
            return [CVResponse.from_cv(cv) for cv in cvs]

        except ScrolError:
            raise
        except Exception as e:
            logger.error("Error fetching cv data for email %s: %s", email, str(e), exc_info=True)
            raise DatabaseError(context={"email": email, "error_type": type(e).__name__})


# ── Singleton Instance ────────────────────────────────────────────────────
candidate_service = CandidateService()
