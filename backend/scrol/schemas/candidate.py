"""
Scrol Backend — Candidate, CV and Photo Schemas
================================================

What:  Pydantic models defining the profile side of the API contract.
How:   Field names are snake_case in Python; the wire format keeps the
       camelCase names existing clients read (jobTitle, isDefault, ...)
       through aliases. Responses are always dumped with by_alias=True.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from scrol.models.candidate import Candidate
from scrol.models.cv import CV


class CandidateResponse(BaseModel):
    """
    What:  Public projection of a candidate row.
    Who:   Returned by POST /, GET /viewprofile and inside the /update response.
    """

    id: int = Field(description="Store-assigned candidate id")
    email: str = Field(description="Candidate email (identity key)")
    name: Optional[str] = None
    gender: Optional[str] = None
    sector: Optional[str] = None
    job_title: Optional[str] = Field(default=None, alias="jobTitle")
    photo: Optional[str] = Field(default=None, description="Blob key of the profile photo")
    company: Optional[str] = None
    cv: Optional[str] = None

    model_config = {"populate_by_name": True}

    @classmethod
    def from_candidate(cls, candidate: Candidate) -> "CandidateResponse":
        return cls(
            id=candidate.id,
            email=candidate.email,
            name=candidate.name,
            gender=candidate.gender,
            sector=candidate.sector,
            job_title=candidate.job_title,
            photo=candidate.photo,
            company=candidate.company,
            cv=candidate.cv,
        )

    def to_wire(self, include_company: bool = True) -> dict:
        """JSON body for this projection; `company` is dropped when not included."""
        return self.model_dump(
            by_alias=True,
            mode="json",
            exclude=None if include_company else {"company"},
        )


class CandidateUpdate(BaseModel):
    """
    What:  The `candidate` object of a POST /update body.

    Every settable field defaults to None: the update is a full overwrite,
    so an omitted field clears the column. `email` is accepted for
    compatibility but never used; the verified token email selects the row.
    """

    email: Optional[str] = None
    name: Optional[str] = None
    gender: Optional[str] = None
    sector: Optional[str] = None
    job_title: Optional[str] = Field(default=None, alias="jobTitle")
    company: Optional[str] = None

    model_config = {"populate_by_name": True, "extra": "ignore"}


class CVResponse(BaseModel):
    """
    What:  Public shape of one CV row.
    Who:   Returned as array items by POST /listcvs.
    """

    id: str
    email: str
    name: Optional[str] = None
    created: Optional[datetime] = None
    is_default: bool = Field(default=False, alias="isDefault")
    original_filename: Optional[str] = Field(default=None, alias="originalFilename")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_cv(cls, cv: CV) -> "CVResponse":
        return cls(
            id=cv.id,
            email=cv.candidate_email,
            name=cv.name,
            created=cv.created,
            is_default=bool(cv.is_default),
            original_filename=cv.original_filename,
        )


class PhotoUpdateResponse(BaseModel):
    message: str = Field(default="Photo updated successfully")
    photo: str = Field(description="Blob key now referenced by the candidate")
