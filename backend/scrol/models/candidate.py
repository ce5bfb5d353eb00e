"""
Scrol Backend — Candidate SQLAlchemy Model
===========================================

What:  ORM model representing the `candidate` table.
Who:   Used by the profile, friend, CV and photo services, and by Alembic.

Lifecycle:
    1. Created outside this API (sign-up flow)
    2. Profile fields overwritten by POST /update
    3. Photo key replaced by POST /updatepicture
    4. Never deleted by this API

Column names keep the `candidate_` prefix used by the existing database;
attribute names are the short forms used throughout the code.
"""

from typing import Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from scrol.database import Base


class Candidate(Base):
    """A user profile: identity (email) plus the public profile fields."""

    __tablename__ = "candidate"

    id: Mapped[int] = mapped_column(
        "candidate_id",
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    # External identity key: the email claim of a verified token
    email: Mapped[str] = mapped_column(
        "candidate_email",
        String(320),
        nullable=False,
        unique=True,
        index=True,
    )

    name: Mapped[Optional[str]] = mapped_column("candidate_name", String(255), nullable=True)
    gender: Mapped[Optional[str]] = mapped_column("candidate_gender", String(64), nullable=True)
    sector: Mapped[Optional[str]] = mapped_column("candidate_sector", String(255), nullable=True)
    job_title: Mapped[Optional[str]] = mapped_column("candidate_jobtitle", String(255), nullable=True)
    company: Mapped[Optional[str]] = mapped_column("candidate_company", String(255), nullable=True)

    # Blob store key; NULL means the sentinel default photo
    photo: Mapped[Optional[str]] = mapped_column("candidate_photo", String(255), nullable=True)

    cv: Mapped[Optional[str]] = mapped_column("cv", String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Candidate(id={self.id}, email='{self.email}')>"
