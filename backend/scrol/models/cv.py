"""
Scrol Backend — CV Model
=========================

What:  ORM model for the `cv` table. A candidate may own many CVs;
       uniqueness of the default flag is not enforced here.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, String, text
from sqlalchemy.orm import Mapped, mapped_column

from scrol.database import Base


class CV(Base):
    __tablename__ = "cv"

    id: Mapped[str] = mapped_column("cv_id", String(64), primary_key=True)
    candidate_email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    name: Mapped[Optional[str]] = mapped_column("cv_name", String(255), nullable=True)
    created: Mapped[Optional[datetime]] = mapped_column("cv_created", DateTime(timezone=True), nullable=True)
    is_default: Mapped[bool] = mapped_column(
        "cv_default",
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )
    original_filename: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<CV(id='{self.id}', candidate_email='{self.candidate_email}')>"
