"""Create candidate, friends and cv tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  The initial schema: candidate profiles, directed friend edges and CVs.
How:   Column names match the existing production database (candidate_*,
       cv_*), so this revision can be stamped on it with `alembic stamp 001`.

Rollback: downgrade() drops all three tables.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "candidate",
        sa.Column("candidate_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("candidate_email", sa.String(320), nullable=False),
        sa.Column("candidate_name", sa.String(255), nullable=True),
        sa.Column("candidate_gender", sa.String(64), nullable=True),
        sa.Column("candidate_sector", sa.String(255), nullable=True),
        sa.Column("candidate_jobtitle", sa.String(255), nullable=True),
        sa.Column("candidate_company", sa.String(255), nullable=True),
        # NULL → the default photo key
        sa.Column("candidate_photo", sa.String(255), nullable=True),
        sa.Column("cv", sa.String(255), nullable=True),
        sa.PrimaryKeyConstraint("candidate_id"),
    )
    op.create_index(
        "ix_candidate_candidate_email",
        "candidate",
        ["candidate_email"],
        unique=True,
    )

    op.create_table(
        "friends",
        sa.Column("candidate_id", sa.Integer(), nullable=False),
        sa.Column("friend_id", sa.Integer(), nullable=False),
        sa.Column(
            "created",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.String(16),
            server_default=sa.text("'ACTIVE'"),
            nullable=False,
            comment="PENDING, ACTIVE or BLOCKED",
        ),
        sa.ForeignKeyConstraint(["candidate_id"], ["candidate.candidate_id"]),
        sa.ForeignKeyConstraint(["friend_id"], ["candidate.candidate_id"]),
        sa.PrimaryKeyConstraint("candidate_id", "friend_id"),
    )
    # The reverse direction of the friend list scans by friend_id
    op.create_index("idx_friends_friend_id", "friends", ["friend_id"])

    op.create_table(
        "cv",
        sa.Column("cv_id", sa.String(64), nullable=False),
        sa.Column("candidate_email", sa.String(320), nullable=False),
        sa.Column("cv_name", sa.String(255), nullable=True),
        sa.Column("cv_created", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("cv_default", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("original_filename", sa.String(255), nullable=True),
        sa.PrimaryKeyConstraint("cv_id"),
    )
    op.create_index("ix_cv_candidate_email", "cv", ["candidate_email"])


def downgrade() -> None:
    op.drop_index("ix_cv_candidate_email", table_name="cv")
    op.drop_table("cv")
    op.drop_index("idx_friends_friend_id", table_name="friends")
    op.drop_table("friends")
    op.drop_index("ix_candidate_candidate_email", table_name="candidate")
    op.drop_table("candidate")
