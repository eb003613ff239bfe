"""Create applicants and contractor_requests

Revision ID: b7c1d2e3f4a5
Revises:
Create Date: 2026-10-18 12:00:00+00:00

Changes:
1. applicants table:
   - (email, phone) unique constraint uq_applicants_email_phone
   - index on email

2. contractor_requests table:
   - applicant_id -> applicants.id foreign key (RESTRICT)
   - (applicant_id, company_slug) unique constraint uq_contractor_requests_applicant_company
   - index on status
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy import inspect

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "b7c1d2e3f4a5"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def table_exists(table_name: str) -> bool:
    bind = op.get_bind()
    inspector = inspect(bind)
    return table_name in inspector.get_table_names()


def index_exists(table_name: str, index_name: str) -> bool:
    bind = op.get_bind()
    inspector = inspect(bind)
    indexes = inspector.get_indexes(table_name)
    return any(idx.get("name") == index_name for idx in indexes)


def upgrade() -> None:
    # =========================================================================
    # 1. applicants
    # =========================================================================
    if not table_exists("applicants"):
        op.create_table(
            "applicants",
            sa.Column("id", sa.String(36), primary_key=True),
            sa.Column("email", sa.String(255), nullable=False),
            sa.Column("phone", sa.String(32), nullable=False),
            sa.Column("reddit_username", sa.String(64), nullable=False),
            sa.Column("twitter_username", sa.String(128), nullable=True),
            sa.Column("youtube_username", sa.String(128), nullable=True),
            sa.Column("facebook_username", sa.String(128), nullable=True),
            sa.Column(
                "reddit_verified",
                sa.Boolean(),
                nullable=False,
                server_default=sa.false(),
            ),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
            sa.UniqueConstraint("email", "phone", name="uq_applicants_email_phone"),
        )

    if not index_exists("applicants", "idx_applicants_email"):
        op.create_index("idx_applicants_email", "applicants", ["email"])

    # =========================================================================
    # 2. contractor_requests
    # =========================================================================
    if not table_exists("contractor_requests"):
        op.create_table(
            "contractor_requests",
            sa.Column("id", sa.String(36), primary_key=True),
            sa.Column(
                "applicant_id",
                sa.String(36),
                sa.ForeignKey("applicants.id", ondelete="RESTRICT"),
                nullable=False,
            ),
            sa.Column("email", sa.String(255), nullable=False),
            sa.Column("company_slug", sa.String(100), nullable=False),
            sa.Column("company_name", sa.String(255), nullable=False),
            sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
            sa.Column("joined_slack", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("can_start_job", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
            sa.UniqueConstraint(
                "applicant_id",
                "company_slug",
                name="uq_contractor_requests_applicant_company",
            ),
        )

    if not index_exists("contractor_requests", "idx_contractor_requests_status"):
        op.create_index("idx_contractor_requests_status", "contractor_requests", ["status"])


def downgrade() -> None:
    if table_exists("contractor_requests"):
        if index_exists("contractor_requests", "idx_contractor_requests_status"):
            op.drop_index("idx_contractor_requests_status", table_name="contractor_requests")
        op.drop_table("contractor_requests")

    if table_exists("applicants"):
        if index_exists("applicants", "idx_applicants_email"):
            op.drop_index("idx_applicants_email", table_name="applicants")
        op.drop_table("applicants")
