"""
ORM models

applicants
- one row per qualified person, identity = (email, phone)

contractor_requests
- one row per (applicant, company_slug)
- applicant_id must reference a live applicants row
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class ContractorRequestStatus(str, Enum):
    """Only PENDING is produced here; the rest are set by back-office review."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Applicant(Base):
    __tablename__ = "applicants"
    __table_args__ = (
        UniqueConstraint("email", "phone", name="uq_applicants_email_phone"),
        Index("idx_applicants_email", "email"),
    )

    id = Column(String(36), primary_key=True, default=_new_id)
    email = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=False)

    reddit_username = Column(String(64), nullable=False)
    twitter_username = Column(String(128), nullable=True)
    youtube_username = Column(String(128), nullable=True)
    facebook_username = Column(String(128), nullable=True)

    reddit_verified = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    contractor_requests = relationship(
        "ContractorRequest",
        back_populates="applicant",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Applicant id={self.id} reddit={self.reddit_username}>"


class ContractorRequest(Base):
    __tablename__ = "contractor_requests"
    __table_args__ = (
        UniqueConstraint(
            "applicant_id", "company_slug", name="uq_contractor_requests_applicant_company"
        ),
        Index("idx_contractor_requests_status", "status"),
    )

    id = Column(String(36), primary_key=True, default=_new_id)
    applicant_id = Column(
        String(36),
        ForeignKey("applicants.id", ondelete="RESTRICT"),
        nullable=False,
    )
    email = Column(String(255), nullable=False)
    company_slug = Column(String(100), nullable=False)
    company_name = Column(String(255), nullable=False)

    status = Column(String(20), nullable=False, default=ContractorRequestStatus.PENDING.value)
    joined_slack = Column(Boolean, nullable=False, default=False)
    can_start_job = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    applicant = relationship("Applicant", back_populates="contractor_requests")

    def __repr__(self) -> str:
        return f"<ContractorRequest id={self.id} company={self.company_slug} status={self.status}>"
