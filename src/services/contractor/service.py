from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.core.exceptions import DuplicateError, NotFoundError, ValidationError
from src.core.logger import logger, mask_email
from src.database.database import is_foreign_key_violation, is_unique_violation
from src.models.database import Applicant, ContractorRequest, ContractorRequestStatus
from src.services.qualification.schema import normalize_email, validate_email

REQUEST_ACK_MESSAGE = (
    "We've just pinged them. You'll be sent an email and text invite within 72 hours."
)
APPLICANT_NOT_FOUND_MESSAGE = "User not found. Please complete the qualification form first."
ALREADY_REQUESTED_MESSAGE = "You have already requested to join this company."


@dataclass(slots=True)
class RequestResult:
    request_id: str
    company_slug: str
    status: str
    message: str = REQUEST_ACK_MESSAGE
    success: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {"success": self.success, "message": self.message}


class ContractorRequestService:
    """
    Record an applicant's request to join a company.

    Reads and the insert share one transaction; the unique constraint on
    (applicant_id, company_slug) settles concurrent duplicates.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def _find_applicant(self, email: str) -> Applicant | None:
        # Several applicants may share an email (different phones): use the earliest
        return (
            self.db.query(Applicant)
            .filter(Applicant.email == email)
            .order_by(Applicant.created_at.asc(), Applicant.id.asc())
            .first()
        )

    def _find_request(self, applicant_id: str, company_slug: str) -> ContractorRequest | None:
        return (
            self.db.query(ContractorRequest)
            .filter(
                ContractorRequest.applicant_id == applicant_id,
                ContractorRequest.company_slug == company_slug,
            )
            .first()
        )

    async def submit(
        self,
        email: str | None,
        company_slug: str | None,
        company_name: str | None,
    ) -> RequestResult:
        """
        Raises:
            ValidationError: email, company slug or company name missing/malformed
            NotFoundError: no applicant with this email
            DuplicateError: this applicant already requested this company
        """
        email = normalize_email(email)
        company_slug = (company_slug or "").strip()
        company_name = (company_name or "").strip()
        validate_email(email)

        try:
            applicant = self._find_applicant(email)
            if applicant is None:
                raise NotFoundError(APPLICANT_NOT_FOUND_MESSAGE)

            if company_slug and self._find_request(applicant.id, company_slug) is not None:
                raise DuplicateError(ALREADY_REQUESTED_MESSAGE)

            if not company_slug:
                raise ValidationError("Company slug is required")
            if not company_name:
                raise ValidationError("Company name is required")
            if len(company_slug) > 100 or len(company_name) > 255:
                raise ValidationError("Company slug or name is too long")

            request = ContractorRequest(
                applicant_id=applicant.id,
                email=email,
                company_slug=company_slug,
                company_name=company_name,
                status=ContractorRequestStatus.PENDING.value,
                joined_slack=True,
                can_start_job=False,
            )
            self.db.add(request)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            if is_unique_violation(exc):
                logger.info(
                    "Concurrent contractor request lost the race: {} -> {}",
                    mask_email(email),
                    company_slug,
                )
                raise DuplicateError(ALREADY_REQUESTED_MESSAGE)
            if is_foreign_key_violation(exc):
                raise NotFoundError(APPLICANT_NOT_FOUND_MESSAGE)
            raise
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            "Contractor request created: id={} company={} applicant={}",
            request.id,
            company_slug,
            request.applicant_id,
        )
        return RequestResult(
            request_id=str(request.id),
            company_slug=company_slug,
            status=ContractorRequestStatus.PENDING.value,
        )
