from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.clients.reddit_client import RedditClient
from src.core.exceptions import DuplicateError, VerificationFailedError
from src.core.logger import logger, mask_email
from src.database.database import is_unique_violation
from src.models.database import Applicant

from .catalog import CompanyCatalog, load_company_catalog
from .schema import (
    ApplicantInput,
    QualificationResult,
    normalize_email,
    normalize_phone,
    validate_email,
    validate_phone,
)

APPLICANT_EXISTS_MESSAGE = "User with this email and phone already exists"
NO_MATCH_MESSAGE = (
    "Application processed successfully. No company is hiring right now; "
    "we'll reach out when a spot opens."
)


class QualificationService:
    """
    Qualify an applicant: validate, verify the Reddit handle, match a company, persist.

    The (email, phone) pre-check only saves a Reddit round-trip; the unique
    constraint on applicants is what guarantees a single row under concurrency.
    Verification errors (rate limit, upstream, network) propagate unchanged and
    are never read as "user does not exist".
    """

    def __init__(
        self,
        db: Session,
        reddit: RedditClient,
        catalog: CompanyCatalog | None = None,
    ) -> None:
        self.db = db
        self.reddit = reddit
        self.catalog = catalog or load_company_catalog()

    def _find_applicant(self, email: str, phone: str) -> Applicant | None:
        return (
            self.db.query(Applicant)
            .filter(Applicant.email == email, Applicant.phone == phone)
            .first()
        )

    def check_user_exists(self, email: str | None, phone: str | None) -> bool:
        email = normalize_email(email)
        phone = normalize_phone(phone)
        validate_email(email)
        validate_phone(phone)
        return self._find_applicant(email, phone) is not None

    async def submit(self, data: ApplicantInput) -> QualificationResult:
        """
        Raises:
            ValidationError: malformed input
            DuplicateError: (email, phone) already qualified, before or during this call
            VerificationFailedError: Reddit reports the handle does not exist
            RateLimitedError / UpstreamError / NetworkError / ConfigurationError:
                verification could not be completed
        """
        data.validate()

        if self._find_applicant(data.email, data.phone) is not None:
            logger.info("Qualification rejected, applicant exists: {}", mask_email(data.email))
            raise DuplicateError(APPLICANT_EXISTS_MESSAGE)

        # Release the read transaction before the external call
        self.db.rollback()

        if not await self.reddit.exists(data.reddit_username):
            raise VerificationFailedError(
                f"Reddit user '{data.reddit_username}' does not exist"
            )

        company = self.catalog.match_for(data)
        if company is None:
            logger.warning("No available company for applicant {}", mask_email(data.email))

        applicant = Applicant(
            email=data.email,
            phone=data.phone,
            reddit_username=data.reddit_username,
            twitter_username=data.twitter_username,
            youtube_username=data.youtube_username,
            facebook_username=data.facebook_username,
            reddit_verified=True,
        )
        try:
            self.db.add(applicant)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            if is_unique_violation(exc):
                logger.info(
                    "Concurrent qualification lost the race: {}", mask_email(data.email)
                )
                raise DuplicateError(APPLICANT_EXISTS_MESSAGE)
            raise
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            "Applicant qualified: id={} company={}",
            applicant.id,
            company.slug if company else None,
        )
        return QualificationResult(
            applicant_id=str(applicant.id),
            matched_company=company,
            message="Application processed successfully" if company else NO_MATCH_MESSAGE,
        )
