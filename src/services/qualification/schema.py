from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from src.core.exceptions import ValidationError

from .catalog import Company

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PHONE_PATTERN = re.compile(r"^\+?[0-9()\-.\s]+$")
REDDIT_USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]{3,20}$")

MIN_PHONE_DIGITS = 7
MAX_PHONE_DIGITS = 15


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def normalize_phone(phone: str | None) -> str:
    return (phone or "").strip()


def normalize_handle(handle: str | None) -> str | None:
    value = (handle or "").strip()
    for prefix in ("/u/", "u/", "@"):
        if value.lower().startswith(prefix):
            value = value[len(prefix) :]
            break
    return value or None


def validate_email(email: str) -> None:
    if not email:
        raise ValidationError("Email is required")
    if len(email) > 255 or not EMAIL_PATTERN.match(email):
        raise ValidationError("Please enter a valid email address")


def validate_phone(phone: str) -> None:
    if not phone:
        raise ValidationError("Phone number is required")
    digits = sum(ch.isdigit() for ch in phone)
    if (
        len(phone) > 32
        or not PHONE_PATTERN.match(phone)
        or digits < MIN_PHONE_DIGITS
        or digits > MAX_PHONE_DIGITS
    ):
        raise ValidationError("Please enter a valid phone number")


@dataclass(frozen=True)
class ApplicantInput:
    """Qualification form input, already normalized."""

    email: str
    phone: str
    reddit_username: str
    twitter_username: str | None = None
    youtube_username: str | None = None
    facebook_username: str | None = None

    @classmethod
    def build(
        cls,
        *,
        email: str | None,
        phone: str | None,
        reddit_username: str | None,
        twitter_username: str | None = None,
        youtube_username: str | None = None,
        facebook_username: str | None = None,
    ) -> "ApplicantInput":
        """
        Normalize and validate raw form values.

        Raises:
            ValidationError: a required field is missing or malformed
        """
        data = cls(
            email=normalize_email(email),
            phone=normalize_phone(phone),
            reddit_username=normalize_handle(reddit_username) or "",
            twitter_username=normalize_handle(twitter_username),
            youtube_username=normalize_handle(youtube_username),
            facebook_username=normalize_handle(facebook_username),
        )
        data.validate()
        return data

    def validate(self) -> None:
        validate_email(self.email)
        validate_phone(self.phone)
        if not self.reddit_username:
            raise ValidationError("Reddit username is required")
        if not REDDIT_USERNAME_PATTERN.match(self.reddit_username):
            raise ValidationError("Please enter a valid Reddit username")
        for label, value in (
            ("Twitter", self.twitter_username),
            ("YouTube", self.youtube_username),
            ("Facebook", self.facebook_username),
        ):
            if value is not None and len(value) > 128:
                raise ValidationError(f"{label} username is too long")


@dataclass(frozen=True)
class QualificationResult:
    applicant_id: str
    matched_company: Company | None
    message: str = "Application processed successfully"
    success: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "data": {
                "matchedCompany": (
                    self.matched_company.to_public() if self.matched_company else None
                ),
            },
        }
