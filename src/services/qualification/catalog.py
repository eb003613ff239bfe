"""
Company catalog

Ordered list of hiring companies. Matching is deterministic: the first company
flagged as available wins.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterable

from src.config.settings import config
from src.core.exceptions import ConfigurationError
from src.core.logger import logger


def _format_usd(amount: Decimal, *, cents: bool) -> str:
    if cents:
        return f"${amount:,.2f}"
    return f"${amount:,.0f}"


@dataclass(frozen=True)
class Company:
    slug: str
    name: str
    hourly_rate: Decimal
    signing_bonus: Decimal
    available: bool = True

    @property
    def pay_rate_display(self) -> str:
        return f"{_format_usd(self.hourly_rate, cents=True)} per hour"

    @property
    def bonus_display(self) -> str:
        return _format_usd(self.signing_bonus, cents=False)

    def to_public(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "slug": self.slug,
            "hourlyRate": float(self.hourly_rate),
            "payRate": self.pay_rate_display,
            "signingBonus": float(self.signing_bonus),
            "bonus": self.bonus_display,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Company":
        try:
            return cls(
                slug=str(data["slug"]).strip(),
                name=str(data["name"]).strip(),
                hourly_rate=Decimal(str(data["hourly_rate"])),
                signing_bonus=Decimal(str(data.get("signing_bonus", 0))),
                available=bool(data.get("available", True)),
            )
        except (KeyError, ArithmeticError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid company catalog entry {data!r}: {e}")


DEFAULT_COMPANIES: tuple[Company, ...] = (
    Company(
        slug="silicon-valley-consulting",
        name="Silicon Valley Consulting",
        hourly_rate=Decimal("2.00"),
        signing_bonus=Decimal("500"),
        available=True,
    ),
)


class CompanyCatalog:
    def __init__(self, companies: Iterable[Company] | None = None):
        self._companies: tuple[Company, ...] = (
            tuple(companies) if companies is not None else DEFAULT_COMPANIES
        )
        slugs = [c.slug for c in self._companies]
        if len(slugs) != len(set(slugs)):
            raise ConfigurationError("Company catalog contains duplicate slugs")

    @property
    def companies(self) -> tuple[Company, ...]:
        return self._companies

    def match_for(self, applicant: Any = None) -> Company | None:
        """First available company, or None. The applicant does not affect the choice yet."""
        return next((c for c in self._companies if c.available), None)


def load_company_catalog(path: str | None = None) -> CompanyCatalog:
    """Catalog from COMPANY_CATALOG_FILE (JSON list) or the built-in default."""
    path = path or config.company_catalog_file
    if not path:
        return CompanyCatalog()

    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Cannot read company catalog {path}: {e}")

    if not isinstance(raw, list):
        raise ConfigurationError(f"Company catalog {path} must be a JSON list")

    catalog = CompanyCatalog(Company.from_dict(item) for item in raw)
    logger.info("Loaded {} companies from {}", len(catalog.companies), path)
    return catalog
