"""
Qualification domain

- company catalog & matching
- applicant input validation
- qualify flow (verify Reddit handle -> match -> persist)
"""

from src.services.qualification.catalog import (
    DEFAULT_COMPANIES,
    Company,
    CompanyCatalog,
    load_company_catalog,
)
from src.services.qualification.schema import ApplicantInput, QualificationResult
from src.services.qualification.service import QualificationService

__all__ = [
    "QualificationService",
    # schema
    "ApplicantInput",
    "QualificationResult",
    # catalog
    "Company",
    "CompanyCatalog",
    "DEFAULT_COMPANIES",
    "load_company_catalog",
]
