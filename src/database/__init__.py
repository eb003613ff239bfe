"""
Database package
"""

from ..models.database import Applicant, Base, ContractorRequest, ContractorRequestStatus
from .database import (
    create_db_engine,
    create_session,
    get_db,
    get_db_url,
    is_foreign_key_violation,
    is_unique_violation,
)

__all__ = [
    "Base",
    "Applicant",
    "ContractorRequest",
    "ContractorRequestStatus",
    "get_db",
    "create_db_engine",
    "create_session",
    "get_db_url",
    "is_unique_violation",
    "is_foreign_key_violation",
]
