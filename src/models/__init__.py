from .database import Applicant, Base, ContractorRequest, ContractorRequestStatus

__all__ = ["Base", "Applicant", "ContractorRequest", "ContractorRequestStatus"]
