from src.services.contractor.service import ContractorRequestService, RequestResult

__all__ = ["ContractorRequestService", "RequestResult"]
