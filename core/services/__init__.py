# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .developer_service import DeveloperService
from .catalog_service import CatalogService
from .submission_service import PaymentRetryPolicy, SubmissionService

__all__ = [
    "DeveloperService",
    "CatalogService",
    "PaymentRetryPolicy",
    "SubmissionService",
]
