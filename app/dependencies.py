# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
#
# The repository and the payment gateway are built once per process.
# Tests swap them out with app.dependency_overrides:
#
#   app.dependency_overrides[get_repository] = lambda: InMemoryRepository()
# =============================================================================

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from app.config import settings
from core.services import CatalogService, DeveloperService, SubmissionService
from lib.paystack_client import PaystackClient
from lib.repository import InMemoryRepository, MarketplaceRepository

logger = logging.getLogger(__name__)


@lru_cache
def get_repository() -> MarketplaceRepository:
    """
    Build the persistence backend selected by STORAGE_BACKEND.

    Returns the same instance for the lifetime of the process.
    """
    if settings.STORAGE_BACKEND == "memory":
        logger.info("Using in-memory repository")
        return InMemoryRepository()

    from lib.supabase_client import SupabaseRepository

    return SupabaseRepository.from_settings()


@lru_cache
def get_payment_gateway() -> PaystackClient:
    """Paystack adapter configured from settings."""
    return PaystackClient.from_settings()


# Type aliases for dependency injection
RepositoryDep = Annotated[MarketplaceRepository, Depends(get_repository)]
GatewayDep = Annotated[PaystackClient, Depends(get_payment_gateway)]


def get_developer_service(repository: RepositoryDep) -> DeveloperService:
    return DeveloperService(repository)


def get_catalog_service(repository: RepositoryDep) -> CatalogService:
    return CatalogService(repository)


def get_submission_service(
    repository: RepositoryDep,
    gateway: GatewayDep,
) -> SubmissionService:
    return SubmissionService.from_settings(repository, gateway)


DeveloperServiceDep = Annotated[DeveloperService, Depends(get_developer_service)]
CatalogServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]
SubmissionServiceDep = Annotated[SubmissionService, Depends(get_submission_service)]
