# =============================================================================
# core/services/developer_service.py - Developer Accounts
# =============================================================================
# Registration, credential checks and lookups for developer accounts.
# Only bcrypt hashes of passwords are ever stored.
# =============================================================================

import logging

from app.exceptions import DeveloperExistsError, NotFoundError
from core.models import Developer, DeveloperCreate
from lib.repository import MarketplaceRepository
from lib.security import hash_password, verify_password
from lib.utils import new_id

logger = logging.getLogger(__name__)


class DeveloperService:
    """
    Service for developer account operations.

    Args:
        repository: Persistence backend holding the developers collection
    """

    def __init__(self, repository: MarketplaceRepository):
        self.repository = repository

    def register(self, data: DeveloperCreate) -> Developer:
        """
        Create a developer account.

        Args:
            data: Validated registration payload (email already normalized)

        Returns:
            The stored Developer

        Raises:
            DeveloperExistsError: If the email is already registered
        """
        if self.repository.get_developer_by_email(data.email):
            raise DeveloperExistsError()

        developer = Developer(
            id=new_id(),
            email=data.email,
            name=data.name,
            company=data.company,
            password_hash=hash_password(data.password),
        )
        developer = self.repository.create_developer(developer)
        logger.info(f"Registered developer: {developer.id}")
        return developer

    def verify(self, email: str, password: str) -> Developer | None:
        """
        Check login credentials.

        Returns the Developer when the password matches, otherwise None.
        An unknown email and a wrong password look exactly the same to the
        caller, and both run one bcrypt comparison.
        """
        developer = self.repository.get_developer_by_email(email.strip().lower())
        password_hash = developer.password_hash if developer else None

        if not verify_password(password, password_hash):
            return None
        return developer

    def get(self, developer_id: str) -> Developer:
        """
        Raises:
            NotFoundError: If no developer has this id
        """
        developer = self.repository.get_developer_by_id(developer_id)
        if developer is None:
            raise NotFoundError("Developer", developer_id)
        return developer
