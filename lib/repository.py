# =============================================================================
# lib/repository.py - Persistence Contract and In-Memory Store
# =============================================================================
# The marketplace keeps three collections: developers, apps, payments.
# MarketplaceRepository is the read/write contract every backend implements;
# services receive an instance through dependency injection instead of
# reaching for a global client.
#
# Implementations:
# - SupabaseRepository (lib/supabase_client.py): the managed database
# - InMemoryRepository (below): local demos and tests
#
# Writes target a single document each. Nothing here spans documents in a
# transaction.
# =============================================================================

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any

from app.exceptions import DeveloperExistsError
from core.models import App, AppStatus, Developer, Payment, PaymentStatus, utc_now

logger = logging.getLogger(__name__)


class MarketplaceRepository(ABC):
    """
    Read/write contract over the developers, apps and payments collections.

    Lookups return None when nothing matches; they never raise for a miss.
    Listing methods return apps newest first by created_at.
    """

    # -------------------------------------------------------------------------
    # Developers
    # -------------------------------------------------------------------------

    @abstractmethod
    def create_developer(self, developer: Developer) -> Developer:
        """
        Raises:
            DeveloperExistsError: If the email is already taken
        """

    @abstractmethod
    def get_developer_by_id(self, developer_id: str) -> Developer | None: ...

    @abstractmethod
    def get_developer_by_email(self, email: str) -> Developer | None: ...

    # -------------------------------------------------------------------------
    # Apps
    # -------------------------------------------------------------------------

    @abstractmethod
    def create_app(self, app: App) -> App: ...

    @abstractmethod
    def get_app(self, app_id: str) -> App | None: ...

    @abstractmethod
    def list_apps(
        self,
        status: AppStatus | None = None,
        developer_id: str | None = None,
    ) -> list[App]: ...

    @abstractmethod
    def update_app(self, app_id: str, changes: dict[str, Any]) -> App | None:
        """Apply `changes` (snake_case field names), bump updated_at, return the new App."""

    @abstractmethod
    def increment_downloads(self, app_id: str) -> int | None:
        """
        Atomically add one to an app's download counter.

        Returns the new count, or None if the app doesn't exist. Concurrent
        calls must never lose an increment.
        """

    # -------------------------------------------------------------------------
    # Payments
    # -------------------------------------------------------------------------

    @abstractmethod
    def create_payment(self, payment: Payment) -> Payment: ...

    @abstractmethod
    def get_payment(self, payment_id: str) -> Payment | None: ...

    @abstractmethod
    def get_payment_by_reference(self, reference: str) -> Payment | None:
        """Find a payment by its Paystack reference, falling back to our internal one."""

    @abstractmethod
    def list_payments(
        self,
        status: PaymentStatus | None = None,
        app_id: str | None = None,
    ) -> list[Payment]: ...

    @abstractmethod
    def update_payment(self, payment_id: str, changes: dict[str, Any]) -> Payment | None: ...

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    @abstractmethod
    def ping(self) -> None:
        """Raise if the backend can't be reached."""


def _newest_first(items: list) -> list:
    # Reverse insertion order first so equal timestamps still come out newest first
    return sorted(reversed(items), key=lambda item: item.created_at, reverse=True)


class InMemoryRepository(MarketplaceRepository):
    """
    Process-local repository.

    Holds everything in dicts behind a single lock. Returned models are
    copies, so callers can't mutate stored state by accident.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._developers: dict[str, Developer] = {}
        self._apps: dict[str, App] = {}
        self._payments: dict[str, Payment] = {}

    # -------------------------------------------------------------------------
    # Developers
    # -------------------------------------------------------------------------

    def create_developer(self, developer: Developer) -> Developer:
        with self._lock:
            if any(existing.email == developer.email for existing in self._developers.values()):
                raise DeveloperExistsError()
            self._developers[developer.id] = developer.model_copy(deep=True)
        logger.debug(f"Stored developer {developer.id}")
        return developer.model_copy(deep=True)

    def get_developer_by_id(self, developer_id: str) -> Developer | None:
        with self._lock:
            developer = self._developers.get(developer_id)
            return developer.model_copy(deep=True) if developer else None

    def get_developer_by_email(self, email: str) -> Developer | None:
        with self._lock:
            for developer in self._developers.values():
                if developer.email == email:
                    return developer.model_copy(deep=True)
        return None

    # -------------------------------------------------------------------------
    # Apps
    # -------------------------------------------------------------------------

    def create_app(self, app: App) -> App:
        with self._lock:
            self._apps[app.id] = app.model_copy(deep=True)
        logger.debug(f"Stored app {app.id}")
        return app.model_copy(deep=True)

    def get_app(self, app_id: str) -> App | None:
        with self._lock:
            app = self._apps.get(app_id)
            return app.model_copy(deep=True) if app else None

    def list_apps(
        self,
        status: AppStatus | None = None,
        developer_id: str | None = None,
    ) -> list[App]:
        with self._lock:
            apps = [
                app.model_copy(deep=True)
                for app in self._apps.values()
                if (status is None or app.status == status)
                and (developer_id is None or app.developer_id == developer_id)
            ]
        return _newest_first(apps)

    def update_app(self, app_id: str, changes: dict[str, Any]) -> App | None:
        with self._lock:
            app = self._apps.get(app_id)
            if app is None:
                return None
            updated = app.model_copy(update={**changes, "updated_at": utc_now()}, deep=True)
            self._apps[app_id] = updated
            return updated.model_copy(deep=True)

    def increment_downloads(self, app_id: str) -> int | None:
        with self._lock:
            app = self._apps.get(app_id)
            if app is None:
                return None
            app.downloads += 1
            app.updated_at = utc_now()
            return app.downloads

    # -------------------------------------------------------------------------
    # Payments
    # -------------------------------------------------------------------------

    def create_payment(self, payment: Payment) -> Payment:
        with self._lock:
            self._payments[payment.id] = payment.model_copy(deep=True)
        logger.debug(f"Stored payment {payment.id}")
        return payment.model_copy(deep=True)

    def get_payment(self, payment_id: str) -> Payment | None:
        with self._lock:
            payment = self._payments.get(payment_id)
            return payment.model_copy(deep=True) if payment else None

    def get_payment_by_reference(self, reference: str) -> Payment | None:
        with self._lock:
            for payment in self._payments.values():
                if payment.paystack_reference == reference:
                    return payment.model_copy(deep=True)
            for payment in self._payments.values():
                if payment.reference == reference:
                    return payment.model_copy(deep=True)
        return None

    def list_payments(
        self,
        status: PaymentStatus | None = None,
        app_id: str | None = None,
    ) -> list[Payment]:
        with self._lock:
            payments = [
                payment.model_copy(deep=True)
                for payment in self._payments.values()
                if (status is None or payment.status == status)
                and (app_id is None or payment.app_id == app_id)
            ]
        return _newest_first(payments)

    def update_payment(self, payment_id: str, changes: dict[str, Any]) -> Payment | None:
        with self._lock:
            payment = self._payments.get(payment_id)
            if payment is None:
                return None
            updated = payment.model_copy(update={**changes, "updated_at": utc_now()}, deep=True)
            self._payments[payment_id] = updated
            return updated.model_copy(deep=True)

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    def ping(self) -> None:
        return None
