# =============================================================================
# lib/supabase_client.py - Supabase-Backed Repository
# =============================================================================
# Implements MarketplaceRepository on top of Supabase (PostgREST).
# Tables: developers, apps, payments (see supabase/migrations/). Columns use
# snake_case, matching the Python field names of the core models.
#
# The download counter goes through the `increment_app_downloads` database
# function so concurrent increments are applied atomically by Postgres.
#
# Usage:
#   from lib.supabase_client import SupabaseRepository
#   repository = SupabaseRepository.from_settings()
#   app = repository.get_app(app_id)
# =============================================================================

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Any

from supabase import Client, create_client

from app.config import settings
from app.exceptions import ConflictError, DeveloperExistsError, StorageError
from core.models import App, AppStatus, Developer, Payment, PaymentStatus, utc_now
from lib.repository import MarketplaceRepository

# Set up logging for this module
logger = logging.getLogger(__name__)

# PostgREST code for ".single()" matching no rows
NO_ROWS_CODE = "PGRST116"
# Postgres unique_violation
UNIQUE_VIOLATION_CODE = "23505"

DEVELOPERS_TABLE = "developers"
APPS_TABLE = "apps"
PAYMENTS_TABLE = "payments"


def _serialize(changes: dict[str, Any]) -> dict[str, Any]:
    """Turn enums and datetimes into JSON-friendly column values."""
    row: dict[str, Any] = {}
    for key, value in changes.items():
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, datetime):
            value = value.isoformat()
        row[key] = value
    return row


class SupabaseRepository(MarketplaceRepository):
    """
    Repository backed by a Supabase project.

    Uses the service_role key, which bypasses Row Level Security; ownership
    checks happen in the service layer.

    Example:
        repository = SupabaseRepository.from_settings()
        published = repository.list_apps(status=AppStatus.PUBLISHED)
    """

    def __init__(self, client: Client):
        self._client = client

    @classmethod
    def from_settings(cls) -> "SupabaseRepository":
        """
        Build a repository from SUPABASE_URL / SUPABASE_SERVICE_KEY.

        Raises:
            StorageError: If client creation fails
        """
        try:
            client = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY)
            logger.info("Supabase client initialized successfully")
        except Exception as e:
            raise StorageError(
                message=f"Failed to create Supabase client: {e}",
                details={"hint": "Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"},
            )
        return cls(client)

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _fetch_by_id(self, table: str, row_id: str) -> dict[str, Any] | None:
        try:
            response = (
                self._client.table(table)
                .select("*")
                .eq("id", row_id)
                .single()
                .execute()
            )
            return response.data
        except Exception as e:
            if NO_ROWS_CODE in str(e):
                return None
            raise StorageError(
                message=f"Failed to fetch from {table}: {e}",
                details={"table": table, "id": row_id},
            )

    def _fetch_first(self, table: str, column: str, value: str) -> dict[str, Any] | None:
        try:
            response = (
                self._client.table(table)
                .select("*")
                .eq(column, value)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise StorageError(
                message=f"Failed to query {table}.{column}: {e}",
                details={"table": table, "column": column},
            )
        rows = response.data or []
        return rows[0] if rows else None

    def _insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self._client.table(table).insert(row).execute()
        except Exception as e:
            if UNIQUE_VIOLATION_CODE in str(e):
                raise ConflictError(
                    f"Duplicate row in {table}",
                    details={"table": table, "id": row.get("id")},
                )
            raise StorageError(
                message=f"Failed to insert into {table}: {e}",
                details={"table": table, "id": row.get("id")},
            )
        if not response.data:
            raise StorageError(
                message=f"Insert into {table} returned no data",
                details={"table": table, "id": row.get("id")},
            )
        return response.data[0]

    def _update(self, table: str, row_id: str, changes: dict[str, Any]) -> dict[str, Any] | None:
        data = _serialize({**changes, "updated_at": utc_now()})
        try:
            response = (
                self._client.table(table)
                .update(data)
                .eq("id", row_id)
                .execute()
            )
        except Exception as e:
            raise StorageError(
                message=f"Failed to update {table}: {e}",
                details={"table": table, "id": row_id},
            )
        rows = response.data or []
        return rows[0] if rows else None

    def _select_many(
        self,
        table: str,
        filters: dict[str, Any],
    ) -> list[dict[str, Any]]:
        try:
            query = self._client.table(table).select("*")
            for column, value in _serialize(filters).items():
                if value is not None:
                    query = query.eq(column, value)
            response = query.order("created_at", desc=True).execute()
        except Exception as e:
            raise StorageError(
                message=f"Failed to list {table}: {e}",
                details={"table": table, "filters": _serialize(filters)},
            )
        return response.data or []

    # -------------------------------------------------------------------------
    # Developers
    # -------------------------------------------------------------------------

    def create_developer(self, developer: Developer) -> Developer:
        try:
            row = self._insert(DEVELOPERS_TABLE, developer.model_dump(mode="json"))
        except ConflictError:
            # The only unique column besides the primary key is email
            raise DeveloperExistsError()
        logger.info(f"Created developer: {row['id']}")
        return Developer.model_validate(row)

    def get_developer_by_id(self, developer_id: str) -> Developer | None:
        row = self._fetch_by_id(DEVELOPERS_TABLE, developer_id)
        return Developer.model_validate(row) if row else None

    def get_developer_by_email(self, email: str) -> Developer | None:
        row = self._fetch_first(DEVELOPERS_TABLE, "email", email)
        return Developer.model_validate(row) if row else None

    # -------------------------------------------------------------------------
    # Apps
    # -------------------------------------------------------------------------

    def create_app(self, app: App) -> App:
        row = self._insert(APPS_TABLE, app.model_dump(mode="json"))
        logger.info(f"Created app: {row['id']} for developer: {row['developer_id']}")
        return App.model_validate(row)

    def get_app(self, app_id: str) -> App | None:
        row = self._fetch_by_id(APPS_TABLE, app_id)
        return App.model_validate(row) if row else None

    def list_apps(
        self,
        status: AppStatus | None = None,
        developer_id: str | None = None,
    ) -> list[App]:
        rows = self._select_many(APPS_TABLE, {"status": status, "developer_id": developer_id})
        return [App.model_validate(row) for row in rows]

    def update_app(self, app_id: str, changes: dict[str, Any]) -> App | None:
        row = self._update(APPS_TABLE, app_id, changes)
        return App.model_validate(row) if row else None

    def increment_downloads(self, app_id: str) -> int | None:
        try:
            response = self._client.rpc(
                "increment_app_downloads",
                {"target_app_id": app_id},
            ).execute()
        except Exception as e:
            raise StorageError(
                message=f"Failed to increment downloads: {e}",
                details={"app_id": app_id},
            )
        # The function returns NULL when no row matched
        return response.data

    # -------------------------------------------------------------------------
    # Payments
    # -------------------------------------------------------------------------

    def create_payment(self, payment: Payment) -> Payment:
        row = self._insert(PAYMENTS_TABLE, payment.model_dump(mode="json"))
        logger.info(f"Created payment: {row['id']} for app: {row['app_id']}")
        return Payment.model_validate(row)

    def get_payment(self, payment_id: str) -> Payment | None:
        row = self._fetch_by_id(PAYMENTS_TABLE, payment_id)
        return Payment.model_validate(row) if row else None

    def get_payment_by_reference(self, reference: str) -> Payment | None:
        row = self._fetch_first(PAYMENTS_TABLE, "paystack_reference", reference)
        if row is None:
            row = self._fetch_first(PAYMENTS_TABLE, "reference", reference)
        return Payment.model_validate(row) if row else None

    def list_payments(
        self,
        status: PaymentStatus | None = None,
        app_id: str | None = None,
    ) -> list[Payment]:
        rows = self._select_many(PAYMENTS_TABLE, {"status": status, "app_id": app_id})
        return [Payment.model_validate(row) for row in rows]

    def update_payment(self, payment_id: str, changes: dict[str, Any]) -> Payment | None:
        row = self._update(PAYMENTS_TABLE, payment_id, changes)
        return Payment.model_validate(row) if row else None

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    def ping(self) -> None:
        try:
            self._client.table(APPS_TABLE).select("id").limit(1).execute()
        except Exception as e:
            raise StorageError(message=f"Supabase unreachable: {e}")
