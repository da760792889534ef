# =============================================================================
# app/routers/admin.py - Moderation Endpoints
# =============================================================================
# Administrators exchange ADMIN_API_KEY for a short-lived admin token, then
# send it as a Bearer token. Developer sessions are refused here.
# =============================================================================

import hmac
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from app.auth import SessionIdentity, require_admin
from app.auth.models import AdminLoginRequest, AdminTokenResponse
from app.config import settings
from app.dependencies import CatalogServiceDep, RepositoryDep, SubmissionServiceDep
from app.exceptions import AuthenticationError
from core.models import App, AppStatusUpdate, Payment, PaymentStatus, ReconcileResponse
from lib.security import issue_session_token

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=AdminTokenResponse)
def admin_login(body: AdminLoginRequest):
    """
    Exchange the administrator key for an admin token.

    Raises:
        401: If the key is wrong or no key is configured
    """
    expected = settings.ADMIN_API_KEY
    if not expected or not hmac.compare_digest(body.api_key.encode("utf-8"), expected.encode("utf-8")):
        logger.warning("Rejected admin login")
        raise AuthenticationError("Invalid administrator key")

    logger.info("Admin session issued")
    return AdminTokenResponse(
        token=issue_session_token("admin", role="admin"),
        expires_in=settings.session_ttl_seconds,
    )


@router.get("/apps", response_model=list[App])
def list_all_apps(
    catalog: CatalogServiceDep,
    admin: SessionIdentity = Depends(require_admin),
):
    """Every app in every state, newest first."""
    return catalog.list_all()


@router.put("/apps/{app_id}/status", response_model=App)
def set_app_status(
    app_id: Annotated[str, Path(description="App id", min_length=1)],
    body: AppStatusUpdate,
    submissions: SubmissionServiceDep,
    admin: SessionIdentity = Depends(require_admin),
):
    """
    Publish, reject or un-publish an app.

    Raises:
        400: If status isn't pending/published/rejected
        404: If the app doesn't exist
    """
    return submissions.set_status(app_id, body.status)


@router.get("/payments", response_model=list[Payment])
def list_payments(
    repository: RepositoryDep,
    admin: SessionIdentity = Depends(require_admin),
    status: Annotated[PaymentStatus | None, Query(description="Filter by status")] = None,
    app_id: Annotated[str | None, Query(alias="appId", description="Filter by app")] = None,
):
    """Payment attempts, newest first."""
    return repository.list_payments(status=status, app_id=app_id)


@router.post("/payments/reconcile", response_model=ReconcileResponse)
def reconcile_payments(
    submissions: SubmissionServiceDep,
    admin: SessionIdentity = Depends(require_admin),
):
    """
    Mark apps as paid when a completed payment exists but the app's own
    payment status was never updated.
    """
    return ReconcileResponse(repaired_app_ids=submissions.reconcile_payments())
