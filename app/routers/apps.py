# =============================================================================
# app/routers/apps.py - App Catalog and Submission Endpoints
# =============================================================================
# Public catalog reads, download counting, and developer submissions/edits.
# Reads and downloads are anonymous; writes require a developer session.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from app.auth import get_current_developer
from app.auth.models import MessageResponse
from app.dependencies import CatalogServiceDep, SubmissionServiceDep
from core.models import App, AppCreate, AppUpdate, Developer

router = APIRouter()

AppId = Annotated[str, Path(description="App id", min_length=1)]


@router.get("", response_model=list[App])
def list_published_apps(catalog: CatalogServiceDep):
    """
    List the public catalog.

    Only published apps, newest first.
    """
    return catalog.list_published()


@router.get("/{app_id}", response_model=App)
def get_app(app_id: AppId, catalog: CatalogServiceDep):
    """
    Get one app by id, whatever its status.

    Raises:
        404: If the app doesn't exist
    """
    return catalog.get_by_id(app_id)


@router.post("/{app_id}/download", response_model=MessageResponse)
def record_download(app_id: AppId, submissions: SubmissionServiceDep):
    """
    Count a download.

    Always succeeds from the caller's point of view; unknown ids and
    storage failures are logged server-side only.
    """
    submissions.increment_downloads(app_id)
    return MessageResponse(message="Download recorded")


@router.post("", response_model=App, status_code=status.HTTP_201_CREATED)
def create_app(
    body: AppCreate,
    submissions: SubmissionServiceDep,
    developer: Developer = Depends(get_current_developer),
):
    """
    Submit a new app.

    The app is owned by the logged-in developer and starts pending review
    with its listing fee unpaid.

    Raises:
        400: If the payload is invalid (e.g. not exactly 4 screenshots)
        401: If not authenticated
    """
    return submissions.create_app(body, developer)


@router.put("/{app_id}", response_model=App)
def update_app(
    app_id: AppId,
    body: AppUpdate,
    submissions: SubmissionServiceDep,
    developer: Developer = Depends(get_current_developer),
):
    """
    Edit an app's listing content.

    Raises:
        400: If a field is invalid or not editable
        401: If not authenticated
        403: If the developer doesn't own the app
        404: If the app doesn't exist
    """
    return submissions.update_app(app_id, body, developer.id)
