# =============================================================================
# app/routers/developer.py - Developer Dashboard Endpoints
# =============================================================================

from fastapi import APIRouter, Depends

from app.auth import get_current_developer
from app.dependencies import CatalogServiceDep
from core.models import App, Developer

router = APIRouter()


@router.get("/apps", response_model=list[App])
def list_my_apps(
    catalog: CatalogServiceDep,
    developer: Developer = Depends(get_current_developer),
):
    """Every app the logged-in developer submitted, in any state, newest first."""
    return catalog.list_by_developer(developer.id)
