# =============================================================================
# core/services/catalog_service.py - Catalog Queries
# =============================================================================
# Read-only views over the apps collection. Nothing here writes.
# =============================================================================

from app.exceptions import NotFoundError
from core.models import App, AppStatus
from lib.repository import MarketplaceRepository


class CatalogService:
    """Read-side projections of the app catalog, all newest first."""

    def __init__(self, repository: MarketplaceRepository):
        self.repository = repository

    def list_published(self) -> list[App]:
        """Apps visible in the public catalog."""
        return self.repository.list_apps(status=AppStatus.PUBLISHED)

    def list_by_developer(self, developer_id: str) -> list[App]:
        """Every app a developer submitted, regardless of state."""
        return self.repository.list_apps(developer_id=developer_id)

    def list_all(self) -> list[App]:
        """Every app, for moderation."""
        return self.repository.list_apps()

    def get_by_id(self, app_id: str) -> App:
        app = self.repository.get_app(app_id)
        if app is None:
            raise NotFoundError("App", app_id)
        return app
