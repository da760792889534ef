# =============================================================================
# lib/seed.py - Demo Catalog Data
# =============================================================================
# Loads the MED-A developer and its published listing so a fresh local
# instance has something in the catalog.
#
# Usage:
#   from lib.seed import seed_demo_data
#   seed_demo_data(repository)
# =============================================================================

import logging

from core.models import App, AppCategory, AppStatus, Developer, PaymentStatus
from lib.repository import MarketplaceRepository
from lib.security import hash_password
from lib.utils import new_id

logger = logging.getLogger(__name__)

DEMO_DEVELOPER_EMAIL = "developer@med-a.com"
DEMO_DEVELOPER_PASSWORD = "password123"

_PLACEHOLDER = "https://via.placeholder.com"


def seed_demo_data(repository: MarketplaceRepository) -> App | None:
    """
    Insert the demo developer and the published MED-A app.

    Does nothing if the demo developer already exists.

    Returns:
        The seeded App, or None when seeding was skipped
    """
    if repository.get_developer_by_email(DEMO_DEVELOPER_EMAIL):
        logger.info("Demo data already present, skipping seed")
        return None

    developer = repository.create_developer(
        Developer(
            id=new_id(),
            email=DEMO_DEVELOPER_EMAIL,
            name="MED-A Team",
            company="Medical Education Solutions",
            password_hash=hash_password(DEMO_DEVELOPER_PASSWORD),
            is_verified=True,
        )
    )

    app = repository.create_app(
        App(
            id=new_id(),
            name="MED-A",
            description=(
                "Welcome to MED-A! Your go-to app for accessing past exam papers from "
                "Kenya Medical Training College (KMTC). Whether you're a KMTC student or "
                "enrolled in a private institution offering courses like nursing and more, "
                "MED-A is here to support your studies with valuable resources to help you "
                "succeed."
            ),
            category=AppCategory.MEDICAL_EDUCATION,
            logo_url=f"{_PLACEHOLDER}/120x120/4F46E5/ffffff?text=MED-A",
            download_url="https://example.com/download/med-a.apk",
            screenshots=[
                f"{_PLACEHOLDER}/400x600/4F46E5/ffffff?text=Screenshot+{n}"
                for n in range(1, 5)
            ],
            developer_id=developer.id,
            developer_name=developer.name,
            status=AppStatus.PUBLISHED,
            payment_status=PaymentStatus.COMPLETED,
            rating=4.8,
            downloads=1250,
        )
    )

    logger.info(f"Seeded demo developer {developer.id} and app {app.id}")
    return app
