# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - apps.py: Public catalog, downloads, app submission and edits
# - developer.py: The logged-in developer's own apps
# - payments.py: Listing fee initialize/verify
# - admin.py: Moderation and payment reconciliation
#
# Each router is mounted in main.py with a URL prefix.
#
# Handlers that reach the repository, bcrypt or Paystack are plain `def`
# so FastAPI runs them in its threadpool instead of on the event loop.
# =============================================================================

from . import health
from . import apps
from . import developer
from . import payments
from . import admin

__all__ = [
    "health",
    "apps",
    "developer",
    "payments",
    "admin",
]
