# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains framework-agnostic business logic:
# - models/: Pydantic schemas for developers, apps and payments
# - services/: Account, catalog and submission lifecycle services
#
# Services raise the taxonomy in app.exceptions but never see requests,
# responses or routing, so they run the same under tests and the API.
# =============================================================================
