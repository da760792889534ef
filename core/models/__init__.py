# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - developer.py: Developer accounts and credentials
# - app.py: App listings, categories and the two state enums
# - payment.py: Listing-fee payment attempts
#
# These models define the "contract" between API and clients.
# =============================================================================

from .base import CamelModel, UrlStr, utc_now

from .developer import (
    Developer,
    DeveloperCreate,
    DeveloperLogin,
    DeveloperResponse,
)

from .app import (
    SCREENSHOT_COUNT,
    App,
    AppCategory,
    AppCreate,
    AppStatus,
    AppStatusUpdate,
    AppUpdate,
    PaymentStatus,
)

from .payment import (
    Payment,
    PaymentInitializeRequest,
    PaymentInitializeResponse,
    PaymentVerifyRequest,
    PaymentVerifyResponse,
    ReconcileResponse,
)

__all__ = [
    # Base
    "CamelModel",
    "UrlStr",
    "utc_now",
    # Developer
    "Developer",
    "DeveloperCreate",
    "DeveloperLogin",
    "DeveloperResponse",
    # App
    "SCREENSHOT_COUNT",
    "App",
    "AppCategory",
    "AppCreate",
    "AppStatus",
    "AppStatusUpdate",
    "AppUpdate",
    "PaymentStatus",
    # Payment
    "Payment",
    "PaymentInitializeRequest",
    "PaymentInitializeResponse",
    "PaymentVerifyRequest",
    "PaymentVerifyResponse",
    "ReconcileResponse",
]
