# =============================================================================
# core/models/app.py - App Listing Schemas
# =============================================================================
# These models define the API contract for app listings:
# - AppCreate: Submission payload from a developer
# - AppUpdate: Partial owner edit of listing content
# - AppStatusUpdate: Moderation decision from an administrator
# - App: The stored listing with its moderation and payment state
#
# An app carries two independent state axes:
#   status:         pending <-> published <-> rejected  (admin driven)
#   payment_status: pending -> completed | failed       (gateway driven)
# Both start at "pending" when the app is submitted.
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import ConfigDict, Field

from .base import CamelModel, UrlStr, utc_now


SCREENSHOT_COUNT = 4


class AppCategory(str, Enum):
    """Fixed set of catalog categories."""
    MEDICAL_EDUCATION = "Medical Education"
    HEALTH_MONITORING = "Health Monitoring"
    PHARMACY = "Pharmacy"
    ANATOMY = "Anatomy"
    OTHER = "Other"


class AppStatus(str, Enum):
    """
    Moderation state of a listing.

    - pending: Submitted, waiting for review (initial state)
    - published: Visible in the public catalog
    - rejected: Hidden from the catalog, still visible to admins

    Any state can move to any other state; there is no terminal state.
    """
    PENDING = "pending"
    PUBLISHED = "published"
    REJECTED = "rejected"


class PaymentStatus(str, Enum):
    """
    Listing-fee state, shared by App.payment_status and Payment.status.

    - pending: No confirmed outcome yet
    - completed: Gateway confirmed the money was received
    - failed: Gateway reported the charge as failed
    """
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class AppCreate(CamelModel):
    """
    Schema for submitting an app.

    The owning developer's id and name are injected by the server from the
    session, so they are not part of this payload.

    Example:
        {
            "name": "MED-A",
            "description": "Past exam papers for KMTC students",
            "category": "Medical Education",
            "logoUrl": "https://cdn.example.com/med-a/logo.png",
            "downloadUrl": "https://example.com/download/med-a.apk",
            "screenshots": ["https://...1.png", "https://...2.png",
                            "https://...3.png", "https://...4.png"]
        }
    """

    name: str = Field(..., min_length=2, max_length=100)
    description: str = Field(..., min_length=10, max_length=5000)
    category: AppCategory
    logo_url: UrlStr
    download_url: UrlStr
    screenshots: list[UrlStr] = Field(
        ...,
        min_length=SCREENSHOT_COUNT,
        max_length=SCREENSHOT_COUNT,
        description="Exactly four screenshot URLs"
    )


class AppUpdate(CamelModel):
    """
    Partial edit of listing content by its owner.

    Moderation state, payment state and counters can't be changed here;
    unknown fields are rejected rather than silently dropped.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=2, max_length=100)
    description: str | None = Field(default=None, min_length=10, max_length=5000)
    category: AppCategory | None = None
    logo_url: UrlStr | None = None
    download_url: UrlStr | None = None
    screenshots: list[UrlStr] | None = Field(
        default=None,
        min_length=SCREENSHOT_COUNT,
        max_length=SCREENSHOT_COUNT,
    )


class AppStatusUpdate(CamelModel):
    """Moderation decision body for PUT /admin/apps/{id}/status."""

    status: AppStatus


class App(CamelModel):
    """
    A listing as stored in the `apps` collection.

    `developer_name` is a snapshot taken at submission time. Renaming a
    developer does not rewrite existing listings.
    """

    id: str
    name: str
    description: str
    category: AppCategory
    logo_url: str
    download_url: str
    screenshots: list[str]
    developer_id: str
    developer_name: str
    status: AppStatus = AppStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_id: str | None = None
    rating: float = Field(default=0, ge=0, le=5)
    downloads: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
