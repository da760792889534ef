# =============================================================================
# core/models/payment.py - Listing Fee Payment Schemas
# =============================================================================
# One Payment record is created per initialization attempt. Paystack is the
# source of truth for whether money arrived; Payment.status only changes
# after a verify call against the gateway.
#
# Flow:
# 1. Developer POSTs PaymentInitializeRequest -> gets a hosted checkout URL
# 2. Paystack redirects back to the client with the reference
# 3. Client POSTs PaymentVerifyRequest -> Payment and App are updated
# =============================================================================

from datetime import datetime

from pydantic import Field

from .app import PaymentStatus
from .base import CamelModel, utc_now


class Payment(CamelModel):
    """A listing-fee payment attempt as stored in the `payments` collection."""

    id: str
    app_id: str
    developer_id: str
    amount: int = 1000
    currency: str = "KES"
    # Our correlation id; sent to Paystack as the transaction reference
    reference: str
    # Reference Paystack reports back (normally identical to `reference`)
    paystack_reference: str
    status: PaymentStatus = PaymentStatus.PENDING
    authorization_url: str | None = None
    provider_status: str | None = None
    paid_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class PaymentInitializeRequest(CamelModel):
    """Body for POST /payments/initialize."""

    app_id: str = Field(..., min_length=1)


class PaymentInitializeResponse(CamelModel):
    """Where to send the developer to pay."""

    payment_id: str
    authorization_url: str
    reference: str


class PaymentVerifyRequest(CamelModel):
    """Body for POST /payments/verify."""

    reference: str = Field(..., min_length=1, max_length=200)


class PaymentVerifyResponse(CamelModel):
    """
    Outcome of a verification.

    `status` is the confirmed Payment status: "completed", "failed", or
    "pending" when the gateway has no final answer yet.
    """

    status: PaymentStatus
    message: str
    payment: Payment


class ReconcileResponse(CamelModel):
    """Apps whose payment status was repaired from their completed payments."""

    repaired_app_ids: list[str] = Field(default_factory=list)
