# =============================================================================
# app/routers/payments.py - Listing Fee Endpoints
# =============================================================================
# Flow:
# 1. POST /payments/initialize {appId} -> redirect the developer to
#    authorizationUrl (Paystack hosted checkout)
# 2. Paystack redirects back to the client callback with ?reference=...
# 3. POST /payments/verify {reference} -> Paystack is asked for the outcome
# =============================================================================

from fastapi import APIRouter, Depends

from app.auth import get_current_developer
from app.dependencies import SubmissionServiceDep
from core.models import (
    Developer,
    PaymentInitializeRequest,
    PaymentInitializeResponse,
    PaymentStatus,
    PaymentVerifyRequest,
    PaymentVerifyResponse,
)

router = APIRouter()

_VERIFY_MESSAGES = {
    PaymentStatus.COMPLETED: "Payment verified successfully",
    PaymentStatus.FAILED: "Payment verification failed",
    PaymentStatus.PENDING: "Payment is still processing",
}


@router.post("/initialize", response_model=PaymentInitializeResponse)
def initialize_payment(
    body: PaymentInitializeRequest,
    submissions: SubmissionServiceDep,
    developer: Developer = Depends(get_current_developer),
):
    """
    Start paying the listing fee for one of your apps.

    Raises:
        401: If not authenticated
        403: If the app belongs to another developer
        404: If the app doesn't exist
        409: If the fee is already paid (or a retry is refused by policy)
        502: If Paystack is unavailable
    """
    payment = submissions.initialize_payment(body.app_id, developer)
    return PaymentInitializeResponse(
        payment_id=payment.id,
        authorization_url=payment.authorization_url,
        reference=payment.paystack_reference,
    )


@router.post("/verify", response_model=PaymentVerifyResponse)
def verify_payment(
    body: PaymentVerifyRequest,
    submissions: SubmissionServiceDep,
):
    """
    Confirm a payment with Paystack.

    Safe to call repeatedly with the same reference.

    Raises:
        404: If no payment has this reference
        502: If Paystack is unavailable
    """
    payment = submissions.verify_payment(body.reference)
    return PaymentVerifyResponse(
        status=payment.status,
        message=_VERIFY_MESSAGES[payment.status],
        payment=payment,
    )
