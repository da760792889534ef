# =============================================================================
# core/services/submission_service.py - App Submission Lifecycle
# =============================================================================
# Drives an app listing through its two state axes:
#
#   status (admin driven, any -> any):
#       pending <-> published <-> rejected
#
#   payment_status (gateway driven):
#       pending -> completed            (verified success)
#       pending -> failed               (verified failure)
#       failed  -> completed            (a later attempt succeeds)
#       failed  -> pending              (re-initialize under the "reset" policy)
#   completed is never demoted.
#
# Payment confirmation writes the Payment first and the App second. The two
# writes are not transactional; reconcile_payments() repairs apps left
# behind if the process dies in between.
# =============================================================================

import logging
from enum import Enum
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from app.config import settings
from app.exceptions import (
    AuthorizationError,
    ConflictError,
    MarketplaceException,
    NotFoundError,
    ValidationError,
)
from core.models import (
    App,
    AppCreate,
    AppStatus,
    AppUpdate,
    Developer,
    Payment,
    PaymentStatus,
    utc_now,
)
from lib.paystack_client import GatewayVerification, PaystackClient
from lib.repository import MarketplaceRepository
from lib.utils import new_id, new_payment_reference

logger = logging.getLogger(__name__)


class PaymentRetryPolicy(str, Enum):
    """
    What re-initializing payment does after an earlier attempt failed.

    - keep: Allowed; the app keeps payment_status=failed until the new
            attempt is verified
    - reset: Allowed; the app's payment_status goes back to pending
    - deny: Refused with ConflictError
    """
    KEEP = "keep"
    RESET = "reset"
    DENY = "deny"


def _validation_details(exc: PydanticValidationError) -> dict[str, Any]:
    return {
        "errors": [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in exc.errors()
        ]
    }


class SubmissionService:
    """
    Lifecycle controller for app submissions, listing fees and moderation.

    Args:
        repository: Persistence backend
        gateway: Paystack adapter used for initialize/verify
        listing_fee: Fee in major currency units
        currency: ISO currency code of the fee
        callback_url: Where Paystack sends the developer after checkout
        retry_policy: Behaviour when re-initializing after a failed payment
    """

    def __init__(
        self,
        repository: MarketplaceRepository,
        gateway: PaystackClient,
        listing_fee: int = 1000,
        currency: str = "KES",
        callback_url: str = "http://localhost:5000/payment/callback",
        retry_policy: PaymentRetryPolicy = PaymentRetryPolicy.KEEP,
    ):
        self.repository = repository
        self.gateway = gateway
        self.listing_fee = listing_fee
        self.currency = currency
        self.callback_url = callback_url
        self.retry_policy = PaymentRetryPolicy(retry_policy)

    @classmethod
    def from_settings(
        cls,
        repository: MarketplaceRepository,
        gateway: PaystackClient,
    ) -> "SubmissionService":
        return cls(
            repository=repository,
            gateway=gateway,
            listing_fee=settings.LISTING_FEE_AMOUNT,
            currency=settings.LISTING_FEE_CURRENCY,
            callback_url=settings.payment_callback_url,
            retry_policy=PaymentRetryPolicy(settings.PAYMENT_RETRY_POLICY),
        )

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _get_app(self, app_id: str) -> App:
        app = self.repository.get_app(app_id)
        if app is None:
            raise NotFoundError("App", app_id)
        return app

    def _get_owned_app(self, app_id: str, developer_id: str) -> App:
        app = self._get_app(app_id)
        if app.developer_id != developer_id:
            logger.warning(f"Developer {developer_id} tried to modify app {app_id} they don't own")
            raise AuthorizationError(
                "Not authorized to modify this app",
                details={"app_id": app_id},
            )
        return app

    # -------------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------------

    def create_app(self, data: AppCreate | dict[str, Any], developer: Developer) -> App:
        """
        Submit a new app owned by `developer`.

        The app starts as (status=pending, payment_status=pending) with zero
        rating and downloads. developer_id/developer_name always come from
        the authenticated developer.

        Raises:
            ValidationError: If the payload breaks a field constraint
        """
        if not isinstance(data, AppCreate):
            try:
                data = AppCreate.model_validate(data)
            except PydanticValidationError as e:
                raise ValidationError("Invalid app data", details=_validation_details(e))

        now = utc_now()
        app = App(
            id=new_id(),
            **data.model_dump(),
            developer_id=developer.id,
            developer_name=developer.name,
            status=AppStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            rating=0,
            downloads=0,
            created_at=now,
            updated_at=now,
        )
        app = self.repository.create_app(app)
        logger.info(f"Created app: {app.id} for developer: {developer.id}")
        return app

    def update_app(
        self,
        app_id: str,
        changes: AppUpdate | dict[str, Any],
        developer_id: str,
    ) -> App:
        """
        Edit listing content. Only the owning developer may do this.

        Raises:
            ValidationError: If a changed field breaks a constraint
            NotFoundError: If the app doesn't exist
            AuthorizationError: If `developer_id` doesn't own the app
        """
        if not isinstance(changes, AppUpdate):
            try:
                changes = AppUpdate.model_validate(changes)
            except PydanticValidationError as e:
                raise ValidationError("Invalid app data", details=_validation_details(e))

        app = self._get_owned_app(app_id, developer_id)

        fields = changes.model_dump(exclude_unset=True, exclude_none=True)
        if not fields:
            return app  # Nothing to update

        updated = self.repository.update_app(app_id, fields)
        if updated is None:
            raise NotFoundError("App", app_id)
        logger.info(f"Updated app {app_id}: {sorted(fields)}")
        return updated

    # -------------------------------------------------------------------------
    # Listing Fee
    # -------------------------------------------------------------------------

    def initialize_payment(self, app_id: str, developer: Developer) -> Payment:
        """
        Start a listing-fee payment for an app.

        Creates a new Payment record per attempt. No record is created when
        the gateway call fails.

        Returns:
            The pending Payment, including the Paystack authorization URL

        Raises:
            NotFoundError: If the app doesn't exist
            AuthorizationError: If `developer` doesn't own the app
            ConflictError: If the fee is already paid, or a retry after a
                failure is refused by the retry policy
            UpstreamError: If Paystack can't be reached or refuses
        """
        app = self._get_owned_app(app_id, developer.id)

        if app.payment_status == PaymentStatus.COMPLETED:
            raise ConflictError(
                "Listing fee for this app is already paid",
                code="PAYMENT_ALREADY_COMPLETED",
                details={"app_id": app_id},
            )

        retrying_after_failure = app.payment_status == PaymentStatus.FAILED
        if retrying_after_failure and self.retry_policy == PaymentRetryPolicy.DENY:
            raise ConflictError(
                "Payment for this app failed and can't be retried",
                code="PAYMENT_RETRY_NOT_ALLOWED",
                suggestion="Contact support to resolve the failed payment",
                details={"app_id": app_id},
            )

        reference = new_payment_reference(app.id)
        initialization = self.gateway.initialize(
            email=developer.email,
            amount=self.listing_fee,
            reference=reference,
            callback_url=self.callback_url,
            currency=self.currency,
            metadata={"app_id": app.id, "developer_id": developer.id},
        )

        payment = self.repository.create_payment(
            Payment(
                id=new_id(),
                app_id=app.id,
                developer_id=developer.id,
                amount=self.listing_fee,
                currency=self.currency,
                reference=reference,
                paystack_reference=initialization.provider_reference,
                status=PaymentStatus.PENDING,
                authorization_url=initialization.authorization_url,
            )
        )

        app_changes: dict[str, Any] = {"payment_id": payment.id}
        if retrying_after_failure and self.retry_policy == PaymentRetryPolicy.RESET:
            app_changes["payment_status"] = PaymentStatus.PENDING
        self.repository.update_app(app.id, app_changes)

        logger.info(f"Initialized payment {payment.id} ({reference}) for app {app.id}")
        return payment

    def verify_payment(self, reference: str) -> Payment:
        """
        Confirm a payment with Paystack and record the outcome.

        Idempotent: a payment already completed is returned as-is, without
        asking the gateway again or touching the app.

        Returns:
            The Payment after verification. Its status is pending when
            Paystack has no final answer yet (e.g. abandoned checkout).

        Raises:
            NotFoundError: If no payment has this reference
            UpstreamError: If Paystack can't be reached or refuses
        """
        payment = self.repository.get_payment_by_reference(reference)
        if payment is None:
            raise NotFoundError("Payment", reference)

        if payment.status == PaymentStatus.COMPLETED:
            logger.info(f"Payment {payment.id} already completed, skipping verification")
            return payment

        result = self.gateway.verify(payment.paystack_reference)

        if result.success and not self._amount_covers_fee(result, payment):
            logger.error(
                f"Payment {payment.id} settled {result.amount} {result.currency}, "
                f"expected {payment.amount} {payment.currency}"
            )
            return self._record_failure(payment, result)

        if result.success:
            return self._record_success(payment, result)
        if result.failed:
            return self._record_failure(payment, result)

        # Abandoned / ongoing: no final outcome yet
        updated = self.repository.update_payment(
            payment.id, {"provider_status": result.provider_status}
        )
        logger.info(f"Payment {payment.id} still open at gateway ({result.provider_status})")
        return updated or payment

    @staticmethod
    def _amount_covers_fee(result: GatewayVerification, payment: Payment) -> bool:
        if result.amount is None:
            return True
        if result.currency and result.currency != payment.currency:
            return False
        return result.amount >= payment.amount

    def _record_success(self, payment: Payment, result: GatewayVerification) -> Payment:
        now = utc_now()
        updated = self.repository.update_payment(
            payment.id,
            {
                "status": PaymentStatus.COMPLETED,
                "provider_status": result.provider_status,
                "paid_at": result.paid_at or now,
                "completed_at": now,
            },
        )
        if updated is None:
            raise NotFoundError("Payment", payment.id)

        # Second, separate write; see reconcile_payments()
        app = self.repository.get_app(payment.app_id)
        if app is None:
            logger.warning(f"Payment {payment.id} completed for missing app {payment.app_id}")
        elif app.payment_status != PaymentStatus.COMPLETED:
            self.repository.update_app(app.id, {"payment_status": PaymentStatus.COMPLETED})
            logger.info(f"App {app.id} payment_status: {app.payment_status.value} -> completed")

        return updated

    def _record_failure(self, payment: Payment, result: GatewayVerification) -> Payment:
        updated = self.repository.update_payment(
            payment.id,
            {"status": PaymentStatus.FAILED, "provider_status": result.provider_status},
        )
        if updated is None:
            raise NotFoundError("Payment", payment.id)

        app = self.repository.get_app(payment.app_id)
        # Only the latest attempt decides, and a completed fee stays completed
        if (
            app is not None
            and app.payment_status == PaymentStatus.PENDING
            and app.payment_id in (None, payment.id)
        ):
            self.repository.update_app(app.id, {"payment_status": PaymentStatus.FAILED})
            logger.info(f"App {app.id} payment_status: pending -> failed")

        return updated

    def reconcile_payments(self) -> list[str]:
        """
        Repair apps whose payment was completed but whose own
        payment_status never caught up (crash between the two writes).

        Returns:
            Ids of the apps that were repaired
        """
        repaired: list[str] = []
        for payment in self.repository.list_payments(status=PaymentStatus.COMPLETED):
            if payment.app_id in repaired:
                continue
            app = self.repository.get_app(payment.app_id)
            if app is None or app.payment_status == PaymentStatus.COMPLETED:
                continue
            self.repository.update_app(app.id, {"payment_status": PaymentStatus.COMPLETED})
            repaired.append(app.id)
            logger.warning(f"Reconciled app {app.id} from completed payment {payment.id}")
        return repaired

    # -------------------------------------------------------------------------
    # Moderation
    # -------------------------------------------------------------------------

    def set_status(self, app_id: str, new_status: AppStatus | str) -> App:
        """
        Administrative status change.

        Any status may move to any other; payment state is not checked.

        Raises:
            ValidationError: If `new_status` isn't pending/published/rejected
            NotFoundError: If the app doesn't exist
        """
        try:
            status = AppStatus(new_status)
        except ValueError:
            raise ValidationError(
                "Invalid status",
                suggestion="Use one of: pending, published, rejected",
                details={"status": str(new_status)},
            )

        app = self._get_app(app_id)
        updated = self.repository.update_app(app_id, {"status": status})
        if updated is None:
            raise NotFoundError("App", app_id)

        logger.info(f"App {app_id} status: {app.status.value} -> {status.value}")
        return updated

    # -------------------------------------------------------------------------
    # Downloads
    # -------------------------------------------------------------------------

    def increment_downloads(self, app_id: str) -> bool:
        """
        Count one download. Best effort: never raises.

        Returns:
            True if the counter moved, False if the app is missing or the
            store failed
        """
        try:
            count = self.repository.increment_downloads(app_id)
        except MarketplaceException as e:
            logger.warning(f"Could not record download for app {app_id}: {e.message}")
            return False

        if count is None:
            logger.warning(f"Download recorded for unknown app {app_id}")
            return False
        return True
