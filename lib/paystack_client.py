# =============================================================================
# lib/paystack_client.py - Paystack Gateway Adapter
# =============================================================================
# Two calls against the Paystack REST API:
# - initialize: create a transaction and get a hosted checkout URL
# - verify:     ask Paystack what actually happened to a transaction
#
# Paystack is the source of truth for payment outcomes. A payment is only
# ever marked completed from a verify() result, never from anything the
# browser reports.
#
# Amounts cross this boundary in major units (KES 1000); Paystack expects
# the minor unit (x100).
#
# Usage:
#   from lib.paystack_client import PaystackClient
#   gateway = PaystackClient.from_settings()
#   init = gateway.initialize("dev@example.com", 1000, "app-x-1a2b3c4d5e", callback_url)
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import httpx

from app.config import settings
from app.exceptions import UpstreamError

logger = logging.getLogger(__name__)

MINOR_UNITS_PER_MAJOR = 100
SUCCESS_STATUS = "success"
FAILURE_STATUSES = frozenset({"failed", "reversed"})


@dataclass(frozen=True)
class GatewayInitialization:
    """Result of a successful initialize call."""
    authorization_url: str
    provider_reference: str
    access_code: str | None = None


@dataclass(frozen=True)
class GatewayVerification:
    """
    Result of a verify call.

    success is True only when Paystack reports the transaction status as
    "success". `failed` distinguishes a definite failure from a transaction
    that is still open (abandoned, ongoing, pending).
    """
    reference: str
    success: bool
    provider_status: str
    amount: float | None = None
    currency: str | None = None
    paid_at: datetime | None = None

    @property
    def failed(self) -> bool:
        return not self.success and self.provider_status in FAILURE_STATUSES


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Unparseable Paystack timestamp: {value}")
        return None


class PaystackClient:
    """
    Thin adapter over the Paystack transaction API.

    Every call carries the secret key as a Bearer token and runs with a
    timeout. Network errors and unsuccessful responses become UpstreamError.
    There are no retries.

    Example:
        gateway = PaystackClient(secret_key="sk_test_...")
        result = gateway.verify("app-123-a1b2c3d4e5")
        if result.success:
            ...
    """

    def __init__(
        self,
        secret_key: str,
        base_url: str = "https://api.paystack.co",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self._http = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {secret_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, transport: httpx.BaseTransport | None = None) -> "PaystackClient":
        return cls(
            secret_key=settings.PAYSTACK_SECRET_KEY,
            base_url=settings.PAYSTACK_BASE_URL,
            timeout=settings.PAYSTACK_TIMEOUT_SECONDS,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _request(self, method: str, path: str, payload: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Send a request and return the decoded `data` object.

        Raises:
            UpstreamError: On network failure, non-JSON body, non-2xx status,
                or a body with `"status": false`
        """
        try:
            response = self._http.request(method, path, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Paystack {method} {path} failed: {e}")
            raise UpstreamError(
                "Payment gateway is unreachable",
                details={"path": path, "error": str(e)},
            )

        try:
            body = response.json()
        except ValueError:
            logger.error(f"Paystack {method} {path} returned non-JSON (HTTP {response.status_code})")
            raise UpstreamError(
                "Payment gateway returned an invalid response",
                details={"path": path, "http_status": response.status_code},
            )

        if response.is_error or not body.get("status"):
            logger.warning(
                f"Paystack {method} {path} rejected request "
                f"(HTTP {response.status_code}): {body.get('message')}"
            )
            raise UpstreamError(
                "Payment gateway rejected the request",
                details={
                    "path": path,
                    "http_status": response.status_code,
                    "gateway_message": body.get("message"),
                },
            )

        data = body.get("data")
        if not isinstance(data, dict):
            raise UpstreamError(
                "Payment gateway response is missing data",
                details={"path": path},
            )
        return data

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def initialize(
        self,
        email: str,
        amount: int,
        reference: str,
        callback_url: str,
        currency: str = "KES",
        metadata: dict[str, Any] | None = None,
    ) -> GatewayInitialization:
        """
        Start a transaction and get the hosted checkout URL.

        Args:
            email: Customer email Paystack sends the receipt to
            amount: Amount in major units (e.g. 1000 for KES 1,000)
            reference: Our unique reference for this attempt
            callback_url: Where Paystack redirects after checkout
            currency: ISO currency code
            metadata: Extra data echoed back on verify

        Returns:
            GatewayInitialization with the authorization URL and reference

        Raises:
            UpstreamError: If Paystack can't be reached or refuses
        """
        payload: dict[str, Any] = {
            "email": email,
            "amount": int(amount * MINOR_UNITS_PER_MAJOR),
            "currency": currency,
            "reference": reference,
            "callback_url": callback_url,
        }
        if metadata:
            payload["metadata"] = metadata

        data = self._request("POST", "/transaction/initialize", payload)

        authorization_url = data.get("authorization_url")
        if not authorization_url:
            raise UpstreamError(
                "Payment gateway did not return a checkout URL",
                details={"reference": reference},
            )

        logger.info(f"Initialized Paystack transaction {reference}")
        return GatewayInitialization(
            authorization_url=authorization_url,
            provider_reference=data.get("reference") or reference,
            access_code=data.get("access_code"),
        )

    def verify(self, reference: str) -> GatewayVerification:
        """
        Ask Paystack for the authoritative state of a transaction.

        Raises:
            UpstreamError: If Paystack can't be reached or doesn't know the reference
        """
        data = self._request("GET", f"/transaction/verify/{reference}")

        provider_status = str(data.get("status") or "unknown")
        raw_amount = data.get("amount")
        amount = raw_amount / MINOR_UNITS_PER_MAJOR if isinstance(raw_amount, (int, float)) else None

        logger.info(f"Verified Paystack transaction {reference}: {provider_status}")
        return GatewayVerification(
            reference=data.get("reference") or reference,
            success=provider_status == SUCCESS_STATUS,
            provider_status=provider_status,
            amount=amount,
            currency=data.get("currency"),
            paid_at=_parse_timestamp(data.get("paid_at") or data.get("paidAt")),
        )
