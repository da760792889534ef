# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up environment variables before any imports
# - In-memory repository instead of Supabase
# - FakePaystack: an httpx.MockTransport standing in for api.paystack.co
# =============================================================================

import json
import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("PAYSTACK_SECRET_KEY", "sk_test_marketplace")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-sessions")
os.environ.setdefault("ADMIN_API_KEY", "test-admin-key-0123456789")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import httpx
import pytest
from fastapi.testclient import TestClient

from core.models import DeveloperCreate
from core.services import DeveloperService, PaymentRetryPolicy, SubmissionService
from lib.paystack_client import PaystackClient
from lib.repository import InMemoryRepository

ADMIN_API_KEY = os.environ["ADMIN_API_KEY"]


# =============================================================================
# Fake Paystack
# =============================================================================

class FakePaystack:
    """
    Minimal stand-in for the Paystack transaction API.

    Every initialized reference starts out "abandoned" (checkout not
    finished). Call settle() to decide what verify will report.
    """

    def __init__(self):
        self.outcomes: dict[str, str] = {}
        self.amounts: dict[str, int] = {}
        self.initialize_calls: list[dict] = []
        self.verify_calls: list[str] = []
        self.authorization_headers: list[str] = []
        self.fail_initialize = False
        self.transport = httpx.MockTransport(self._handle)

    def settle(self, reference: str, status: str = "success", amount: int | None = None) -> None:
        self.outcomes[reference] = status
        if amount is not None:
            self.amounts[reference] = amount

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.authorization_headers.append(request.headers.get("Authorization", ""))

        if request.method == "POST" and request.url.path == "/transaction/initialize":
            payload = json.loads(request.content)
            self.initialize_calls.append(payload)
            if self.fail_initialize:
                return httpx.Response(401, json={"status": False, "message": "Invalid key"})

            reference = payload["reference"]
            self.outcomes.setdefault(reference, "abandoned")
            self.amounts[reference] = payload["amount"]
            return httpx.Response(200, json={
                "status": True,
                "message": "Authorization URL created",
                "data": {
                    "authorization_url": f"https://checkout.paystack.com/{reference}",
                    "access_code": f"ac_{reference[-10:]}",
                    "reference": reference,
                },
            })

        if request.method == "GET" and request.url.path.startswith("/transaction/verify/"):
            reference = request.url.path.rsplit("/", 1)[-1]
            self.verify_calls.append(reference)
            if reference not in self.outcomes:
                return httpx.Response(400, json={"status": False, "message": "Transaction reference not found"})

            status = self.outcomes[reference]
            return httpx.Response(200, json={
                "status": True,
                "message": "Verification successful",
                "data": {
                    "reference": reference,
                    "status": status,
                    "amount": self.amounts.get(reference, 0),
                    "currency": "KES",
                    "paid_at": "2024-01-15T10:30:00.000Z" if status == "success" else None,
                    "customer": {"email": "dev@example.com"},
                },
            })

        return httpx.Response(404, json={"status": False, "message": "Not found"})


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def repository():
    """Fresh in-memory repository per test."""
    return InMemoryRepository()


@pytest.fixture
def fake_paystack():
    return FakePaystack()


@pytest.fixture
def gateway(fake_paystack):
    client = PaystackClient(secret_key="sk_test_marketplace", transport=fake_paystack.transport)
    yield client
    client.close()


@pytest.fixture
def developer_service(repository):
    return DeveloperService(repository)


@pytest.fixture
def submission_service(repository, gateway):
    return SubmissionService(
        repository=repository,
        gateway=gateway,
        listing_fee=1000,
        currency="KES",
        callback_url="http://localhost:5000/payment/callback",
        retry_policy=PaymentRetryPolicy.KEEP,
    )


@pytest.fixture
def developer(developer_service):
    """A registered developer."""
    return developer_service.register(
        DeveloperCreate(email="d@x.com", password="secret1", name="Dee Developer")
    )


@pytest.fixture
def other_developer(developer_service):
    return developer_service.register(
        DeveloperCreate(email="other@x.com", password="secret2", name="Other Dev")
    )


@pytest.fixture
def app_payload():
    """A valid app submission in wire (camelCase) format."""
    return {
        "name": "Foo",
        "description": "Flashcards for anatomy revision",
        "category": "Anatomy",
        "logoUrl": "https://cdn.example.com/foo/logo.png",
        "downloadUrl": "https://example.com/download/foo.apk",
        "screenshots": [f"https://cdn.example.com/foo/shot{n}.png" for n in range(1, 5)],
    }


@pytest.fixture
def client(repository, gateway):
    """API client wired to the in-memory repository and fake Paystack."""
    from app.dependencies import get_payment_gateway, get_repository
    from app.main import app

    app.dependency_overrides[get_repository] = lambda: repository
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    yield TestClient(app)
    app.dependency_overrides.clear()
