# =============================================================================
# tests/test_api.py - HTTP API Tests
# =============================================================================
# Drives the FastAPI app through TestClient with the in-memory repository
# and the fake Paystack transport from conftest.
#
# Run with: pytest tests/test_api.py -v
# =============================================================================

import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor

import httpx
import pytest
from fastapi.testclient import TestClient

from app.config import settings
from core.models import PaymentStatus
from lib.paystack_client import PaystackClient
from lib.security import issue_session_token

ADMIN_API_KEY = os.environ["ADMIN_API_KEY"]


# =============================================================================
# Helpers
# =============================================================================

def _register(client, email="d@x.com", password="secret1", name="Dee Developer"):
    return client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "name": name},
    )


def _login(client, email="d@x.com", password="secret1"):
    return client.post("/api/auth/login", json={"email": email, "password": password})


def _developer_headers(client, email="d@x.com", password="secret1", name="Dee Developer"):
    _register(client, email, password, name)
    token = _login(client, email, password).json()["token"]
    return {"Authorization": f"Bearer {token}"}


def _admin_headers(client):
    response = client.post("/api/admin/login", json={"apiKey": ADMIN_API_KEY})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def dev_headers(client):
    return _developer_headers(client)


@pytest.fixture
def created_app(client, dev_headers, app_payload):
    response = client.post("/api/apps", json=app_payload, headers=dev_headers)
    assert response.status_code == 201
    return response.json()


# =============================================================================
# End to end
# =============================================================================

def test_submission_to_publication(client, fake_paystack, app_payload):
    """Register, submit, pay, verify, publish, and find the app in the catalog."""
    assert _register(client).status_code == 201
    headers = {"Authorization": f"Bearer {_login(client).json()['token']}"}

    created = client.post("/api/apps", json=app_payload, headers=headers)
    assert created.status_code == 201
    app_id = created.json()["id"]
    assert created.json()["status"] == "pending"
    assert created.json()["paymentStatus"] == "pending"

    init = client.post("/api/payments/initialize", json={"appId": app_id}, headers=headers)
    assert init.status_code == 200
    reference = init.json()["reference"]
    assert init.json()["authorizationUrl"].startswith("https://checkout.paystack.com/")

    fake_paystack.settle(reference)
    verify = client.post("/api/payments/verify", json={"reference": reference})
    assert verify.status_code == 200
    assert verify.json()["status"] == "completed"
    assert verify.json()["payment"]["status"] == "completed"

    mine = client.get("/api/developer/apps", headers=headers).json()
    assert mine[0]["paymentStatus"] == "completed"
    assert client.get("/api/apps").json() == []

    admin = _admin_headers(client)
    published = client.put(
        f"/api/admin/apps/{app_id}/status",
        json={"status": "published"},
        headers=admin,
    )
    assert published.status_code == 200
    assert published.json()["status"] == "published"

    catalog = client.get("/api/apps").json()
    assert [app["name"] for app in catalog] == ["Foo"]


# =============================================================================
# Auth
# =============================================================================

class TestAuth:

    def test_register(self, client):
        response = _register(client)

        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "d@x.com"
        assert body["name"] == "Dee Developer"
        assert "password" not in body
        assert "passwordHash" not in body

    def test_register_duplicate(self, client):
        _register(client)

        response = _register(client, name="Someone Else")

        assert response.status_code == 400
        assert response.json()["code"] == "DEVELOPER_EXISTS"

    def test_register_invalid_email(self, client):
        response = _register(client, email="not-an-email")

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_register_short_password(self, client):
        assert _register(client, password="123").status_code == 400

    def test_register_multibyte_password_over_bcrypt_limit(self, client):
        response = _register(client, password="é" * 40)

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "password"

    def test_login_sets_cookie(self, client):
        _register(client)

        response = _login(client)

        assert response.status_code == 200
        assert response.json()["token"]
        assert "passwordHash" not in response.json()
        assert settings.SESSION_COOKIE_NAME in response.cookies

    def test_login_wrong_password(self, client):
        _register(client)

        assert _login(client, password="wrong-password").status_code == 401

    def test_login_unknown_email(self, client):
        assert _login(client, email="nobody@x.com").status_code == 401

    def test_me_requires_session(self, client):
        response = client.get("/api/auth/me")

        assert response.status_code == 401

    def test_me_with_cookie(self, client):
        _register(client)
        _login(client)

        response = client.get("/api/auth/me")

        assert response.status_code == 200
        assert response.json()["email"] == "d@x.com"

    def test_me_with_bearer(self, client, dev_headers):
        client.cookies.clear()

        response = client.get("/api/auth/me", headers=dev_headers)

        assert response.status_code == 200

    def test_logout_clears_cookie(self, client):
        _register(client)
        _login(client)

        assert client.post("/api/auth/logout").status_code == 200
        assert client.get("/api/auth/me").status_code == 401

    def test_logout_leaves_bearer_token_valid_until_expiry(self, client):
        _register(client)
        token = _login(client).json()["token"]

        client.post("/api/auth/logout")

        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200

    def test_invalid_bearer(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 401

    def test_admin_token_is_not_a_developer_session(self, client):
        response = client.get("/api/auth/me", headers=_admin_headers(client))

        assert response.status_code == 401


# =============================================================================
# Apps
# =============================================================================

class TestApps:

    def test_create_requires_session(self, client, app_payload):
        assert client.post("/api/apps", json=app_payload).status_code == 401

    def test_create_three_screenshots(self, client, dev_headers, app_payload):
        app_payload["screenshots"] = app_payload["screenshots"][:3]

        response = client.post("/api/apps", json=app_payload, headers=dev_headers)

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "screenshots"

    def test_create_unknown_category(self, client, dev_headers, app_payload):
        app_payload["category"] = "Games"

        response = client.post("/api/apps", json=app_payload, headers=dev_headers)

        assert response.status_code == 400

    def test_created_shape(self, created_app):
        assert created_app["developerName"] == "Dee Developer"
        assert created_app["rating"] == 0
        assert created_app["downloads"] == 0
        assert len(created_app["screenshots"]) == 4

    def test_get_unpublished_by_id(self, client, created_app):
        response = client.get(f"/api/apps/{created_app['id']}")

        assert response.status_code == 200
        assert response.json()["name"] == "Foo"

    def test_get_missing(self, client):
        response = client.get("/api/apps/does-not-exist")

        assert response.status_code == 404
        assert response.json()["code"] == "APP_NOT_FOUND"

    def test_update_by_owner(self, client, dev_headers, created_app):
        response = client.put(
            f"/api/apps/{created_app['id']}",
            json={"description": "Spaced-repetition flashcards for anatomy"},
            headers=dev_headers,
        )

        assert response.status_code == 200
        assert response.json()["description"] == "Spaced-repetition flashcards for anatomy"

    def test_update_by_other_developer(self, client, created_app):
        other = _developer_headers(client, "other@x.com", "secret2", "Other Dev")

        response = client.put(
            f"/api/apps/{created_app['id']}",
            json={"name": "Hijacked"},
            headers=other,
        )

        assert response.status_code == 403

    def test_update_missing(self, client, dev_headers):
        response = client.put("/api/apps/missing", json={"name": "Nope"}, headers=dev_headers)

        assert response.status_code == 404

    def test_update_cannot_publish(self, client, dev_headers, created_app):
        response = client.put(
            f"/api/apps/{created_app['id']}",
            json={"status": "published"},
            headers=dev_headers,
        )

        assert response.status_code == 400

    def test_download_counts(self, client, created_app):
        for _ in range(3):
            response = client.post(f"/api/apps/{created_app['id']}/download")
            assert response.status_code == 200
            assert response.json() == {"message": "Download recorded"}

        assert client.get(f"/api/apps/{created_app['id']}").json()["downloads"] == 3

    def test_download_missing_app_still_ok(self, client):
        response = client.post("/api/apps/missing/download")

        assert response.status_code == 200
        assert response.json() == {"message": "Download recorded"}


class TestDeveloperApps:

    def test_lists_only_own_apps(self, client, dev_headers, created_app, app_payload):
        other = _developer_headers(client, "other@x.com", "secret2", "Other Dev")
        client.post("/api/apps", json={**app_payload, "name": "Bar"}, headers=other)

        mine = client.get("/api/developer/apps", headers=dev_headers).json()
        theirs = client.get("/api/developer/apps", headers=other).json()

        assert [app["name"] for app in mine] == ["Foo"]
        assert [app["name"] for app in theirs] == ["Bar"]

    def test_requires_session(self, client):
        client.cookies.clear()

        assert client.get("/api/developer/apps").status_code == 401


# =============================================================================
# Payments
# =============================================================================

class TestPayments:

    def test_initialize_requires_session(self, client, created_app):
        client.cookies.clear()

        response = client.post("/api/payments/initialize", json={"appId": created_app["id"]})

        assert response.status_code == 401

    def test_initialize_other_developers_app(self, client, created_app):
        other = _developer_headers(client, "other@x.com", "secret2", "Other Dev")

        response = client.post(
            "/api/payments/initialize",
            json={"appId": created_app["id"]},
            headers=other,
        )

        assert response.status_code == 403

    def test_initialize_missing_app(self, client, dev_headers):
        response = client.post("/api/payments/initialize", json={"appId": "missing"}, headers=dev_headers)

        assert response.status_code == 404

    def test_initialize_gateway_down(self, client, dev_headers, created_app, fake_paystack):
        fake_paystack.fail_initialize = True

        response = client.post(
            "/api/payments/initialize",
            json={"appId": created_app["id"]},
            headers=dev_headers,
        )

        assert response.status_code == 502
        assert response.json()["code"] == "UPSTREAM_ERROR"

    def test_initialize_after_paid(self, client, dev_headers, created_app, fake_paystack):
        reference = client.post(
            "/api/payments/initialize",
            json={"appId": created_app["id"]},
            headers=dev_headers,
        ).json()["reference"]
        fake_paystack.settle(reference)
        client.post("/api/payments/verify", json={"reference": reference})

        response = client.post(
            "/api/payments/initialize",
            json={"appId": created_app["id"]},
            headers=dev_headers,
        )

        assert response.status_code == 409

    def test_verify_twice(self, client, dev_headers, created_app, fake_paystack):
        reference = client.post(
            "/api/payments/initialize",
            json={"appId": created_app["id"]},
            headers=dev_headers,
        ).json()["reference"]
        fake_paystack.settle(reference)

        first = client.post("/api/payments/verify", json={"reference": reference})
        second = client.post("/api/payments/verify", json={"reference": reference})

        assert first.json()["status"] == second.json()["status"] == "completed"
        assert len(fake_paystack.verify_calls) == 1

    def test_verify_failed(self, client, dev_headers, created_app, fake_paystack):
        reference = client.post(
            "/api/payments/initialize",
            json={"appId": created_app["id"]},
            headers=dev_headers,
        ).json()["reference"]
        fake_paystack.settle(reference, "failed")

        response = client.post("/api/payments/verify", json={"reference": reference})

        assert response.status_code == 200
        assert response.json()["status"] == "failed"
        app = client.get(f"/api/apps/{created_app['id']}").json()
        assert app["paymentStatus"] == "failed"

    def test_verify_abandoned(self, client, dev_headers, created_app):
        reference = client.post(
            "/api/payments/initialize",
            json={"appId": created_app["id"]},
            headers=dev_headers,
        ).json()["reference"]

        response = client.post("/api/payments/verify", json={"reference": reference})

        assert response.json()["status"] == "pending"
        assert response.json()["message"] == "Payment is still processing"

    def test_verify_unknown_reference(self, client):
        response = client.post("/api/payments/verify", json={"reference": "app-nope-0000000000"})

        assert response.status_code == 404
        assert response.json()["code"] == "PAYMENT_NOT_FOUND"


# =============================================================================
# Admin
# =============================================================================

class TestAdmin:

    def test_login_wrong_key(self, client):
        response = client.post("/api/admin/login", json={"apiKey": "wrong-key-000000000"})

        assert response.status_code == 401

    def test_list_requires_token(self, client):
        client.cookies.clear()

        assert client.get("/api/admin/apps").status_code == 401

    def test_developer_token_forbidden(self, client, dev_headers):
        response = client.get("/api/admin/apps", headers=dev_headers)

        assert response.status_code == 403

    def test_invalid_status(self, client, created_app):
        response = client.put(
            f"/api/admin/apps/{created_app['id']}/status",
            json={"status": "archived"},
            headers=_admin_headers(client),
        )

        assert response.status_code == 400

    def test_status_missing_app(self, client):
        response = client.put(
            "/api/admin/apps/missing/status",
            json={"status": "published"},
            headers=_admin_headers(client),
        )

        assert response.status_code == 404

    def test_rejected_hidden_from_catalog(self, client, created_app):
        admin = _admin_headers(client)
        client.put(f"/api/admin/apps/{created_app['id']}/status", json={"status": "published"}, headers=admin)
        client.put(f"/api/admin/apps/{created_app['id']}/status", json={"status": "rejected"}, headers=admin)

        assert client.get("/api/apps").json() == []
        all_apps = client.get("/api/admin/apps", headers=admin).json()
        assert [(app["name"], app["status"]) for app in all_apps] == [("Foo", "rejected")]

    def test_list_payments(self, client, dev_headers, created_app, fake_paystack):
        reference = client.post(
            "/api/payments/initialize",
            json={"appId": created_app["id"]},
            headers=dev_headers,
        ).json()["reference"]
        fake_paystack.settle(reference)
        client.post("/api/payments/verify", json={"reference": reference})
        admin = _admin_headers(client)

        completed = client.get("/api/admin/payments", params={"status": "completed"}, headers=admin)
        pending = client.get("/api/admin/payments", params={"status": "pending"}, headers=admin)

        assert [p["appId"] for p in completed.json()] == [created_app["id"]]
        assert pending.json() == []

    def test_reconcile(self, client, repository, dev_headers, created_app, fake_paystack):
        reference = client.post(
            "/api/payments/initialize",
            json={"appId": created_app["id"]},
            headers=dev_headers,
        ).json()["reference"]
        fake_paystack.settle(reference)
        client.post("/api/payments/verify", json={"reference": reference})
        repository.update_app(created_app["id"], {"payment_status": PaymentStatus.PENDING})

        response = client.post("/api/admin/payments/reconcile", headers=_admin_headers(client))

        assert response.status_code == 200
        assert response.json() == {"repairedAppIds": [created_app["id"]]}


# =============================================================================
# Health
# =============================================================================

class TestHealth:

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready(self, client):
        response = client.get("/api/health/ready")

        assert response.json()["status"] == "ready"
        assert response.json()["checks"]["database"] == "healthy"

    def test_root(self, client):
        assert client.get("/").json()["name"] == "MedApps Marketplace API"


# =============================================================================
# Blocking calls
# =============================================================================

class TestBlockingCalls:
    """A slow Paystack call must not hold up other requests."""

    def test_health_answers_while_paystack_is_slow(
        self, repository, fake_paystack, submission_service, developer, app_payload
    ):
        from app.dependencies import get_payment_gateway, get_repository
        from app.main import app

        entered = threading.Event()
        release = threading.Event()

        def slow_paystack(request: httpx.Request) -> httpx.Response:
            entered.set()
            release.wait(timeout=5)
            return fake_paystack.transport.handle_request(request)

        slow_gateway = PaystackClient(
            secret_key="sk_test_marketplace",
            transport=httpx.MockTransport(slow_paystack),
        )
        listing = submission_service.create_app(app_payload, developer)
        headers = {"Authorization": f"Bearer {issue_session_token(developer.id)}"}

        app.dependency_overrides[get_repository] = lambda: repository
        app.dependency_overrides[get_payment_gateway] = lambda: slow_gateway
        try:
            with TestClient(app) as shared, ThreadPoolExecutor(max_workers=1) as pool:
                initialize = pool.submit(
                    shared.post,
                    "/api/payments/initialize",
                    json={"appId": listing.id},
                    headers=headers,
                )
                assert entered.wait(timeout=5)

                started = time.monotonic()
                live = shared.get("/api/health/live")
                elapsed = time.monotonic() - started

                release.set()
                assert initialize.result(timeout=5).status_code == 200
        finally:
            release.set()
            app.dependency_overrides.clear()
            slow_gateway.close()

        assert live.status_code == 200
        assert elapsed < 1
