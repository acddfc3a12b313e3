import asyncio
import base64
import json
from datetime import timedelta

import httpx
import pytest
from fastapi.testclient import TestClient

from app.config import settings
from app.core.timeutils import utcnow
from app.main import app
from app.modules.payments import expiry_scheduler, gateways
from app.modules.payments.signatures import (
    sign_standard_webhook, verify_standard_webhook, sign_paddle_payload, verify_paddle_signature
)
from app.modules.payments.webhooks import WebhookService, WebhookError
from tests.conftest import add_profile

DODO_SECRET = "whsec_" + base64.b64encode(b"dodo-test-secret").decode()


def _dodo_payload(event_type="payment.succeeded", plan_id="pro", amount=1999, user_id="user-1"):
    metadata = {"user_id": user_id, "plan_id": plan_id} if user_id else {}
    return json.dumps({"type": event_type, "data": {"total_amount": amount, "metadata": metadata}})


def _dodo_headers(payload, secret=DODO_SECRET, webhook_id="msg_1", timestamp="1760000000"):
    return {
        "webhook-id": webhook_id,
        "webhook-timestamp": timestamp,
        "webhook-signature": f"v1,{sign_standard_webhook(payload, webhook_id, timestamp, secret)}",
    }


@pytest.fixture
def dodo_secret(monkeypatch):
    monkeypatch.setattr(settings, "dodo_payments_webhook_key", DODO_SECRET)
    return DODO_SECRET


# Signatures

def test_standard_webhook_signature_roundtrip():
    payload = '{"type":"payment.succeeded"}'
    signature = sign_standard_webhook(payload, "msg_1", "123", DODO_SECRET)

    assert verify_standard_webhook(payload, "msg_1", "123", f"v0,abc v1,{signature}", DODO_SECRET)
    assert not verify_standard_webhook(payload, "msg_2", "123", f"v1,{signature}", DODO_SECRET)
    assert not verify_standard_webhook(payload + " ", "msg_1", "123", f"v1,{signature}", DODO_SECRET)
    assert not verify_standard_webhook(payload, "msg_1", "123", "", DODO_SECRET)


def test_paddle_signature():
    payload = '{"event_type":"transaction.completed"}'
    header = f"ts=1760000000;h1={sign_paddle_payload(payload, 'pdl-secret')}"

    assert verify_paddle_signature(payload, header, "pdl-secret")
    assert not verify_paddle_signature(payload, header, "other-secret")
    assert not verify_paddle_signature(payload, "ts=1760000000", "pdl-secret")


# Webhooks

def test_dodo_payment_activates_plan(client, fake_db, dodo_secret):
    add_profile(fake_db, words_used=420)
    payload = _dodo_payload()

    response = client.post("/api/v1/payments/webhooks/dodo", content=payload, headers=_dodo_headers(payload))

    assert response.status_code == 200
    assert response.json() == {"received": True}
    profile = fake_db.rows("profiles")[0]
    assert profile["subscription_plan"] == "pro"
    assert profile["words_limit"] == 100000
    assert profile["words_used"] == 0
    assert profile["subscription_end_date"] is not None


def test_dodo_invalid_signature_is_rejected(client, fake_db, dodo_secret):
    add_profile(fake_db)
    payload = _dodo_payload()
    headers = _dodo_headers(payload, secret="whsec_" + base64.b64encode(b"wrong").decode())

    response = client.post("/api/v1/payments/webhooks/dodo", content=payload, headers=headers)

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid webhook signature"}
    assert fake_db.rows("profiles")[0]["subscription_plan"] == "free"


def test_dodo_zero_amount_is_skipped(client, fake_db, dodo_secret):
    add_profile(fake_db)
    payload = _dodo_payload(amount=0)

    response = client.post("/api/v1/payments/webhooks/dodo", content=payload, headers=_dodo_headers(payload))

    assert response.json() == {"received": True, "skipped": True, "reason": "Zero amount payment"}
    assert fake_db.rows("profiles")[0]["subscription_plan"] == "free"


def test_dodo_missing_metadata(client, dodo_secret):
    payload = _dodo_payload(user_id=None)

    response = client.post("/api/v1/payments/webhooks/dodo", content=payload, headers=_dodo_headers(payload))

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required metadata"}


def test_dodo_cancellation_downgrades(client, fake_db, dodo_secret):
    add_profile(fake_db, subscription_plan="pro", words_limit=100000,
                subscription_end_date=(utcnow() + timedelta(days=10)).isoformat())
    payload = _dodo_payload(event_type="subscription.cancelled")

    client.post("/api/v1/payments/webhooks/dodo", content=payload, headers=_dodo_headers(payload))

    profile = fake_db.rows("profiles")[0]
    assert profile["subscription_plan"] == "free"
    assert profile["words_limit"] == 500
    assert profile["subscription_end_date"] is None


def test_paddle_transaction_activates_plan(fake_db):
    add_profile(fake_db)
    payload = json.dumps({
        "event_type": "transaction.completed",
        "data": {"custom_data": {"user_id": "user-1", "plan_id": "basic"}},
    })
    header = f"ts=1;h1={sign_paddle_payload(payload, 'pdl')}"

    assert WebhookService(fake_db).handle_paddle(payload, header, secret="pdl") == {"success": True}
    assert fake_db.rows("profiles")[0]["subscription_plan"] == "basic"

    with pytest.raises(WebhookError) as exc:
        WebhookService(fake_db).handle_paddle(payload, "ts=1;h1=bad", secret="pdl")
    assert exc.value.status_code == 401


def test_webhook_unknown_plan(fake_db):
    add_profile(fake_db)
    payload = _dodo_payload(plan_id="platinum")

    with pytest.raises(WebhookError) as exc:
        WebhookService(fake_db).handle_dodo(payload, "m", "1", "", secret="")
    assert exc.value.status_code == 500


# Verify / capture

def test_verify_payment_is_idempotent_within_window(client, fake_db):
    add_profile(fake_db)

    first = client.post("/api/v1/payments/verify", json={"plan_id": "basic"})
    assert first.json()["message"] == "Subscription updated successfully"
    assert first.json()["words_limit"] == 50000

    fake_db.rows("profiles")[0]["words_used"] = 12
    second = client.post("/api/v1/payments/verify", json={"plan_id": "basic"})
    assert second.json()["message"] == "Subscription already active"
    assert fake_db.rows("profiles")[0]["words_used"] == 12


def test_verify_rejects_unknown_plans(client, fake_db):
    add_profile(fake_db)
    assert client.post("/api/v1/payments/verify", json={}).json()["detail"] == "Plan ID is required"
    response = client.post("/api/v1/payments/verify", json={"plan_id": "free"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid plan ID: free"


def test_handle_payment_requires_payment_id(client, fake_db):
    add_profile(fake_db)

    bad = client.post("/api/v1/payments/handle-payment", json={"plan_id": "pro", "payment_details": {}})
    assert bad.status_code == 400

    ok = client.post("/api/v1/payments/handle-payment",
                     json={"plan_id": "enterprise", "payment_details": {"id": "PAYID-1"}})
    assert ok.json()["message"] == "Payment processed successfully"
    assert fake_db.rows("profiles")[0]["words_limit"] == 200000


# Expiry

def test_expire_subscriptions_requires_cron_secret_or_admin(client, fake_db, monkeypatch):
    monkeypatch.setattr(settings, "cron_secret", "cron-123")
    monkeypatch.setattr(settings, "admin_emails", "")
    add_profile(fake_db, subscription_plan="pro", words_limit=100000,
                subscription_end_date=(utcnow() - timedelta(days=1)).isoformat())
    add_profile(fake_db, user_id="user-2", subscription_plan="basic", words_limit=50000,
                subscription_end_date=(utcnow() + timedelta(days=5)).isoformat())

    assert client.post("/api/v1/payments/expire-subscriptions").status_code == 403
    assert client.post("/api/v1/payments/expire-subscriptions",
                       headers={"X-Cron-Secret": "wrong"}).status_code == 403

    response = client.post("/api/v1/payments/expire-subscriptions", headers={"X-Cron-Secret": "cron-123"})

    assert response.status_code == 200
    body = response.json()
    assert body["processed"] == 1
    assert body["downgraded_users"][0]["user_id"] == "user-1"
    assert body["downgraded_users"][0]["previous_plan"] == "pro"
    plans = {p["user_id"]: p["subscription_plan"] for p in fake_db.rows("profiles")}
    assert plans == {"user-1": "free", "user-2": "basic"}
    assert fake_db.rows("profiles")[0]["words_limit"] == 500


def test_expire_subscriptions_as_admin_with_nothing_to_do(client, fake_db):
    fake_db.add("user_roles", {"user_id": "user-1", "role": "admin"})

    response = client.post("/api/v1/payments/expire-subscriptions")

    assert response.status_code == 200
    assert response.json()["processed"] == 0



def test_expiry_loop_is_cancelled_on_shutdown(monkeypatch):
    monkeypatch.setattr(settings, "enable_subscription_expiry", True)
    monkeypatch.setattr(settings, "enable_reminder_dispatch", False)
    stopped = []

    async def idle_loop():
        try:
            await asyncio.sleep(3600)
        finally:
            stopped.append(True)

    monkeypatch.setattr(expiry_scheduler, "subscription_expiry_loop", idle_loop)

    with TestClient(app):
        assert app.state.expiry_task is not None
        assert not app.state.expiry_task.done()

    assert stopped == [True]
    assert app.state.expiry_task is None


# Discounts and checkout

def test_discount_code_single_use_per_user(client, fake_db):
    fake_db.add("discount_codes", {"code": "SPRING20", "discount_percent": 20, "is_active": True,
                                   "used_count": 0, "max_uses": 10})

    response = client.post("/api/v1/payments/discount-codes/validate", json={"code": " spring20 "})

    assert response.status_code == 200
    plans = {p["id"]: p for p in response.json()["plans"]}
    assert plans["basic"]["discounted_price"] == 7.99
    assert plans["pro"]["discounted_price"] == 15.99
    assert fake_db.rows("discount_codes")[0]["used_count"] == 1

    again = client.post("/api/v1/payments/discount-codes/validate", json={"code": "SPRING20"})
    assert again.status_code == 400
    assert again.json()["detail"] == "You have already used this discount code."


def test_discount_code_expired_or_exhausted(client, fake_db):
    fake_db.add("discount_codes", {"code": "OLD", "discount_percent": 10, "is_active": True, "used_count": 0,
                                   "expires_at": (utcnow() - timedelta(days=1)).isoformat()})
    fake_db.add("discount_codes", {"code": "FULL", "discount_percent": 10, "is_active": True, "used_count": 5,
                                   "max_uses": 5})

    assert client.post("/api/v1/payments/discount-codes/validate",
                       json={"code": "OLD"}).json()["detail"] == "This discount code has expired."
    assert client.post("/api/v1/payments/discount-codes/validate",
                       json={"code": "FULL"}).json()["detail"] == "This discount code has reached its usage limit."
    assert client.post("/api/v1/payments/discount-codes/validate", json={"code": "NOPE"}).status_code == 400


def test_plans_catalogue(client):
    plans = client.get("/api/v1/payments/plans").json()
    assert [p["id"] for p in plans] == ["free", "basic", "pro", "enterprise"]
    assert plans[0]["words_limit"] == 500


def test_dodo_checkout_uses_request_origin(client, fake_db, dodo_client):
    add_profile(fake_db)

    response = client.post("/api/v1/payments/checkout/dodo", json={"plan_id": "pro"},
                           headers={"Origin": "https://app.example.com"})

    assert response.status_code == 200
    assert response.json()["checkout_url"] == "https://checkout.example/cks_123"
    call = dodo_client.calls[0]
    assert call["return_url"] == "https://app.example.com/app?payment=success"
    assert call["user_id"] == "user-1"
    assert call["name"] == "Writer"


def test_checkout_rejects_free_plan(client, fake_db):
    response = client.post("/api/v1/payments/checkout/dodo", json={"plan_id": "free"})
    assert response.status_code == 400


def test_paddle_checkout(client, monkeypatch):
    monkeypatch.setattr(settings, "paddle_api_key", None)
    missing = client.post("/api/v1/payments/checkout/paddle", json={"plan_id": "pro"})
    assert missing.status_code == 400
    assert missing.json()["detail"] == "Paddle API key not configured"

    monkeypatch.setattr(settings, "paddle_api_key", "pdl_key")
    monkeypatch.setattr(settings, "paddle_client_token", "live_tok")
    unknown = client.post("/api/v1/payments/checkout/paddle", json={"plan_id": "gold"})
    assert unknown.status_code == 400
    assert unknown.json()["detail"] == "Invalid plan ID: gold"

    body = client.post("/api/v1/payments/checkout/paddle", json={"plan_id": "pro"}).json()
    assert body["price_id"] == settings.paddle_pro_price_id
    assert body["client_token"] == "live_tok"
    assert body["custom_data"] == {"user_id": "user-1", "plan_id": "pro"}
    assert body["customer_email"] == "writer@example.com"


def test_fastspring_session(client, monkeypatch):
    monkeypatch.setattr(settings, "fastspring_api_username", None)
    monkeypatch.setattr(settings, "fastspring_api_password", None)
    missing = client.post("/api/v1/payments/checkout/fastspring", json={"plan_id": "basic"})
    assert missing.status_code == 400
    assert missing.json()["detail"] == "FastSpring API credentials not configured"

    monkeypatch.setattr(settings, "fastspring_api_username", "fs-user")
    monkeypatch.setattr(settings, "fastspring_api_password", "fs-pass")
    assert client.post("/api/v1/payments/checkout/fastspring", json={"plan_id": "gold"}).status_code == 400

    calls = []

    def fake_post(url, **kwargs):
        calls.append((url, kwargs))
        return httpx.Response(200, json={"id": "fs_session_1"})

    monkeypatch.setattr(gateways.httpx, "post", fake_post)
    body = client.post("/api/v1/payments/checkout/fastspring", json={"plan_id": "basic"}).json()

    assert body == {"success": True, "session_id": "fs_session_1", "product_path": "basic"}
    url, kwargs = calls[0]
    assert url.endswith("/sessions")
    assert kwargs["auth"] == ("fs-user", "fs-pass")
    assert kwargs["json"]["contact"] == {"email": "writer@example.com"}
    assert kwargs["json"]["tags"] == {"user_id": "user-1", "plan_id": "basic"}


@pytest.mark.parametrize("path", ["/api/v1/payments/webhooks/dodo", "/api/v1/payments/webhooks/paddle"])
def test_webhook_with_undecodable_body(client, path):
    response = client.post(path, content=b"\xff\xfe{bad")

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid payload encoding"}
