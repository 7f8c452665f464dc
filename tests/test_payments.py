import hashlib
import hmac
import json

import pytest
import requests

from adparlay.models.payment import PaymentTransaction
from adparlay.models.user import SubscriptionTier, User
from adparlay.services import email_service

from conftest import API, FakeResponse

SECRET = "sk_test_adparlay"


def _paystack(monkeypatch, status="success", amount=209900):
    calls = []

    def fake_get(url, headers=None, timeout=None):
        calls.append({"url": url, "headers": headers})
        return FakeResponse(200, {
            "status": True,
            "data": {
                "status": status,
                "amount": amount,
                "currency": "NGN",
                "paid_at": "2026-10-19T10:00:00.000Z",
            },
        })

    monkeypatch.setattr(requests, "get", fake_get)
    return calls


def _signed(body):
    raw = json.dumps(body).encode()
    signature = hmac.new(SECRET.encode(), raw, hashlib.sha512).hexdigest()
    return raw, {"x-paystack-signature": signature, "Content-Type": "application/json"}


def test_verify_upgrades_to_premium(client, db, owner_headers, monkeypatch):
    calls = _paystack(monkeypatch)
    response = client.post(f"{API}/payments/paystack/verify", json={"reference": "ref-1"}, headers=owner_headers)
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["subscription"] == "premium"
    assert body["amount"] == 209900
    assert calls[0]["url"].endswith("/transaction/verify/ref-1")
    assert calls[0]["headers"]["Authorization"] == f"Bearer {SECRET}"

    profile = client.get(f"{API}/users/me", headers=owner_headers).json()
    assert profile["status"]["subscription"] == "premium"
    assert profile["status"]["payment_status"] == "active"
    assert profile["status"]["days_till_expiry"] == 30

    transaction = db.query(PaymentTransaction).filter(PaymentTransaction.reference == "ref-1").one()
    assert transaction.status == "success"


def test_verify_is_idempotent_per_user(client, owner_headers, other_headers, monkeypatch):
    calls = _paystack(monkeypatch)
    client.post(f"{API}/payments/paystack/verify", json={"reference": "ref-1"}, headers=owner_headers)
    response = client.post(f"{API}/payments/paystack/verify", json={"reference": "ref-1"}, headers=owner_headers)
    assert response.status_code == 200
    assert len(calls) == 1

    response = client.post(f"{API}/payments/paystack/verify", json={"reference": "ref-1"}, headers=other_headers)
    assert response.status_code == 400


@pytest.mark.parametrize("status,amount", [("failed", 209900), ("success", 1000)])
def test_verify_rejects_unsuccessful_or_short_payments(client, db, owner_headers, monkeypatch, status, amount):
    _paystack(monkeypatch, status=status, amount=amount)
    response = client.post(f"{API}/payments/paystack/verify", json={"reference": "ref-bad"}, headers=owner_headers)
    assert response.status_code == 400

    profile = client.get(f"{API}/users/me", headers=owner_headers).json()
    assert profile["status"]["subscription"] == "free"
    transaction = db.query(PaymentTransaction).filter(PaymentTransaction.reference == "ref-bad").one()
    assert transaction.status == "failed"


def test_verify_upstream_outage(client, owner_headers, monkeypatch):
    def fake_get(url, **kwargs):
        raise requests.Timeout("timed out")

    monkeypatch.setattr(requests, "get", fake_get)
    response = client.post(f"{API}/payments/paystack/verify", json={"reference": "ref-2"}, headers=owner_headers)
    assert response.status_code == 502


def test_webhook_rejects_bad_signature(client):
    raw, headers = _signed({"event": "charge.success", "data": {"reference": "r"}})
    headers["x-paystack-signature"] = "0" * 128
    response = client.post(f"{API}/payments/paystack/webhook", content=raw, headers=headers)
    assert response.status_code == 401


def test_webhook_activates_subscription(client, db, owner_headers):
    client.get(f"{API}/users/me", headers=owner_headers)
    event = {
        "event": "charge.success",
        "data": {
            "reference": "hook-1",
            "amount": 209900,
            "metadata": {"uid": "user-1"},
            "customer": {"email": "someone-else@adparlay.test"},
        },
    }
    raw, headers = _signed(event)
    response = client.post(f"{API}/payments/paystack/webhook", content=raw, headers=headers)
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}

    user = db.query(User).filter(User.uid == "user-1").one()
    db.refresh(user)
    assert user.subscription == SubscriptionTier.PREMIUM
    assert user.paystack_reference == "hook-1"

    response = client.post(f"{API}/payments/paystack/webhook", content=raw, headers=headers)
    assert response.json() == {"status": "duplicate"}


def test_webhook_matches_customer_email(client, db, owner_headers):
    client.get(f"{API}/users/me", headers=owner_headers)
    raw, headers = _signed({
        "event": "charge.success",
        "data": {"reference": "hook-2", "amount": 209900, "customer": {"email": "owner@adparlay.test"}},
    })
    assert client.post(f"{API}/payments/paystack/webhook", content=raw, headers=headers).status_code == 200
    user = db.query(User).filter(User.uid == "user-1").one()
    db.refresh(user)
    assert user.subscription == SubscriptionTier.PREMIUM


def test_webhook_ignores_other_events(client):
    raw, headers = _signed({"event": "transfer.success", "data": {}})
    response = client.post(f"{API}/payments/paystack/webhook", content=raw, headers=headers)
    assert response.json() == {"status": "ignored"}


# Notifications

def test_email_notification_recorded_when_sending_disabled(client, owner_headers):
    response = client.post(
        f"{API}/notifications/email",
        json={"to": "lead@example.com", "subject": "Hi", "html": "<p>Hi</p>"},
        headers=owner_headers,
    )
    assert response.status_code == 200
    assert response.json()["status"] == "skipped"


def test_email_notification_sent(client, owner_headers, monkeypatch):
    sent = []
    monkeypatch.setattr(email_service.settings, "SEND_EMAILS", True)
    monkeypatch.setattr(email_service, "send_email", lambda to, subject, body, is_html=True: sent.append(to) or True)

    response = client.post(
        f"{API}/notifications/email",
        json={"to": "lead@example.com", "subject": "Hi", "html": "<p>Hi</p>", "form_id": "f-1"},
        headers=owner_headers,
    )
    assert response.json()["status"] == "sent"
    assert sent == [["lead@example.com"]]


def test_email_notification_failure_is_recorded(client, owner_headers, monkeypatch):
    monkeypatch.setattr(email_service.settings, "SEND_EMAILS", True)
    monkeypatch.setattr(email_service, "send_email", lambda *args, **kwargs: False)
    response = client.post(
        f"{API}/notifications/email",
        json={"to": "lead@example.com", "subject": "Hi", "html": "<p>Hi</p>"},
        headers=owner_headers,
    )
    assert response.json()["status"] == "failed"


def test_email_notification_validates_address(client, owner_headers):
    response = client.post(
        f"{API}/notifications/email",
        json={"to": "not-an-email", "subject": "Hi", "html": "x"},
        headers=owner_headers,
    )
    assert response.status_code == 422


@pytest.mark.parametrize("body", [[], "charge.success", 42, {"event": "charge.success", "data": ["ref"]}])
def test_webhook_rejects_payloads_that_are_not_objects(client, body):
    raw, headers = _signed(body)
    response = client.post(f"{API}/payments/paystack/webhook", content=raw, headers=headers)
    assert response.status_code == 400


def test_webhook_rejects_malformed_amount(client):
    raw, headers = _signed({"event": "charge.success", "data": {"reference": "hook-3", "amount": "lots"}})
    response = client.post(f"{API}/payments/paystack/webhook", content=raw, headers=headers)
    assert response.status_code == 400
