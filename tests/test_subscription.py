from datetime import datetime, timedelta

from adparlay.models.user import PaymentStatus, SubscriptionTier, User
from adparlay.services.subscription_service import (
    activate_premium,
    compute_status,
    is_premium,
    refresh_user_subscription,
)

from conftest import API

NOW = datetime(2026, 10, 19, 12, 0, 0)


def _user(expires_in=None, grace_used=False, email="someone@adparlay.test"):
    user = User(uid="u", email=email, grace_period_used=grace_used)
    if expires_in is not None:
        user.subscription_date = NOW - timedelta(days=30) + expires_in
        user.subscription_expiry_date = NOW + expires_in
    return user


def test_user_without_subscription_is_free():
    status = compute_status(_user(), NOW)
    assert status["subscription"] == SubscriptionTier.FREE
    assert status["payment_status"] == PaymentStatus.EXPIRED
    assert status["max_forms"] == 3
    assert status["max_leads"] == 100
    assert status["days_till_expiry"] is None


def test_active_subscription():
    status = compute_status(_user(expires_in=timedelta(days=9, hours=1)), NOW)
    assert status["subscription"] == SubscriptionTier.PREMIUM
    assert status["payment_status"] == PaymentStatus.ACTIVE
    assert status["days_till_expiry"] == 10
    assert status["max_forms"] > 3


def test_grace_period_applies_once():
    user = _user(expires_in=-timedelta(days=2))
    status = refresh_user_subscription(user, NOW)
    assert status["subscription"] == SubscriptionTier.PREMIUM
    assert status["payment_status"] == PaymentStatus.GRACE
    assert user.grace_period_used is True

    used = _user(expires_in=-timedelta(days=2), grace_used=True)
    status = compute_status(used, NOW)
    assert status["subscription"] == SubscriptionTier.FREE
    assert status["days_till_expiry"] == 0


def test_expired_after_grace_window():
    user = _user(expires_in=-timedelta(days=6))
    refresh_user_subscription(user, NOW)
    assert user.subscription == SubscriptionTier.FREE
    assert user.payment_status == PaymentStatus.EXPIRED
    assert user.max_forms == 3
    assert not is_premium(user)


def test_test_accounts_are_always_premium():
    status = compute_status(_user(email="VIP@adparlay.test"), NOW)
    assert status["subscription"] == SubscriptionTier.PREMIUM
    assert status["payment_status"] == PaymentStatus.ACTIVE


def test_activate_premium_starts_a_thirty_day_period():
    user = _user(expires_in=-timedelta(days=40), grace_used=True)
    activate_premium(user, "ref-123", now=NOW)
    assert user.subscription_expiry_date == NOW + timedelta(days=30)
    assert user.grace_period_used is False
    assert user.paystack_reference == "ref-123"
    assert is_premium(user)
    assert compute_status(user, NOW)["payment_status"] == PaymentStatus.ACTIVE


def test_grace_lasts_for_the_whole_window():
    user = _user(expires_in=-timedelta(days=2))
    refresh_user_subscription(user, NOW)
    status = refresh_user_subscription(user, NOW + timedelta(days=2))
    assert status["payment_status"] == PaymentStatus.GRACE
    assert user.subscription == SubscriptionTier.PREMIUM

    status = refresh_user_subscription(user, NOW + timedelta(days=3, hours=1))
    assert status["subscription"] == SubscriptionTier.FREE
    assert user.payment_status == PaymentStatus.EXPIRED

    # A second lapse of the same subscription gets no new grace
    assert compute_status(user, NOW + timedelta(days=1))["subscription"] == SubscriptionTier.FREE


def test_grace_survives_repeated_requests(client, db, owner_headers):
    client.get(f"{API}/users/me", headers=owner_headers)
    user = db.query(User).filter(User.uid == "user-1").one()
    user.subscription_date = datetime.utcnow() - timedelta(days=32)
    user.subscription_expiry_date = datetime.utcnow() - timedelta(days=2)
    user.grace_period_used = False
    db.commit()

    for _ in range(2):
        profile = client.get(f"{API}/users/me", headers=owner_headers).json()
        assert profile["user"]["subscription"] == "premium"
        assert profile["user"]["payment_status"] == "grace"
        assert profile["status"]["payment_status"] == "grace"
        assert profile["status"]["max_forms"] > 3
