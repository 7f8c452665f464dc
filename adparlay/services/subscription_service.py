import math
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from adparlay.core.config import settings
from adparlay.models.user import User, SubscriptionTier, PaymentStatus

logger = logging.getLogger(__name__)


def _free_status(days_till_expiry: Optional[int] = None) -> Dict[str, Any]:
    return {
        "subscription": SubscriptionTier.FREE,
        "payment_status": PaymentStatus.EXPIRED,
        "max_forms": settings.FREE_MAX_FORMS,
        "max_leads": settings.FREE_MAX_LEADS,
        "days_till_expiry": days_till_expiry,
    }


def _premium_status(payment_status: PaymentStatus, days_till_expiry: Optional[int]) -> Dict[str, Any]:
    return {
        "subscription": SubscriptionTier.PREMIUM,
        "payment_status": payment_status,
        "max_forms": settings.PREMIUM_LIMIT,
        "max_leads": settings.PREMIUM_LIMIT,
        "days_till_expiry": days_till_expiry,
    }


def compute_status(user: User, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Derive tier, payment status and caps from the stored subscription dates.

    - Test accounts are always premium.
    - No subscription dates: free.
    - Before expiry: premium / active.
    - Within the grace window after expiry: premium / grace. A subscription
      enters grace once; a user already in grace keeps it until the window ends.
    - Otherwise: free / expired.
    """
    now = now or datetime.utcnow()

    if user.email and user.email.lower() in settings.premium_test_emails:
        return _premium_status(PaymentStatus.ACTIVE, settings.PREMIUM_LIMIT)

    expiry = user.subscription_expiry_date
    if not expiry or not user.subscription_date:
        return _free_status()

    if expiry.tzinfo is not None:
        expiry = expiry.replace(tzinfo=None)

    days_till_expiry = math.ceil((expiry - now).total_seconds() / 86400)

    if now < expiry:
        return _premium_status(PaymentStatus.ACTIVE, days_till_expiry)

    grace_end = expiry + timedelta(days=settings.GRACE_PERIOD_DAYS)
    in_grace = user.payment_status == PaymentStatus.GRACE
    if now < grace_end and (in_grace or not user.grace_period_used):
        return _premium_status(PaymentStatus.GRACE, days_till_expiry)

    return _free_status(0)


def refresh_user_subscription(user: User, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Apply the computed status to ``user`` in place; returns the status. Caller commits."""
    status = compute_status(user, now)

    changed = (
        user.subscription != status["subscription"]
        or user.payment_status != status["payment_status"]
        or user.max_forms != status["max_forms"]
        or user.max_leads != status["max_leads"]
    )
    if changed:
        logger.info(
            f"Subscription for {user.uid}: {user.subscription} -> {status['subscription']}, "
            f"{user.payment_status} -> {status['payment_status']}"
        )
        user.subscription = status["subscription"]
        user.payment_status = status["payment_status"]
        user.max_forms = status["max_forms"]
        user.max_leads = status["max_leads"]

    if status["payment_status"] == PaymentStatus.GRACE:
        user.grace_period_used = True

    return status


def activate_premium(user: User, reference: str, now: Optional[datetime] = None) -> User:
    """Start a paid subscription period. Caller commits."""
    now = now or datetime.utcnow()
    user.subscription = SubscriptionTier.PREMIUM
    user.payment_status = PaymentStatus.ACTIVE
    user.subscription_date = now
    user.subscription_expiry_date = now + timedelta(days=settings.SUBSCRIPTION_DAYS)
    user.grace_period_used = False
    user.paystack_reference = reference
    user.max_forms = settings.PREMIUM_LIMIT
    user.max_leads = settings.PREMIUM_LIMIT
    return user


def is_premium(user: User) -> bool:
    return user.subscription == SubscriptionTier.PREMIUM
