import hashlib
import hmac
import logging
from typing import Any, Dict

import requests

from adparlay.core.config import settings
from adparlay.core.exceptions import PaymentVerificationError

logger = logging.getLogger(__name__)


def verify_transaction(reference: str) -> Dict[str, Any]:
    """
    Confirm a completed charge with Paystack.

    Returns the transaction ``data`` object; raises PaymentVerificationError
    unless the charge succeeded for at least the plan amount.
    """
    if not settings.PAYSTACK_SECRET_KEY:
        raise PaymentVerificationError("Paystack is not configured", status_code=500)

    url = f"{settings.PAYSTACK_BASE_URL.rstrip('/')}/transaction/verify/{reference}"
    try:
        response = requests.get(
            url,
            headers={"Authorization": f"Bearer {settings.PAYSTACK_SECRET_KEY}"},
            timeout=settings.INTEGRATION_TIMEOUT,
        )
        response.raise_for_status()
        body = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.error(f"Paystack verification for {reference} failed: {e}")
        raise PaymentVerificationError(f"Could not verify payment: {e}", status_code=502)

    data = body.get("data") or {}
    if not body.get("status") or data.get("status") != "success":
        raise PaymentVerificationError(f"Payment {reference} was not successful")
    if int(data.get("amount") or 0) < settings.PAYSTACK_PLAN_AMOUNT:
        raise PaymentVerificationError(f"Payment {reference} is below the plan amount")
    return data


def valid_signature(payload: bytes, signature: str) -> bool:
    if not settings.PAYSTACK_SECRET_KEY or not signature:
        return False
    expected = hmac.new(settings.PAYSTACK_SECRET_KEY.encode(), payload, hashlib.sha512).hexdigest()
    return hmac.compare_digest(expected, signature)
