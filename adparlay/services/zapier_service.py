import logging
from datetime import datetime
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import requests

from adparlay.core.config import settings
from adparlay.core.exceptions import IntegrationError
from adparlay.models.form import Form
from adparlay.models.submission import FormSubmission
from adparlay.services.analytics_service import device_from_user_agent

logger = logging.getLogger(__name__)


def validate_webhook_url(webhook_url: str) -> str:
    parsed = urlparse(webhook_url or "")
    if parsed.scheme != "https" or not parsed.netloc:
        raise IntegrationError("Invalid webhook URL. Must be a valid HTTPS URL.", status_code=400)
    return webhook_url


def build_webhook_data(
    form: Form,
    submission: FormSubmission,
    custom_fields: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Flatten a submission for Zapier: answers keyed by question label, raw answers by id."""
    labels = {q.get("id"): q.get("label") or q.get("id") for q in form.questions or []}
    answers = submission.form_data or {}
    submitted_at = submission.submitted_at or datetime.utcnow()

    data: Dict[str, Any] = {
        "submission_id": submission.id,
        "form_id": form.id,
        "form_title": form.title,
        "submitted_at": submitted_at.isoformat(),
        "device": device_from_user_agent(submission.user_agent),
        "ip_address": submission.ip_address,
        "lead_score": submission.lead_score,
        "responses": {labels.get(key, key): value for key, value in answers.items()},
        "raw_responses": dict(answers),
    }
    data.update(custom_fields or {})
    return data


def send_webhook(webhook_url: str, webhook_data: Dict[str, Any]) -> int:
    """POST the payload to the Zap; returns the HTTP status."""
    try:
        response = requests.post(webhook_url, json=webhook_data, timeout=settings.INTEGRATION_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"Zapier webhook {webhook_url} failed: {e}")
        raise IntegrationError(f"Failed to trigger Zapier webhook: {e}")
    logger.info(f"Zapier webhook triggered ({response.status_code}) with keys {list(webhook_data)}")
    return response.status_code
