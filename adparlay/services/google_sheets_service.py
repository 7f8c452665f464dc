import json
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from urllib.parse import quote, urlencode

import requests
from jose import JWTError, jwt

from adparlay.core.config import settings
from adparlay.core.exceptions import IntegrationError
from adparlay.models.form import Form
from adparlay.models.submission import FormSubmission

logger = logging.getLogger(__name__)

AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
SHEETS_URL = "https://sheets.googleapis.com/v4/spreadsheets"
SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive.file",
]
DEFAULT_SHEET = "Submissions"
STATE_TTL = timedelta(minutes=15)


def encode_state(data: Dict[str, Any]) -> str:
    """Signed, short-lived OAuth state naming the user and form to connect."""
    claims = {"userId": data.get("userId"), "formId": data.get("formId"), "exp": datetime.utcnow() + STATE_TTL}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_state(state: str) -> Dict[str, Any]:
    try:
        claims = jwt.decode(state, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        raise IntegrationError(f"Invalid state parameter: {e}", status_code=400)
    if not isinstance(claims.get("userId"), str):
        raise IntegrationError("Invalid state parameter: missing user", status_code=400)
    return {"userId": claims["userId"], "formId": claims.get("formId")}


def build_auth_url(user_uid: str, form_id: Optional[str] = None) -> str:
    if not settings.GOOGLE_CLIENT_ID:
        raise IntegrationError("Google OAuth is not configured", status_code=500)
    params = {
        "client_id": settings.GOOGLE_CLIENT_ID,
        "redirect_uri": settings.GOOGLE_REDIRECT_URI,
        "response_type": "code",
        "scope": " ".join(SCOPES),
        "access_type": "offline",
        "prompt": "consent",
        "state": encode_state({"userId": user_uid, "formId": form_id}),
    }
    return f"{AUTH_URL}?{urlencode(params)}"


def _request(method: str, url: str, action: str, **kwargs) -> Dict[str, Any]:
    try:
        response = requests.request(method, url, timeout=settings.INTEGRATION_TIMEOUT, **kwargs)
        response.raise_for_status()
        return response.json()
    except (requests.RequestException, ValueError) as e:
        logger.error(f"Google {action} failed: {e}")
        raise IntegrationError(f"Google {action} failed: {e}", status_code=502)


def exchange_code(code: str) -> Dict[str, Any]:
    return _request("POST", TOKEN_URL, "token exchange", data={
        "client_id": settings.GOOGLE_CLIENT_ID,
        "client_secret": settings.GOOGLE_CLIENT_SECRET,
        "code": code,
        "grant_type": "authorization_code",
        "redirect_uri": settings.GOOGLE_REDIRECT_URI,
    })


def get_user_info(access_token: str) -> Dict[str, Any]:
    return _request("GET", USERINFO_URL, "user info", headers={"Authorization": f"Bearer {access_token}"})


def create_spreadsheet(access_token: str, title: str) -> str:
    body = {
        "properties": {"title": title},
        "sheets": [{"properties": {"title": DEFAULT_SHEET}}],
    }
    created = _request("POST", SHEETS_URL, "spreadsheet creation",
                       json=body, headers={"Authorization": f"Bearer {access_token}"})
    return created["spreadsheetId"]


def row_for_submission(form: Form, submission: FormSubmission) -> Dict[str, Any]:
    """Column label -> cell value, in question order."""
    answers = submission.form_data or {}
    row: Dict[str, Any] = {
        "Submitted At": submission.submitted_at.isoformat() if submission.submitted_at else "",
        "Submission ID": submission.id,
    }
    for question in form.questions or []:
        value = answers.get(question.get("id"))
        if isinstance(value, list):
            value = ", ".join(str(v) for v in value)
        row[question.get("label") or question.get("id")] = "" if value is None else value
    return row


def append_row(spreadsheet_id: str, sheet_name: str, access_token: str, row_data: Dict[str, Any]) -> Dict[str, Any]:
    values: List[Any] = [
        v if isinstance(v, (str, int, float)) else json.dumps(v)
        for v in row_data.values()
    ]
    url = f"{SHEETS_URL}/{spreadsheet_id}/values/{quote(sheet_name)}!A1:append"
    result = _request(
        "POST", url, "sheet append",
        params={"valueInputOption": "USER_ENTERED", "insertDataOption": "INSERT_ROWS"},
        json={"values": [values]},
        headers={"Authorization": f"Bearer {access_token}"},
    )
    logger.info(f"Appended row to spreadsheet {spreadsheet_id}")
    return result
