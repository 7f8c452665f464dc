import json
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session
from adparlay.db.database import get_db
from adparlay.core.config import settings
from adparlay.core.deps import get_current_user, get_owned_form
from adparlay.core.exceptions import IntegrationError
from adparlay.crud import form as crud_form
from adparlay.crud import integration as crud_integration
from adparlay.crud import user as crud_user
from adparlay.models.form import Form
from adparlay.models.integration import IntegrationType, SyncStatus
from adparlay.models.user import User
from adparlay.schemas.integration import (
    ZapierSetupRequest,
    ZapierTriggerRequest,
    CRMSetupRequest,
    CRMSyncRequest,
    GoogleSheetsSetupRequest,
    GoogleSheetsSyncRequest,
    SyncResult,
    FormIntegrations,
)
from adparlay.services import crm_service, google_sheets_service, zapier_service
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


def _http_error(e: IntegrationError) -> HTTPException:
    return HTTPException(status_code=e.status_code or 502, detail=str(e))


def _owned_form(db: Session, form_id: str, user: User) -> Form:
    form = crud_form.get_for_user(db, form_id=form_id, user_id=user.id)
    if form is None:
        raise HTTPException(status_code=404, detail="Form not found")
    return form


# Zapier

@router.post("/zapier/setup")
def setup_zapier(
    *,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    setup_in: ZapierSetupRequest
):
    form = _owned_form(db, setup_in.form_id, current_user)
    try:
        zapier_service.validate_webhook_url(setup_in.webhook_url)
    except IntegrationError as e:
        raise _http_error(e)

    integration = crud_integration.upsert_zapier(
        db, form.id, setup_in.webhook_url, setup_in.is_active, setup_in.custom_fields
    )
    form.has_zapier_integration = setup_in.is_active
    db.commit()
    logger.info(f"Zapier integration configured for form {form.id}")
    return {"message": "Zapier integration configured successfully", "integration_id": integration.id}


@router.post("/zapier/trigger", response_model=SyncResult)
def trigger_zapier(
    *,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    trigger_in: ZapierTriggerRequest
):
    """Send an arbitrary payload to a Zap, e.g. a test trigger from the settings page"""
    webhook_url = trigger_in.config.webhook_url
    payload = {**trigger_in.webhook_data, **trigger_in.config.custom_fields}
    try:
        zapier_service.validate_webhook_url(webhook_url)
        zapier_service.send_webhook(webhook_url, payload)
    except IntegrationError as e:
        crud_integration.log_sync(
            db, IntegrationType.ZAPIER, SyncStatus.FAILED,
            form_id=payload.get("form_id"), target=webhook_url, payload=payload, error=str(e)
        )
        raise _http_error(e)

    entry = crud_integration.log_sync(
        db, IntegrationType.ZAPIER, SyncStatus.SUCCESS,
        form_id=payload.get("form_id"), target=webhook_url, payload=payload
    )
    return {"message": "Zapier webhook triggered successfully", "sync_id": entry.id, "status": "success"}


# CRM

@router.post("/crm/setup")
def setup_crm(
    *,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    setup_in: CRMSetupRequest
):
    form = _owned_form(db, setup_in.form_id, current_user)
    integration = crud_integration.upsert_crm(
        db,
        form.id,
        crm_type=setup_in.type,
        access_token=setup_in.access_token,
        refresh_token=setup_in.refresh_token,
        client_id=setup_in.client_id,
        client_secret=setup_in.client_secret,
        account_id=setup_in.account_id,
        portal_id=setup_in.portal_id,
        instance_url=setup_in.instance_url,
    )
    form.has_crm_integration = True
    form.crm_type = setup_in.type.value
    db.commit()
    logger.info(f"{setup_in.type.value} integration configured for form {form.id}")
    return {"message": f"{setup_in.type.value} integration configured successfully", "integration_id": integration.id}


@router.post("/crm/sync", response_model=SyncResult)
def sync_crm(
    *,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    sync_in: CRMSyncRequest
):
    crm_type = sync_in.config.type
    contact = sync_in.contact.model_dump()
    try:
        crm_service.push_contact(
            crm_type, sync_in.config.access_token, contact, instance_url=sync_in.config.instance_url
        )
    except IntegrationError as e:
        crud_integration.log_sync(
            db, IntegrationType.CRM, SyncStatus.FAILED, form_id=sync_in.submission.form_id,
            submission_id=sync_in.submission.id, target=crm_type.value, payload=contact, error=str(e)
        )
        raise _http_error(e)

    entry = crud_integration.log_sync(
        db, IntegrationType.CRM, SyncStatus.SUCCESS, form_id=sync_in.submission.form_id,
        submission_id=sync_in.submission.id, target=crm_type.value, payload=contact
    )
    return {"message": f"Contact synced to {crm_type.value} successfully", "sync_id": entry.id, "status": "success"}


# Google Sheets

@router.get("/google-sheets/auth-url")
def google_sheets_auth_url(
    current_user: User = Depends(get_current_user),
    form_id: Optional[str] = Query(None)
):
    try:
        return {"auth_url": google_sheets_service.build_auth_url(current_user.uid, form_id)}
    except IntegrationError as e:
        raise _http_error(e)


def _popup_response(message: dict, status_code: int = 200) -> HTMLResponse:
    html = f"""
    <!DOCTYPE html>
    <html>
        <head><title>Google Sheets Integration</title></head>
        <body>
            <script>
                window.opener && window.opener.postMessage({json.dumps(message)}, {json.dumps(settings.FRONTEND_URL)});
                window.close();
            </script>
        </body>
    </html>
    """
    return HTMLResponse(content=html, status_code=status_code)


@router.get("/google-sheets/callback")
def google_sheets_callback(
    db: Session = Depends(get_db),
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None)
):
    """OAuth redirect target: exchange the code and create the submissions spreadsheet"""
    if not code:
        raise HTTPException(status_code=400, detail="Authorization code not provided")
    try:
        state_data = google_sheets_service.decode_state(state or "")
    except IntegrationError as e:
        raise _http_error(e)

    try:
        tokens = google_sheets_service.exchange_code(code)
        user_info = google_sheets_service.get_user_info(tokens["access_token"])
        spreadsheet_id = google_sheets_service.create_spreadsheet(
            tokens["access_token"], f"Form Submissions - {user_info.get('name') or 'User'}"
        )
    except (IntegrationError, KeyError) as e:
        logger.error(f"Google Sheets callback failed: {e}")
        return _popup_response(
            {"type": "GOOGLE_SHEETS_AUTH_ERROR", "error": "Failed to connect to Google Sheets"},
            status_code=502,
        )

    user = crud_user.get_by_uid(db, uid=state_data.get("userId") or "")
    form_id = state_data.get("formId")
    if user and form_id:
        form = crud_form.get_for_user(db, form_id=form_id, user_id=user.id)
        if form:
            crud_integration.upsert_google_sheets(
                db,
                form.id,
                spreadsheet_id=spreadsheet_id,
                sheet_name=google_sheets_service.DEFAULT_SHEET,
                access_token=tokens["access_token"],
                refresh_token=tokens.get("refresh_token"),
            )
            form.has_google_sheets_integration = True
            db.commit()

    return _popup_response({
        "type": "GOOGLE_SHEETS_AUTH_SUCCESS",
        "accessToken": tokens["access_token"],
        "refreshToken": tokens.get("refresh_token"),
        "spreadsheetId": spreadsheet_id,
    })


@router.post("/google-sheets/setup")
def setup_google_sheets(
    *,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    setup_in: GoogleSheetsSetupRequest
):
    form = _owned_form(db, setup_in.form_id, current_user)
    integration = crud_integration.upsert_google_sheets(
        db,
        form.id,
        spreadsheet_id=setup_in.spreadsheet_id,
        sheet_name=setup_in.sheet_name,
        access_token=setup_in.access_token,
        refresh_token=setup_in.refresh_token,
    )
    form.has_google_sheets_integration = True
    db.commit()
    logger.info(f"Google Sheets integration configured for form {form.id}")
    return {"message": "Google Sheets integration configured successfully", "integration_id": integration.id}


@router.post("/google-sheets/sync", response_model=SyncResult)
def sync_google_sheets(
    *,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    sync_in: GoogleSheetsSyncRequest
):
    config = sync_in.config
    try:
        google_sheets_service.append_row(config.spreadsheet_id, config.sheet_name, config.access_token, sync_in.row_data)
    except IntegrationError as e:
        crud_integration.log_sync(
            db, IntegrationType.GOOGLE_SHEETS, SyncStatus.FAILED,
            target=config.spreadsheet_id, payload=sync_in.row_data, error=str(e)
        )
        raise _http_error(e)

    entry = crud_integration.log_sync(
        db, IntegrationType.GOOGLE_SHEETS, SyncStatus.SUCCESS,
        target=config.spreadsheet_id, payload=sync_in.row_data
    )
    return {"message": "Data synced to Google Sheets successfully", "sync_id": entry.id, "status": "success"}


@router.get("/forms/{form_id}", response_model=FormIntegrations)
def get_form_integrations(
    db: Session = Depends(get_db),
    form: Form = Depends(get_owned_form)
):
    """Configured integrations of a form, without credentials"""
    return {
        "form_id": form.id,
        "zapier": [
            {"id": z.id, "webhook_url": z.webhook_url, "is_active": z.is_active, "custom_fields": z.custom_fields}
            for z in crud_integration.get_active_zapier(db, form.id)
        ],
        "crm": [
            {"id": c.id, "crm_type": c.crm_type.value, "is_active": c.is_active, "instance_url": c.instance_url}
            for c in crud_integration.get_active_crm(db, form.id)
        ],
        "google_sheets": [
            {"id": g.id, "spreadsheet_id": g.spreadsheet_id, "sheet_name": g.sheet_name, "is_active": g.is_active}
            for g in crud_integration.get_active_google_sheets(db, form.id)
        ],
    }
