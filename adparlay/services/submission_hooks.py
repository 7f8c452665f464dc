import logging
from sqlalchemy.orm import Session
from adparlay.db.database import SessionLocal
from adparlay.core.exceptions import IntegrationError
from adparlay.crud import integration as crud_integration
from adparlay.crud import submission as crud_submission
from adparlay.models.form import Form
from adparlay.models.integration import IntegrationType, SyncStatus
from adparlay.models.submission import FormSubmission
from adparlay.services import crm_service, google_sheets_service, zapier_service
from adparlay.services.email_service import deliver_notification, submission_email_html

logger = logging.getLogger(__name__)


def _forward_to_zapier(db: Session, form: Form, submission: FormSubmission) -> None:
    for integration in crud_integration.get_active_zapier(db, form.id):
        payload = zapier_service.build_webhook_data(form, submission, integration.custom_fields)
        try:
            zapier_service.send_webhook(integration.webhook_url, payload)
            status, error = SyncStatus.SUCCESS, None
        except IntegrationError as e:
            status, error = SyncStatus.FAILED, str(e)
        crud_integration.log_sync(
            db, IntegrationType.ZAPIER, status, form_id=form.id, submission_id=submission.id,
            target=integration.webhook_url, payload=payload, error=error
        )


def _forward_to_crm(db: Session, form: Form, submission: FormSubmission) -> None:
    for integration in crud_integration.get_active_crm(db, form.id):
        contact = crm_service.extract_contact(form, submission)
        try:
            crm_service.push_contact(
                integration.crm_type, integration.access_token, contact, instance_url=integration.instance_url
            )
            status, error = SyncStatus.SUCCESS, None
        except IntegrationError as e:
            status, error = SyncStatus.FAILED, str(e)
        crud_integration.log_sync(
            db, IntegrationType.CRM, status, form_id=form.id, submission_id=submission.id,
            target=integration.crm_type.value, payload=contact, error=error
        )


def _forward_to_google_sheets(db: Session, form: Form, submission: FormSubmission) -> None:
    for integration in crud_integration.get_active_google_sheets(db, form.id):
        row = google_sheets_service.row_for_submission(form, submission)
        try:
            google_sheets_service.append_row(
                integration.spreadsheet_id, integration.sheet_name, integration.access_token, row
            )
            status, error = SyncStatus.SUCCESS, None
        except IntegrationError as e:
            status, error = SyncStatus.FAILED, str(e)
        crud_integration.log_sync(
            db, IntegrationType.GOOGLE_SHEETS, status, form_id=form.id, submission_id=submission.id,
            target=integration.spreadsheet_id, payload=row, error=error
        )


def _notify_owner(db: Session, form: Form, submission: FormSubmission) -> None:
    owner = form.owner
    if not owner or not owner.email:
        return
    deliver_notification(
        db,
        to=owner.email,
        subject=f"New response to {form.title}",
        html=submission_email_html(form, submission),
        form_id=form.id,
        form_title=form.title,
        submission_id=submission.id,
    )


def process_new_submission(form_id: str, submission_id: str) -> None:
    """Fan a stored submission out to the form's integrations and notify the owner."""
    db: Session = SessionLocal()
    try:
        submission = crud_submission.get_submission(db, form_id, submission_id)
        if submission is None:
            logger.warning(f"Submission {submission_id} for form {form_id} not found; skipping fan-out")
            return
        form = submission.form

        for step in (_forward_to_zapier, _forward_to_crm, _forward_to_google_sheets, _notify_owner):
            try:
                step(db, form, submission)
            except Exception as e:
                db.rollback()
                logger.error(f"{step.__name__} failed for submission {submission_id}: {str(e)}")
    finally:
        db.close()
