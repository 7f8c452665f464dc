import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from html import escape
from typing import List, Optional
import logging
from sqlalchemy.orm import Session
from adparlay.core.config import settings
from adparlay.crud import notification as crud_notification
from adparlay.models.form import Form
from adparlay.models.notification import EmailNotification, EmailStatus
from adparlay.models.submission import FormSubmission

logger = logging.getLogger(__name__)


def send_email(
    to_emails: List[str],
    subject: str,
    body: str,
    is_html: bool = True
) -> bool:
    """Send email using SMTP configuration"""
    try:
        msg = MIMEMultipart()
        msg['From'] = f"{settings.FROM_NAME} <{settings.FROM_EMAIL}>"
        msg['To'] = ', '.join(to_emails)
        msg['Subject'] = subject
        msg.attach(MIMEText(body, 'html' if is_html else 'plain'))

        with smtplib.SMTP(settings.SMTP_SERVER, settings.SMTP_PORT, timeout=settings.EMAIL_TIMEOUT) as server:
            server.starttls()
            if settings.SMTP_USERNAME and settings.SMTP_PASSWORD:
                server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            server.send_message(msg, to_addrs=to_emails)

        logger.info(f"Email sent successfully to {to_emails}")
        return True

    except Exception as e:
        logger.error(f"Failed to send email: {str(e)}")
        return False


def deliver_notification(
    db: Session,
    to: str,
    subject: str,
    html: str,
    form_id: Optional[str] = None,
    form_title: Optional[str] = None,
    submission_id: Optional[str] = None,
) -> EmailNotification:
    """Send (when enabled) and record an email notification."""
    if not settings.SEND_EMAILS:
        logger.info(f"SEND_EMAILS disabled; recording notification to {to} without sending")
        status = EmailStatus.SKIPPED
    elif send_email([to], subject, html):
        status = EmailStatus.SENT
    else:
        status = EmailStatus.FAILED

    return crud_notification.create_email_notification(
        db,
        to=to,
        subject=subject,
        html=html,
        status=status,
        form_id=form_id,
        form_title=form_title,
        submission_id=submission_id,
    )


def submission_email_html(form: Form, submission: FormSubmission) -> str:
    labels = {q.get("id"): q.get("label") or q.get("id") for q in form.questions or []}
    rows = []
    for key, value in (submission.form_data or {}).items():
        if isinstance(value, list):
            value = ", ".join(str(v) for v in value)
        rows.append(
            f"<tr><td style='padding:4px 8px'><b>{escape(str(labels.get(key, key)))}</b></td>"
            f"<td style='padding:4px 8px'>{escape(str(value))}</td></tr>"
        )
    return f"""
    <html>
        <body>
            <h2>New submission for {escape(form.title)}</h2>
            <p>Lead score: {submission.lead_score}</p>
            <table>{''.join(rows)}</table>
            <p>View all responses in your <a href="{settings.FRONTEND_URL}/dashboard">dashboard</a>.</p>
        </body>
    </html>
    """
