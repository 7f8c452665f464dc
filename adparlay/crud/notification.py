from typing import Optional
from datetime import datetime
from sqlalchemy.orm import Session
from adparlay.models.notification import EmailNotification, EmailStatus


def create_email_notification(
    db: Session,
    to: str,
    subject: str,
    html: str,
    status: EmailStatus,
    form_id: Optional[str] = None,
    form_title: Optional[str] = None,
    submission_id: Optional[str] = None,
) -> EmailNotification:
    notification = EmailNotification(
        to=to,
        subject=subject,
        html=html,
        status=status,
        form_id=form_id,
        form_title=form_title,
        submission_id=submission_id,
        sent_at=datetime.utcnow(),
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return notification
