from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from adparlay.db.database import get_db
from adparlay.core.deps import get_current_user
from adparlay.models.user import User
from adparlay.schemas.notification import EmailNotificationRequest, EmailNotificationResult
from adparlay.services.email_service import deliver_notification

router = APIRouter()


@router.post("/email", response_model=EmailNotificationResult)
def send_email_notification(
    *,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    notification_in: EmailNotificationRequest
):
    notification = deliver_notification(
        db,
        to=notification_in.to,
        subject=notification_in.subject,
        html=notification_in.html,
        form_id=notification_in.form_id,
        form_title=notification_in.form_title,
        submission_id=notification_in.submission_id,
    )
    return {
        "message": "Email notification processed",
        "notification_id": notification.id,
        "status": notification.status.value,
    }
