from pydantic import BaseModel, EmailStr
from typing import Optional


class EmailNotificationRequest(BaseModel):
    to: EmailStr
    subject: str
    html: str
    form_id: Optional[str] = None
    form_title: Optional[str] = None
    submission_id: Optional[str] = None


class EmailNotificationResult(BaseModel):
    message: str
    notification_id: int
    status: str
