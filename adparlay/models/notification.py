from sqlalchemy import Column, String, DateTime, Text, Enum
from adparlay.models.base import BaseModel
import enum


class EmailStatus(enum.Enum):
    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"


class EmailNotification(BaseModel):
    __tablename__ = "email_notifications"

    to = Column(String(255), nullable=False)
    subject = Column(String(500), nullable=False)
    html = Column(Text, nullable=False)
    form_id = Column(String(36), nullable=True, index=True)
    form_title = Column(String(255), nullable=True)
    submission_id = Column(String(36), nullable=True)
    status = Column(Enum(EmailStatus), nullable=False)
    sent_at = Column(DateTime, nullable=False)
