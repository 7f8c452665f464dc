from sqlalchemy import Column, String, DateTime, ForeignKey, JSON, Text, Enum
from adparlay.models.base import BaseModel
import enum


class AnalyticsEventType(enum.Enum):
    VIEW = "view"
    START = "start"
    COMPLETE = "complete"
    ABANDON = "abandon"


class AnalyticsEvent(BaseModel):
    __tablename__ = "analytics_events"

    form_id = Column(String(36), ForeignKey("forms.id", ondelete="CASCADE"), nullable=False, index=True)
    event_type = Column(Enum(AnalyticsEventType), nullable=False, index=True)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)
    session_id = Column(String(255), nullable=True)
    event_metadata = Column("metadata", JSON, nullable=True)
    timestamp = Column(DateTime, nullable=False, index=True)
