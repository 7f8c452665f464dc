# File: adparlay/models/submission.py
import uuid
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, JSON, Text
from sqlalchemy.orm import relationship
from adparlay.db.database import Base


class FormSubmission(Base):
    __tablename__ = "form_submissions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    form_id = Column(String(36), ForeignKey("forms.id", ondelete="CASCADE"), nullable=False, index=True)

    # question id -> answer
    form_data = Column(JSON, nullable=False, default=dict)
    submitted_at = Column(DateTime, nullable=False, index=True)

    # Tracking
    user_agent = Column(Text, nullable=True)
    ip_address = Column(String(45), nullable=True)
    session_id = Column(String(255), nullable=True)

    # Lead data
    lead_score = Column(Integer, default=0)
    contact_info = Column(JSON, nullable=False, default=dict)

    form = relationship("Form", back_populates="submissions")
