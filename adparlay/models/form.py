# File: adparlay/models/form.py
import uuid
from sqlalchemy import Column, String, Boolean, Integer, DateTime, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from adparlay.db.database import Base
from adparlay.models.base import BaseModel


def _uuid() -> str:
    return str(uuid.uuid4())


class Form(Base):
    __tablename__ = "forms"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False, default="Untitled Form")
    form_name = Column(String(255), nullable=True)

    # Blocks and questions only exist nested in their form
    blocks = Column(JSON, nullable=False, default=list)
    questions = Column(JSON, nullable=False, default=list)
    media = Column(JSON, nullable=False, default=dict)
    form_style = Column(JSON, nullable=False, default=dict)

    is_published = Column(Boolean, default=False, index=True)
    share_url = Column(String(500), nullable=True)
    responses_count = Column(Integer, default=0)
    last_response_at = Column(DateTime, nullable=True)

    # Integration flags
    has_zapier_integration = Column(Boolean, default=False)
    has_crm_integration = Column(Boolean, default=False)
    crm_type = Column(String(50), nullable=True)
    has_google_sheets_integration = Column(Boolean, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    owner = relationship("User", back_populates="forms")
    submissions = relationship("FormSubmission", back_populates="form", cascade="all, delete-orphan")


class FormDraft(BaseModel):
    __tablename__ = "form_drafts"
    __table_args__ = (UniqueConstraint("user_id", "form_key", name="uq_form_drafts_user_form"),)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # Form id for edits, "new" for a form that was never saved
    form_key = Column(String(36), nullable=False, default="new")
    payload = Column(JSON, nullable=False, default=dict)
