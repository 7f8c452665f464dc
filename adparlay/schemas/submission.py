from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from datetime import datetime


class ContactInfo(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class SubmissionCreate(BaseModel):
    form_data: Dict[str, Any]
    session_id: Optional[str] = None


class SubmissionResponse(BaseModel):
    id: str
    form_id: str
    form_data: Dict[str, Any]
    submitted_at: datetime
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None
    session_id: Optional[str] = None
    lead_score: int = 0
    contact_info: ContactInfo = ContactInfo()

    class Config:
        from_attributes = True


class SubmissionListResponse(BaseModel):
    items: List[SubmissionResponse]
    total: int
    page: int
    size: int
    pages: int


class SubmissionCreated(BaseModel):
    id: str
    message: str = "Submission saved"
    lead_score: int
