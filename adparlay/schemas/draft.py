from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from datetime import datetime


class DraftPayload(BaseModel):
    title: Optional[str] = None
    blocks: List[Dict[str, Any]] = []
    questions: List[Dict[str, Any]] = []
    media: Dict[str, Any] = {}
    form_style: Dict[str, Any] = {}


class DraftResponse(BaseModel):
    id: int
    form_key: str
    payload: DraftPayload
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
