from pydantic import BaseModel
from typing import Optional


class TokenData(BaseModel):
    uid: str
    email: Optional[str] = None
    name: Optional[str] = None
