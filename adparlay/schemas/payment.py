from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class PaystackVerifyRequest(BaseModel):
    reference: str


class PaymentResult(BaseModel):
    reference: str
    status: str
    amount: int
    subscription: str
    subscription_expiry_date: Optional[datetime] = None
