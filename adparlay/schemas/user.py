from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from adparlay.models.user import SubscriptionTier, PaymentStatus


class SubscriptionStatus(BaseModel):
    subscription: SubscriptionTier
    payment_status: PaymentStatus
    max_forms: int
    max_leads: int
    days_till_expiry: Optional[int] = None


class UsageStats(BaseModel):
    forms_count: int
    leads_count: int
    forms_remaining: int
    leads_remaining: int


class UserResponse(BaseModel):
    id: int
    uid: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    username: Optional[str] = None
    subscription: SubscriptionTier
    payment_status: PaymentStatus
    subscription_date: Optional[datetime] = None
    subscription_expiry_date: Optional[datetime] = None
    grace_period_used: bool = False
    max_forms: int
    max_leads: int

    class Config:
        from_attributes = True


class UserProfileResponse(BaseModel):
    user: UserResponse
    status: SubscriptionStatus
    usage: UsageStats


class UserUpdate(BaseModel):
    full_name: Optional[str] = None
    username: Optional[str] = None
