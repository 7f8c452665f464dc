# File: adparlay/models/user.py
from sqlalchemy import Column, String, Boolean, Enum, DateTime, Integer
from sqlalchemy.orm import relationship
from adparlay.models.base import BaseModel
import enum


class SubscriptionTier(enum.Enum):
    FREE = "free"
    PREMIUM = "premium"


class PaymentStatus(enum.Enum):
    ACTIVE = "active"
    GRACE = "grace"
    EXPIRED = "expired"


class User(BaseModel):
    __tablename__ = "users"

    # Subject claim of the identity provider token
    uid = Column(String(128), unique=True, index=True, nullable=False)
    email = Column(String(255), index=True, nullable=True)
    full_name = Column(String(255), nullable=True)
    username = Column(String(100), unique=True, index=True, nullable=True)
    is_active = Column(Boolean, default=True)

    # Subscription
    subscription = Column(Enum(SubscriptionTier), nullable=False, default=SubscriptionTier.FREE)
    payment_status = Column(Enum(PaymentStatus), nullable=False, default=PaymentStatus.EXPIRED)
    subscription_date = Column(DateTime, nullable=True)
    subscription_expiry_date = Column(DateTime, nullable=True)
    grace_period_used = Column(Boolean, default=False)
    paystack_reference = Column(String(255), nullable=True)

    # Usage caps
    max_forms = Column(Integer, default=3)
    max_leads = Column(Integer, default=100)

    last_login = Column(DateTime, nullable=True)

    forms = relationship("Form", back_populates="owner", cascade="all, delete-orphan")
