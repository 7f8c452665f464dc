from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, JSON
from adparlay.models.base import BaseModel


class PaymentTransaction(BaseModel):
    __tablename__ = "payment_transactions"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    reference = Column(String(255), unique=True, nullable=False, index=True)
    amount = Column(Integer, nullable=False)  # kobo
    currency = Column(String(10), nullable=False, default="NGN")
    status = Column(String(50), nullable=False)
    paid_at = Column(DateTime, nullable=True)
    raw = Column(JSON, nullable=True)
