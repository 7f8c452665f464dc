from typing import Any, Dict, Optional
from datetime import datetime
from sqlalchemy.orm import Session
from adparlay.models.payment import PaymentTransaction


def get_by_reference(db: Session, reference: str) -> Optional[PaymentTransaction]:
    return db.query(PaymentTransaction).filter(PaymentTransaction.reference == reference).first()


def record_transaction(
    db: Session,
    reference: str,
    amount: int,
    status: str,
    user_id: Optional[int] = None,
    currency: str = "NGN",
    paid_at: Optional[datetime] = None,
    raw: Optional[Dict[str, Any]] = None,
) -> PaymentTransaction:
    """Insert or update the transaction for ``reference``. Caller commits."""
    transaction = get_by_reference(db, reference)
    if transaction is None:
        transaction = PaymentTransaction(reference=reference)
        db.add(transaction)
    transaction.amount = amount
    transaction.status = status
    transaction.currency = currency
    transaction.paid_at = paid_at
    transaction.raw = raw
    if user_id is not None:
        transaction.user_id = user_id
    return transaction
