import json
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from adparlay.db.database import get_db
from adparlay.core.config import settings
from adparlay.core.deps import get_current_user
from adparlay.core.exceptions import PaymentVerificationError
from adparlay.crud import payment as crud_payment
from adparlay.crud import user as crud_user
from adparlay.models.user import User
from adparlay.schemas.payment import PaystackVerifyRequest, PaymentResult
from adparlay.services import paystack_service
from adparlay.services.subscription_service import activate_premium
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


def _paid_at(data: dict) -> datetime:
    raw = data.get("paid_at") or data.get("paidAt")
    if raw:
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00")).replace(tzinfo=None)
        except ValueError:
            logger.debug(f"Unparseable paid_at {raw!r}")
    return datetime.utcnow()


def _result(user: User, reference: str, amount: int) -> dict:
    return {
        "reference": reference,
        "status": "success",
        "amount": amount,
        "subscription": user.subscription.value,
        "subscription_expiry_date": user.subscription_expiry_date,
    }


@router.post("/paystack/verify", response_model=PaymentResult)
def verify_payment(
    *,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    verify_in: PaystackVerifyRequest
):
    """Confirm a completed Paystack charge and start a premium period"""
    existing = crud_payment.get_by_reference(db, verify_in.reference)
    if existing and existing.status == "success":
        if existing.user_id != current_user.id:
            raise HTTPException(status_code=400, detail="Payment reference already used")
        return _result(current_user, existing.reference, existing.amount)

    try:
        data = paystack_service.verify_transaction(verify_in.reference)
    except PaymentVerificationError as e:
        crud_payment.record_transaction(
            db, reference=verify_in.reference, amount=0, status="failed", user_id=current_user.id
        )
        db.commit()
        raise HTTPException(status_code=e.status_code, detail=str(e))

    amount = int(data.get("amount") or 0)
    crud_payment.record_transaction(
        db,
        reference=verify_in.reference,
        amount=amount,
        status="success",
        user_id=current_user.id,
        currency=data.get("currency") or "NGN",
        paid_at=_paid_at(data),
        raw=data,
    )
    activate_premium(current_user, verify_in.reference)
    db.commit()
    db.refresh(current_user)

    logger.info(f"Premium activated for {current_user.uid} with reference {verify_in.reference}")
    return _result(current_user, verify_in.reference, amount)


@router.post("/paystack/webhook")
async def paystack_webhook(request: Request, db: Session = Depends(get_db)):
    """Paystack event callback, authenticated by the HMAC-SHA512 signature header"""
    body = await request.body()
    signature = request.headers.get("x-paystack-signature", "")
    if not paystack_service.valid_signature(body, signature):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid signature")

    try:
        event = json.loads(body)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid payload")
    if not isinstance(event, dict):
        raise HTTPException(status_code=400, detail="Invalid payload")

    if event.get("event") != "charge.success":
        return {"status": "ignored"}

    data = event.get("data") or {}
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="Invalid payload")
    reference = data.get("reference")
    if not reference or not isinstance(reference, str):
        raise HTTPException(status_code=400, detail="Missing reference")
    try:
        amount = int(data.get("amount") or 0)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="Invalid amount")

    existing = crud_payment.get_by_reference(db, reference)
    if existing and existing.status == "success":
        return {"status": "duplicate"}

    metadata = data.get("metadata") or {}
    user = None
    if isinstance(metadata, dict) and metadata.get("uid"):
        user = crud_user.get_by_uid(db, uid=metadata["uid"])
    if user is None:
        customer = data.get("customer")
        email = customer.get("email") if isinstance(customer, dict) else None
        if email:
            user = db.query(User).filter(User.email == email).first()

    crud_payment.record_transaction(
        db,
        reference=reference,
        amount=amount,
        status="success",
        user_id=user.id if user else None,
        currency=data.get("currency") or "NGN",
        paid_at=_paid_at(data),
        raw=data,
    )
    if user and amount >= settings.PAYSTACK_PLAN_AMOUNT:
        activate_premium(user, reference)
        logger.info(f"Premium activated for {user.uid} via webhook ({reference})")
    else:
        logger.warning(f"Paystack charge {reference} could not be applied to a subscription")
    db.commit()
    return {"status": "ok"}
