from typing import Optional
import logging
from datetime import datetime
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from adparlay.db.database import get_db
from adparlay.core.security import decode_token
from adparlay.models.user import User
from adparlay.models.form import Form
from adparlay.schemas.auth import TokenData
from adparlay.crud import user as crud_user
from adparlay.crud import form as crud_form
from adparlay.services.subscription_service import refresh_user_subscription, is_premium

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_token_data(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenData:
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_token(credentials.credentials)
    if payload is None or not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or expired token",
        )

    return TokenData(uid=payload["sub"], email=payload.get("email"), name=payload.get("name"))


def get_current_user(
    db: Session = Depends(get_db),
    token_data: TokenData = Depends(get_token_data)
) -> User:
    """
    Resolve the caller's user record, creating it on first sight.
    Subscription status is recomputed on every authenticated request.
    """
    user = crud_user.get_by_uid(db, uid=token_data.uid)
    if user is None:
        user = crud_user.create_from_token(db, token_data=token_data)
        logger.info(f"Provisioned user {user.uid}")

    if not user.is_active:
        raise HTTPException(status_code=400, detail="Inactive user")

    refresh_user_subscription(user)
    user.last_login = datetime.utcnow()
    db.commit()
    db.refresh(user)
    return user


def require_premium(current_user: User = Depends(get_current_user)) -> User:
    if not is_premium(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This feature requires a premium subscription"
        )
    return current_user


def get_owned_form(
    form_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
) -> Form:
    """The caller's form; someone else's form is indistinguishable from a missing one."""
    form = crud_form.get_for_user(db, form_id=form_id, user_id=current_user.id)
    if form is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Form not found")
    return form
