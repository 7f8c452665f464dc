from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from adparlay.db.database import get_db
from adparlay.core.deps import get_current_user
from adparlay.crud import user as crud_user
from adparlay.models.user import User
from adparlay.schemas.user import UserProfileResponse, UserResponse, UserUpdate
from adparlay.services.subscription_service import refresh_user_subscription
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


def _profile(db: Session, user: User) -> dict:
    forms_count = crud_user.count_forms(db, user_id=user.id)
    leads_count = crud_user.count_leads(db, user_id=user.id)
    return {
        "user": user,
        "status": refresh_user_subscription(user),
        "usage": {
            "forms_count": forms_count,
            "leads_count": leads_count,
            "forms_remaining": max(user.max_forms - forms_count, 0),
            "leads_remaining": max(user.max_leads - leads_count, 0),
        },
    }


@router.get("/me", response_model=UserProfileResponse)
def read_current_user(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Profile, subscription status and usage against the plan caps"""
    return _profile(db, current_user)


@router.put("/me", response_model=UserResponse)
def update_current_user(
    *,
    db: Session = Depends(get_db),
    user_in: UserUpdate,
    current_user: User = Depends(get_current_user)
):
    if user_in.username and user_in.username != current_user.username:
        existing = crud_user.get_by_username(db, username=user_in.username)
        if existing:
            raise HTTPException(status_code=400, detail="Username already taken")

    user = crud_user.update(db, db_obj=current_user, obj_in=user_in)
    logger.info(f"User {user.uid} updated profile")
    return user
