from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from adparlay.db.database import get_db
from adparlay.core.deps import get_current_user
from adparlay.crud import draft as crud_draft
from adparlay.crud import form as crud_form
from adparlay.models.user import User
from adparlay.schemas.draft import DraftPayload, DraftResponse

router = APIRouter()


def _form_key(db: Session, user: User, form_id: Optional[str]) -> str:
    if not form_id:
        return crud_draft.NEW_FORM_KEY
    if crud_form.get_for_user(db, form_id=form_id, user_id=user.id) is None:
        raise HTTPException(status_code=404, detail="Form not found")
    return form_id


@router.get("", response_model=DraftResponse)
def get_draft(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    form_id: Optional[str] = Query(None)
):
    draft = crud_draft.get_draft(db, current_user.id, _form_key(db, current_user, form_id))
    if draft is None:
        raise HTTPException(status_code=404, detail="No draft saved")
    return draft


@router.put("", response_model=DraftResponse)
def save_draft(
    *,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    form_id: Optional[str] = Query(None),
    payload: DraftPayload
):
    """Autosave the builder state; one draft per form (or for the unsaved new form)"""
    form_key = _form_key(db, current_user, form_id)
    return crud_draft.save_draft(db, current_user.id, payload.model_dump(), form_key)


@router.delete("")
def delete_draft(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    form_id: Optional[str] = Query(None)
):
    if not crud_draft.delete_draft(db, current_user.id, _form_key(db, current_user, form_id)):
        raise HTTPException(status_code=404, detail="No draft saved")
    return {"message": "Draft discarded"}
