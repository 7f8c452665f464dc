from typing import Any, Dict, Optional
from sqlalchemy.orm import Session
from adparlay.models.form import FormDraft

NEW_FORM_KEY = "new"


def get_draft(db: Session, user_id: int, form_key: str = NEW_FORM_KEY) -> Optional[FormDraft]:
    return db.query(FormDraft).filter(
        FormDraft.user_id == user_id, FormDraft.form_key == form_key
    ).first()


def save_draft(db: Session, user_id: int, payload: Dict[str, Any], form_key: str = NEW_FORM_KEY) -> FormDraft:
    draft = get_draft(db, user_id, form_key)
    if draft is None:
        draft = FormDraft(user_id=user_id, form_key=form_key, payload=payload)
        db.add(draft)
    else:
        draft.payload = payload
    db.commit()
    db.refresh(draft)
    return draft


def delete_draft(db: Session, user_id: int, form_key: str = NEW_FORM_KEY) -> bool:
    draft = get_draft(db, user_id, form_key)
    if draft is None:
        return False
    db.delete(draft)
    db.commit()
    return True
