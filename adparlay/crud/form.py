from typing import Any, Dict, List, Optional, Union
from datetime import datetime
from sqlalchemy import desc
from sqlalchemy.orm import Session
from adparlay.core.config import settings
from adparlay.crud.base import CRUDBase
from adparlay.models.form import Form
from adparlay.schemas.form import FormCreate, FormUpdate


def share_url(form_id: str) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/form/{form_id}"


def short_share_url(form_id: str) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/f/{form_id}"


class CRUDForm(CRUDBase[Form, FormCreate, FormUpdate]):

    def get_for_user(self, db: Session, *, form_id: str, user_id: int) -> Optional[Form]:
        return db.query(Form).filter(Form.id == form_id, Form.user_id == user_id).first()

    def get_multi_by_user(self, db: Session, *, user_id: int, skip: int = 0, limit: int = 100) -> List[Form]:
        return (
            db.query(Form)
            .filter(Form.user_id == user_id)
            .order_by(desc(Form.updated_at), desc(Form.created_at))
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_by_user(self, db: Session, *, user_id: int) -> int:
        return db.query(Form).filter(Form.user_id == user_id).count()

    def get_published(self, db: Session, *, form_id: str) -> Optional[Form]:
        return db.query(Form).filter(Form.id == form_id, Form.is_published == True).first()

    def get_published_by_user(self, db: Session, *, user_id: int) -> List[Form]:
        return (
            db.query(Form)
            .filter(Form.user_id == user_id, Form.is_published == True)
            .order_by(desc(Form.updated_at))
            .all()
        )

    def create_for_user(self, db: Session, *, obj_in: Union[FormCreate, Dict[str, Any]], user_id: int) -> Form:
        form_data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump(by_alias=True)
        if not form_data.get("form_name"):
            form_data["form_name"] = form_data.get("title")

        db_obj = Form(**form_data, user_id=user_id)
        db.add(db_obj)
        db.flush()
        if db_obj.is_published:
            db_obj.share_url = share_url(db_obj.id)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def update_form(self, db: Session, *, db_obj: Form, obj_in: Union[FormUpdate, Dict[str, Any]]) -> Form:
        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            update_data = obj_in.model_dump(exclude_unset=True, by_alias=True)
        form = self.update(db, db_obj=db_obj, obj_in=update_data)
        if form.is_published and not form.share_url:
            form.share_url = share_url(form.id)
            db.commit()
            db.refresh(form)
        return form

    def set_structure(self, db: Session, *, db_obj: Form, blocks: List[Dict[str, Any]], questions: List[Dict[str, Any]]) -> Form:
        # JSON columns are replaced wholesale so the change is tracked
        db_obj.blocks = list(blocks)
        db_obj.questions = list(questions)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def set_published(self, db: Session, *, db_obj: Form, is_published: bool) -> Form:
        db_obj.is_published = is_published
        if is_published:
            db_obj.share_url = share_url(db_obj.id)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def record_response(self, db: Session, *, db_obj: Form, when: datetime) -> Form:
        db_obj.responses_count = (db_obj.responses_count or 0) + 1
        db_obj.last_response_at = when
        return db_obj


form = CRUDForm(Form)
