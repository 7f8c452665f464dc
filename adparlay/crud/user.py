from typing import Optional
from sqlalchemy.orm import Session
from adparlay.crud.base import CRUDBase
from adparlay.models.user import User
from adparlay.models.form import Form
from adparlay.models.submission import FormSubmission
from adparlay.schemas.auth import TokenData
from adparlay.schemas.user import UserUpdate


class CRUDUser(CRUDBase[User, TokenData, UserUpdate]):

    def get_by_uid(self, db: Session, *, uid: str) -> Optional[User]:
        return db.query(User).filter(User.uid == uid).first()

    def get_by_username(self, db: Session, *, username: str) -> Optional[User]:
        return db.query(User).filter(User.username == username).first()

    def create_from_token(self, db: Session, *, token_data: TokenData) -> User:
        db_obj = User(
            uid=token_data.uid,
            email=token_data.email,
            full_name=token_data.name,
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def count_forms(self, db: Session, *, user_id: int) -> int:
        return db.query(Form).filter(Form.user_id == user_id).count()

    def count_leads(self, db: Session, *, user_id: int) -> int:
        return (
            db.query(FormSubmission)
            .join(Form, Form.id == FormSubmission.form_id)
            .filter(Form.user_id == user_id)
            .count()
        )


user = CRUDUser(User)
