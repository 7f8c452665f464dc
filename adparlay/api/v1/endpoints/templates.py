from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from adparlay.db.database import get_db
from adparlay.core.deps import get_current_user
from adparlay.crud import form as crud_form
from adparlay.models.user import User
from adparlay.schemas.form import FormResponse, FormTemplateSummary
from adparlay.services.form_templates import FORM_TEMPLATES, list_templates, instantiate_template
from adparlay.api.v1.endpoints.forms import ensure_form_quota, serialize_form
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[FormTemplateSummary])
def get_templates(current_user: User = Depends(get_current_user)):
    return list_templates()


@router.post("/{template_key}/forms", response_model=FormResponse, status_code=status.HTTP_201_CREATED)
def create_form_from_template(
    template_key: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Start an unpublished form from a built-in template"""
    if template_key not in FORM_TEMPLATES:
        raise HTTPException(status_code=404, detail="Template not found")
    ensure_form_quota(db, current_user)

    form_data = instantiate_template(template_key)
    form_data["is_published"] = False
    form = crud_form.create_for_user(db, obj_in=form_data, user_id=current_user.id)
    logger.info(f"Form {form.id} created from template {template_key} by {current_user.uid}")
    return serialize_form(form)
