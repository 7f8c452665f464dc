from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from adparlay.db.database import get_db
from adparlay.core.deps import get_current_user, get_owned_form
from adparlay.crud import form as crud_form
from adparlay.crud.form import short_share_url
from adparlay.models.form import Form
from adparlay.models.user import User
from adparlay.schemas.form import (
    FormCreate,
    FormUpdate,
    FormPublish,
    FormResponse,
    FormListResponse,
    FormValidationResponse,
    BlockCreate,
    BlockOrder,
    QuestionCreate,
    QuestionMove,
    QuestionTypeChange,
    LogicRuleUpdate,
)
from adparlay.services import form_builder
from adparlay.services.form_builder import FormStructureError
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


def serialize_form(form: Form) -> FormResponse:
    response = FormResponse.model_validate(form)
    if form.is_published:
        response.short_share_url = short_share_url(form.id)
    return response


def _structure_error(e: FormStructureError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"message": "Invalid form structure", "issues": e.issues},
    )


def ensure_form_quota(db: Session, user: User) -> None:
    if crud_form.count_by_user(db, user_id=user.id) >= user.max_forms:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Form limit reached ({user.max_forms}). Upgrade to premium to create more forms."
        )


def _save_structure(db: Session, form: Form, blocks, questions) -> FormResponse:
    try:
        form_builder.ensure_valid(blocks, questions)
    except FormStructureError as e:
        raise _structure_error(e)
    form = crud_form.set_structure(db, db_obj=form, blocks=blocks, questions=questions)
    return serialize_form(form)


@router.post("", response_model=FormResponse, status_code=status.HTTP_201_CREATED)
def create_form(
    *,
    db: Session = Depends(get_db),
    form_in: FormCreate,
    current_user: User = Depends(get_current_user)
):
    """Create a new form"""
    ensure_form_quota(db, current_user)

    form_data = form_in.model_dump(by_alias=True)
    try:
        form_builder.ensure_valid(form_data["blocks"], form_data["questions"])
    except FormStructureError as e:
        raise _structure_error(e)

    form = crud_form.create_for_user(db, obj_in=form_data, user_id=current_user.id)
    logger.info(f"Form created: {form.id} by {current_user.uid}")
    return serialize_form(form)


@router.get("", response_model=FormListResponse)
def list_forms(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500)
):
    """List the caller's forms, most recently updated first"""
    forms = crud_form.get_multi_by_user(db, user_id=current_user.id, skip=skip, limit=limit)
    total = crud_form.count_by_user(db, user_id=current_user.id)
    return {"items": [serialize_form(form) for form in forms], "total": total}


@router.get("/{form_id}", response_model=FormResponse)
def get_form(form: Form = Depends(get_owned_form)):
    return serialize_form(form)


@router.put("/{form_id}", response_model=FormResponse)
def update_form(
    *,
    db: Session = Depends(get_db),
    form: Form = Depends(get_owned_form),
    form_in: FormUpdate
):
    update_data = {k: v for k, v in form_in.model_dump(exclude_unset=True, by_alias=True).items() if v is not None}
    blocks = update_data.get("blocks", form.blocks or [])
    questions = update_data.get("questions", form.questions or [])
    if "blocks" in update_data or "questions" in update_data:
        try:
            form_builder.ensure_valid(blocks, questions)
        except FormStructureError as e:
            raise _structure_error(e)

    form = crud_form.update_form(db, db_obj=form, obj_in=update_data)
    logger.info(f"Form updated: {form.id}")
    return serialize_form(form)


@router.delete("/{form_id}")
def delete_form(
    db: Session = Depends(get_db),
    form: Form = Depends(get_owned_form)
):
    form_id = form.id
    db.delete(form)
    db.commit()
    logger.info(f"Form deleted: {form_id}")
    return {"message": "Form deleted successfully"}


@router.patch("/{form_id}/publish", response_model=FormResponse)
def publish_form(
    *,
    db: Session = Depends(get_db),
    form: Form = Depends(get_owned_form),
    publish_data: FormPublish
):
    """Publish or unpublish a form"""
    form = crud_form.set_published(db, db_obj=form, is_published=publish_data.is_published)
    logger.info(f"Form {form.id} {'published' if form.is_published else 'unpublished'}")
    return serialize_form(form)


@router.post("/{form_id}/duplicate", response_model=FormResponse, status_code=status.HTTP_201_CREATED)
def duplicate_form(
    db: Session = Depends(get_db),
    form: Form = Depends(get_owned_form),
    current_user: User = Depends(get_current_user)
):
    ensure_form_quota(db, current_user)

    blocks, questions = form_builder.duplicate_structure(form.blocks or [], form.questions or [])
    copy = crud_form.create_for_user(db, obj_in={
        "title": f"{form.title} (Copy)",
        "form_name": f"{form.form_name or form.title} (Copy)",
        "blocks": blocks,
        "questions": questions,
        "media": dict(form.media or {}),
        "form_style": dict(form.form_style or {}),
        "is_published": False,
    }, user_id=current_user.id)
    logger.info(f"Form {form.id} duplicated as {copy.id}")
    return serialize_form(copy)


# Builder operations

@router.post("/{form_id}/blocks", response_model=FormResponse, status_code=status.HTTP_201_CREATED)
def add_block(
    *,
    db: Session = Depends(get_db),
    form: Form = Depends(get_owned_form),
    block_in: BlockCreate
):
    """Append a block together with its default question"""
    blocks, questions, _ = form_builder.add_block(form.blocks or [], form.questions or [], block_in.title)
    return _save_structure(db, form, blocks, questions)


@router.delete("/{form_id}/blocks/{block_id}", response_model=FormResponse)
def remove_block(
    block_id: str,
    db: Session = Depends(get_db),
    form: Form = Depends(get_owned_form)
):
    try:
        blocks, questions = form_builder.remove_block(form.blocks or [], form.questions or [], block_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Block not found")
    return _save_structure(db, form, blocks, questions)


@router.put("/{form_id}/blocks/order", response_model=FormResponse)
def reorder_blocks(
    *,
    db: Session = Depends(get_db),
    form: Form = Depends(get_owned_form),
    order: BlockOrder
):
    try:
        blocks = form_builder.reorder_blocks(form.blocks or [], order.block_ids)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _save_structure(db, form, blocks, form.questions or [])


@router.post("/{form_id}/blocks/{block_id}/questions", response_model=FormResponse, status_code=status.HTTP_201_CREATED)
def add_question(
    *,
    block_id: str,
    db: Session = Depends(get_db),
    form: Form = Depends(get_owned_form),
    question_in: QuestionCreate
):
    try:
        questions, _ = form_builder.add_question(
            form.blocks or [],
            form.questions or [],
            block_id,
            type=question_in.type.value,
            label=question_in.label,
            helpText=question_in.help_text,
            required=question_in.required,
            options=list(question_in.options) or None,
        )
    except KeyError:
        raise HTTPException(status_code=404, detail="Block not found")
    return _save_structure(db, form, form.blocks or [], questions)


@router.delete("/{form_id}/questions/{question_id}", response_model=FormResponse)
def remove_question(
    question_id: str,
    db: Session = Depends(get_db),
    form: Form = Depends(get_owned_form)
):
    try:
        questions = form_builder.remove_question(form.questions or [], question_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Question not found")
    return _save_structure(db, form, form.blocks or [], questions)


@router.put("/{form_id}/questions/{question_id}/move", response_model=FormResponse)
def move_question(
    *,
    question_id: str,
    db: Session = Depends(get_db),
    form: Form = Depends(get_owned_form),
    move: QuestionMove
):
    try:
        questions = form_builder.move_question(
            form.blocks or [], form.questions or [], question_id, move.block_id, move.position
        )
    except KeyError as e:
        raise HTTPException(status_code=404, detail=f"Not found: {e.args[0]}")
    return _save_structure(db, form, form.blocks or [], questions)


@router.patch("/{form_id}/questions/{question_id}/type", response_model=FormResponse)
def change_question_type(
    *,
    question_id: str,
    db: Session = Depends(get_db),
    form: Form = Depends(get_owned_form),
    change: QuestionTypeChange
):
    try:
        questions = form_builder.change_question_type(form.questions or [], question_id, change.type.value)
    except KeyError:
        raise HTTPException(status_code=404, detail="Question not found")
    return _save_structure(db, form, form.blocks or [], questions)


@router.put("/{form_id}/questions/{question_id}/logic", response_model=FormResponse)
def set_question_logic(
    *,
    question_id: str,
    db: Session = Depends(get_db),
    form: Form = Depends(get_owned_form),
    rule: LogicRuleUpdate
):
    """Set, replace or (with an empty target) clear the rule for one option"""
    try:
        questions = form_builder.set_conditional_logic(
            form.questions or [], question_id, rule.option, rule.target_block_id, rule.action.value
        )
    except KeyError:
        raise HTTPException(status_code=404, detail="Question not found")
    return _save_structure(db, form, form.blocks or [], questions)


@router.get("/{form_id}/validate", response_model=FormValidationResponse)
def validate_form(form: Form = Depends(get_owned_form)):
    issues = form_builder.validate_structure(form.blocks or [], form.questions or [])
    return {"valid": not issues, "issues": issues}
