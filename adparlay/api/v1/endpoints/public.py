from typing import List
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from adparlay.db.database import get_db
from adparlay.crud import analytics_event as crud_event
from adparlay.crud import form as crud_form
from adparlay.crud import user as crud_user
from adparlay.models.analytics_event import AnalyticsEventType
from adparlay.models.form import Form
from adparlay.schemas.analytics import EventCreate, EventResponse, EventType
from adparlay.schemas.form import PublicFormResponse
from adparlay.schemas.runtime import NavigateRequest, NavigateResponse, NavigationAction
from adparlay.schemas.submission import SubmissionCreate, SubmissionCreated
from adparlay.services.form_runtime import FormNavigator, NavigationError
from adparlay.api.v1.endpoints.submissions import client_ip, store_submission
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


def get_published_form(form_id: str, db: Session = Depends(get_db)) -> Form:
    form = crud_form.get_published(db, form_id=form_id)
    if form is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Form not found")
    return form


@router.get("/forms/{form_id}", response_model=PublicFormResponse)
def get_public_form(
    request: Request,
    db: Session = Depends(get_db),
    form: Form = Depends(get_published_form)
):
    """Published form for respondents; every fetch counts as a view"""
    try:
        crud_event.create_event(
            db,
            form_id=form.id,
            event_type=AnalyticsEventType.VIEW,
            ip_address=client_ip(request),
            user_agent=request.headers.get("user-agent"),
        )
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to record view for form {form.id}: {str(e)}")
    return form


@router.post("/forms/{form_id}/navigate", response_model=NavigateResponse)
def navigate_form(
    *,
    form: Form = Depends(get_published_form),
    step: NavigateRequest
):
    """Advance a respondent's position by one step; the state round-trips through the client"""
    blocks = form.blocks or []
    questions = form.questions or []

    if step.action == NavigationAction.START:
        navigator = FormNavigator(blocks, questions)
    else:
        if step.state is None:
            raise HTTPException(status_code=400, detail="state is required after start")
        navigator = FormNavigator(blocks, questions, state=step.state.model_dump())
        try:
            if step.action == NavigationAction.ANSWER:
                if not step.question_id:
                    raise HTTPException(status_code=400, detail="question_id is required to answer")
                navigator.answer(step.question_id, step.value)
            elif step.action == NavigationAction.NEXT:
                navigator.next()
            else:
                navigator.previous()
        except NavigationError as e:
            raise HTTPException(status_code=400, detail=str(e))

    block = navigator.current_block()
    question = navigator.current_question()
    if navigator.completed:
        missing = FormNavigator.replay(blocks, questions, navigator.answers).missing_required()
    else:
        missing = navigator.missing_in_block()

    return {
        "state": navigator.to_state(),
        "current_block_id": block.get("id") if block else None,
        "current_block_title": block.get("title") if block else None,
        "current_question_id": question.get("id") if question else None,
        "completed": navigator.completed,
        "block_complete": navigator.block_complete(),
        "missing_required": missing,
    }


@router.post("/forms/{form_id}/events", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def track_event(
    *,
    request: Request,
    db: Session = Depends(get_db),
    form: Form = Depends(get_published_form),
    event_in: EventCreate
):
    if event_in.event_type == EventType.COMPLETE:
        raise HTTPException(status_code=400, detail="Completions are recorded by submitting the form")

    event = crud_event.create_event(
        db,
        form_id=form.id,
        event_type=AnalyticsEventType(event_in.event_type.value),
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent"),
        session_id=event_in.session_id,
        metadata=event_in.metadata,
    )
    return event


@router.post("/forms/{form_id}/submissions", response_model=SubmissionCreated, status_code=status.HTTP_201_CREATED)
def submit_form(
    *,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    form: Form = Depends(get_published_form),
    submission_in: SubmissionCreate
):
    return store_submission(db, form, submission_in, request, background_tasks)


@router.get("/users/{username}/forms", response_model=List[PublicFormResponse])
def get_user_public_forms(username: str, db: Session = Depends(get_db)):
    user = crud_user.get_by_username(db, username=username)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return crud_form.get_published_by_user(db, user_id=user.id)
