import math
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session
from adparlay.db.database import get_db
from adparlay.core.deps import get_owned_form
from adparlay.crud import submission as crud_submission
from adparlay.models.form import Form
from adparlay.schemas.submission import (
    SubmissionCreate,
    SubmissionCreated,
    SubmissionListResponse,
    SubmissionResponse,
)
from adparlay.services.submission_hooks import process_new_submission
from adparlay.services.submission_service import (
    LeadLimitReached,
    MissingAnswersError,
    capture_submission,
)
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


def client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def store_submission(
    db: Session,
    form: Form,
    submission_in: SubmissionCreate,
    request: Request,
    background_tasks: BackgroundTasks,
) -> SubmissionCreated:
    try:
        submission = capture_submission(
            db,
            form,
            submission_in.form_data,
            session_id=submission_in.session_id,
            user_agent=request.headers.get("user-agent"),
            ip_address=client_ip(request),
        )
    except MissingAnswersError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": "Required questions not answered", "missing": e.missing},
        )
    except LeadLimitReached as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

    background_tasks.add_task(process_new_submission, form.id, submission.id)
    return SubmissionCreated(id=submission.id, lead_score=submission.lead_score)


@router.get("/{form_id}/submissions", response_model=SubmissionListResponse)
def list_submissions(
    db: Session = Depends(get_db),
    form: Form = Depends(get_owned_form),
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100)
):
    """Submissions of one form, newest first"""
    skip = (page - 1) * size
    items = crud_submission.get_submissions(db, form.id, skip=skip, limit=size)
    total = crud_submission.get_submissions_count(db, form.id)
    return {
        "items": items,
        "total": total,
        "page": page,
        "size": size,
        "pages": math.ceil(total / size) if total > 0 else 0,
    }


@router.get("/{form_id}/submissions/{submission_id}", response_model=SubmissionResponse)
def get_submission(
    submission_id: str,
    db: Session = Depends(get_db),
    form: Form = Depends(get_owned_form)
):
    submission = crud_submission.get_submission(db, form.id, submission_id)
    if not submission:
        raise HTTPException(status_code=404, detail="Submission not found")
    return submission


@router.post("/{form_id}/submissions", response_model=SubmissionCreated, status_code=status.HTTP_201_CREATED)
def create_submission(
    *,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    form: Form = Depends(get_owned_form),
    submission_in: SubmissionCreate
):
    """Capture a submission on behalf of the form owner (e.g. imported leads)"""
    return store_submission(db, form, submission_in, request, background_tasks)
