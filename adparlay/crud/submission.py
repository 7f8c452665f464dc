from typing import Any, Dict, List, Optional
from datetime import datetime
from sqlalchemy import desc
from sqlalchemy.orm import Session
from adparlay.models.submission import FormSubmission


def create_submission(
    db: Session,
    form_id: str,
    form_data: Dict[str, Any],
    lead_score: int,
    contact_info: Dict[str, str],
    user_agent: Optional[str] = None,
    ip_address: Optional[str] = None,
    session_id: Optional[str] = None,
    submitted_at: Optional[datetime] = None,
) -> FormSubmission:
    """Adds the submission to the session; the caller commits with the form counters."""
    db_submission = FormSubmission(
        form_id=form_id,
        form_data=form_data,
        lead_score=lead_score,
        contact_info=contact_info,
        user_agent=user_agent,
        ip_address=ip_address,
        session_id=session_id,
        submitted_at=submitted_at or datetime.utcnow(),
    )
    db.add(db_submission)
    return db_submission


def get_submission(db: Session, form_id: str, submission_id: str) -> Optional[FormSubmission]:
    return db.query(FormSubmission).filter(
        FormSubmission.id == submission_id, FormSubmission.form_id == form_id
    ).first()


def get_submissions(db: Session, form_id: str, skip: int = 0, limit: int = 100) -> List[FormSubmission]:
    return (
        db.query(FormSubmission)
        .filter(FormSubmission.form_id == form_id)
        .order_by(desc(FormSubmission.submitted_at))
        .offset(skip)
        .limit(limit)
        .all()
    )


def get_all_submissions(db: Session, form_id: str) -> List[FormSubmission]:
    return (
        db.query(FormSubmission)
        .filter(FormSubmission.form_id == form_id)
        .order_by(desc(FormSubmission.submitted_at))
        .all()
    )


def get_submissions_count(db: Session, form_id: str) -> int:
    return db.query(FormSubmission).filter(FormSubmission.form_id == form_id).count()


def get_submissions_since(db: Session, form_id: str, since: datetime) -> List[FormSubmission]:
    return db.query(FormSubmission).filter(
        FormSubmission.form_id == form_id, FormSubmission.submitted_at >= since
    ).all()
