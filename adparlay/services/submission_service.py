import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from adparlay.crud import form as crud_form
from adparlay.crud import user as crud_user
from adparlay.crud import analytics_event as crud_event
from adparlay.crud import submission as crud_submission
from adparlay.models.analytics_event import AnalyticsEventType
from adparlay.models.form import Form
from adparlay.models.submission import FormSubmission
from adparlay.services.form_runtime import FormNavigator
from adparlay.services.lead_scoring import score_submission

logger = logging.getLogger(__name__)


class MissingAnswersError(Exception):
    def __init__(self, missing: List[str]):
        self.missing = missing
        super().__init__(f"Required questions not answered: {', '.join(missing)}")


class LeadLimitReached(Exception):
    """The form owner's plan does not allow more submissions."""


def capture_submission(
    db: Session,
    form: Form,
    form_data: Dict[str, Any],
    session_id: Optional[str] = None,
    user_agent: Optional[str] = None,
    ip_address: Optional[str] = None,
) -> FormSubmission:
    """
    Validate and store one respondent's answers.

    Required questions are checked along the path the answers actually take
    through the form's conditional logic. The owner's lead cap is enforced,
    the form's response counters are bumped and a ``complete`` event is
    recorded in the same transaction.
    """
    navigator = FormNavigator.replay(form.blocks or [], form.questions or [], form_data)
    missing = navigator.missing_required()
    if missing:
        raise MissingAnswersError(missing)

    owner = form.owner
    if owner is not None and crud_user.count_leads(db, user_id=owner.id) >= owner.max_leads:
        logger.info(f"Lead limit reached for user {owner.uid} on form {form.id}")
        raise LeadLimitReached(f"This form has reached its response limit of {owner.max_leads}")

    contact, lead_score = score_submission(form_data)
    now = datetime.utcnow()

    submission = crud_submission.create_submission(
        db,
        form_id=form.id,
        form_data=form_data,
        lead_score=lead_score,
        contact_info=contact,
        user_agent=user_agent,
        ip_address=ip_address,
        session_id=session_id,
        submitted_at=now,
    )
    crud_form.record_response(db, db_obj=form, when=now)
    crud_event.create_event(
        db,
        form_id=form.id,
        event_type=AnalyticsEventType.COMPLETE,
        ip_address=ip_address,
        user_agent=user_agent,
        session_id=session_id,
        commit=False,
    )
    db.commit()
    db.refresh(submission)

    logger.info(f"Submission {submission.id} stored for form {form.id} (lead score {lead_score})")
    return submission
