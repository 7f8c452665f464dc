from typing import Any, Dict, List, Optional
from datetime import datetime
from sqlalchemy import func
from sqlalchemy.orm import Session
from adparlay.models.analytics_event import AnalyticsEvent, AnalyticsEventType


def create_event(
    db: Session,
    form_id: str,
    event_type: AnalyticsEventType,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
    session_id: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
    commit: bool = True,
) -> AnalyticsEvent:
    db_event = AnalyticsEvent(
        form_id=form_id,
        event_type=event_type,
        ip_address=ip_address,
        user_agent=user_agent,
        session_id=session_id,
        event_metadata=metadata,
        timestamp=datetime.utcnow(),
    )
    db.add(db_event)
    if commit:
        db.commit()
        db.refresh(db_event)
    return db_event


def count_by_type(db: Session, form_id: str) -> Dict[AnalyticsEventType, int]:
    rows = (
        db.query(AnalyticsEvent.event_type, func.count(AnalyticsEvent.id))
        .filter(AnalyticsEvent.form_id == form_id)
        .group_by(AnalyticsEvent.event_type)
        .all()
    )
    return {event_type: count for event_type, count in rows}


def get_events_since(db: Session, form_ids: List[str], since: datetime) -> List[AnalyticsEvent]:
    if not form_ids:
        return []
    return db.query(AnalyticsEvent).filter(
        AnalyticsEvent.form_id.in_(form_ids), AnalyticsEvent.timestamp >= since
    ).all()
