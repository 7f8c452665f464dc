import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from adparlay.crud import analytics_event as crud_event
from adparlay.crud import submission as crud_submission
from adparlay.models.analytics_event import AnalyticsEventType
from adparlay.models.form import Form

logger = logging.getLogger(__name__)

RECENT_RESPONSE_DAYS = 7
ALLOWED_RANGES = (7, 30, 90)


def device_from_user_agent(user_agent: Optional[str]) -> str:
    if not user_agent:
        return "Unknown"
    if "Mobile" in user_agent:
        return "Mobile"
    if "Tablet" in user_agent:
        return "Tablet"
    if "Windows" in user_agent:
        return "Windows"
    if "Mac" in user_agent:
        return "Mac"
    if "Linux" in user_agent:
        return "Linux"
    return "Unknown"


def _rate(part: int, whole: int) -> float:
    if not whole:
        return 0.0
    return round(part / whole * 100, 1)


def device_breakdown(user_agents: Iterable[Optional[str]]) -> List[Dict[str, Any]]:
    counts = Counter(device_from_user_agent(ua) for ua in user_agents)
    total = sum(counts.values())
    return [
        {"device": device, "count": count, "percentage": _rate(count, total)}
        for device, count in counts.most_common()
    ]


def _daily_series(days: int, now: datetime, submissions, events) -> List[Dict[str, Any]]:
    start = (now - timedelta(days=days - 1)).date()
    series = {
        start + timedelta(days=offset): {"submissions": 0, "views": 0, "starts": 0, "completes": 0}
        for offset in range(days)
    }
    for submission in submissions:
        bucket = series.get(submission.submitted_at.date())
        if bucket is not None:
            bucket["submissions"] += 1
    keys = {
        AnalyticsEventType.VIEW: "views",
        AnalyticsEventType.START: "starts",
        AnalyticsEventType.COMPLETE: "completes",
    }
    for event in events:
        key = keys.get(event.event_type)
        bucket = series.get(event.timestamp.date())
        if key and bucket is not None:
            bucket[key] += 1
    return [{"day": day, **counts} for day, counts in sorted(series.items())]


def form_summary(db: Session, form: Form, days: int = 30, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Funnel counts, rates, daily series and device mix for one form."""
    now = now or datetime.utcnow()
    window_start = now - timedelta(days=days)

    counts = crud_event.count_by_type(db, form.id)
    views = counts.get(AnalyticsEventType.VIEW, 0)
    starts = counts.get(AnalyticsEventType.START, 0)
    completes = counts.get(AnalyticsEventType.COMPLETE, 0)
    abandons = counts.get(AnalyticsEventType.ABANDON, 0)

    window_submissions = crud_submission.get_submissions_since(db, form.id, window_start)
    recent_cutoff = now - timedelta(days=RECENT_RESPONSE_DAYS)
    recent = len(crud_submission.get_submissions_since(db, form.id, recent_cutoff))

    window_events = crud_event.get_events_since(db, [form.id], window_start)
    scores = [s.lead_score for s in window_submissions if s.lead_score is not None]

    return {
        "form_id": form.id,
        "submission_count": crud_submission.get_submissions_count(db, form.id),
        "total_views": views,
        "total_starts": starts,
        "total_completes": completes,
        "total_abandons": abandons,
        "recent_responses": recent,
        "conversion_rate": _rate(completes, views),
        "completion_rate": _rate(completes, starts),
        "abandon_rate": _rate(abandons, starts),
        "average_lead_score": round(sum(scores) / len(scores), 1) if scores else None,
        "daily_stats": _daily_series(days, now, window_submissions, window_events),
        "device_stats": device_breakdown(s.user_agent for s in window_submissions),
    }


def overview(db: Session, forms: List[Form], days: int = 30, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Per-form performance table plus account-wide totals."""
    now = now or datetime.utcnow()
    window_start = now - timedelta(days=days)

    rows = []
    user_agents: List[Optional[str]] = []
    for form in forms:
        counts = crud_event.count_by_type(db, form.id)
        views = counts.get(AnalyticsEventType.VIEW, 0)
        completes = counts.get(AnalyticsEventType.COMPLETE, 0)
        rows.append({
            "form_id": form.id,
            "title": form.title,
            "submissions": crud_submission.get_submissions_count(db, form.id),
            "views": views,
            "starts": counts.get(AnalyticsEventType.START, 0),
            "completes": completes,
            "abandons": counts.get(AnalyticsEventType.ABANDON, 0),
            "conversion_rate": _rate(completes, views),
        })
        user_agents.extend(s.user_agent for s in crud_submission.get_submissions_since(db, form.id, window_start))

    total_views = sum(r["views"] for r in rows)
    total_completes = sum(r["completes"] for r in rows)
    return {
        "total_forms": len(forms),
        "total_submissions": sum(r["submissions"] for r in rows),
        "total_views": total_views,
        "total_starts": sum(r["starts"] for r in rows),
        "total_completes": total_completes,
        "total_abandons": sum(r["abandons"] for r in rows),
        "conversion_rate": _rate(total_completes, total_views),
        "forms": sorted(rows, key=lambda r: r["submissions"], reverse=True),
        "device_stats": device_breakdown(user_agents),
    }
