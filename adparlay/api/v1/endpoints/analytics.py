from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from adparlay.db.database import get_db
from adparlay.core.deps import get_owned_form, require_premium
from adparlay.crud import form as crud_form
from adparlay.models.form import Form
from adparlay.models.user import User
from adparlay.schemas.analytics import AnalyticsOverview, FormAnalyticsSummary
from adparlay.services import analytics_service, export_service
import io
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


def _check_range(days: int) -> int:
    if days not in analytics_service.ALLOWED_RANGES:
        raise HTTPException(status_code=400, detail="days must be one of 7, 30 or 90")
    return days


@router.get("/forms/{form_id}/analytics", response_model=FormAnalyticsSummary)
def form_analytics(
    db: Session = Depends(get_db),
    form: Form = Depends(get_owned_form),
    days: int = Query(30)
):
    return analytics_service.form_summary(db, form, days=_check_range(days))


@router.get("/analytics/overview", response_model=AnalyticsOverview)
def analytics_overview(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_premium),
    days: int = Query(30)
):
    """Per-form performance across the account (premium)"""
    forms = crud_form.get_multi_by_user(db, user_id=current_user.id, limit=1000)
    return analytics_service.overview(db, forms, days=_check_range(days))


@router.get("/analytics/export")
def export_analytics(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_premium),
    days: int = Query(30),
    format: str = Query("xlsx")
):
    """Download the overview as a workbook or PDF report (premium)"""
    _check_range(days)
    forms = crud_form.get_multi_by_user(db, user_id=current_user.id, limit=1000)
    overview = analytics_service.overview(db, forms, days=days)

    if format == "xlsx":
        content = export_service.analytics_workbook(overview, days)
        media_type = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    elif format == "pdf":
        content = export_service.analytics_pdf(overview, days, owner_name=current_user.full_name or current_user.email)
        media_type = "application/pdf"
    else:
        raise HTTPException(status_code=400, detail="format must be xlsx or pdf")

    filename = export_service.export_filename(format, prefix="adparlay-analytics")
    logger.info(f"Analytics export ({format}) for {current_user.uid}")
    return StreamingResponse(
        io.BytesIO(content),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )
