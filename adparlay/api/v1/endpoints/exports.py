from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from adparlay.db.database import get_db
from adparlay.core.deps import get_current_user, get_owned_form
from adparlay.crud import form as crud_form
from adparlay.crud import submission as crud_submission
from adparlay.models.form import Form
from adparlay.models.user import User
from adparlay.schemas.export import SubmissionExportRequest
from adparlay.services import export_service
import io
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _download(content: bytes, media_type: str, filename: str) -> StreamingResponse:
    return StreamingResponse(
        io.BytesIO(content),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.get("/forms/{form_id}/submissions/export")
def export_form_submissions(
    db: Session = Depends(get_db),
    form: Form = Depends(get_owned_form),
    format: str = Query("csv")
):
    """Export one form's submissions as CSV or a single-sheet workbook"""
    submissions = crud_submission.get_all_submissions(db, form.id)
    if format == "csv":
        content = export_service.submissions_csv(form, submissions)
        return _download(content, "text/csv", export_service.export_filename("csv"))
    if format == "xlsx":
        content = export_service.submissions_workbook([(form, submissions)])
        return _download(content, XLSX_MEDIA_TYPE, export_service.export_filename("xlsx"))
    raise HTTPException(status_code=400, detail="format must be csv or xlsx")


@router.post("/exports/submissions")
def export_submissions(
    *,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    export_in: SubmissionExportRequest
):
    """One workbook, one sheet per selected form"""
    if not export_in.form_ids:
        raise HTTPException(status_code=400, detail="Select at least one form")

    selected = []
    for form_id in export_in.form_ids:
        form = crud_form.get_for_user(db, form_id=form_id, user_id=current_user.id)
        if form is None:
            raise HTTPException(status_code=404, detail=f"Form {form_id} not found")
        selected.append((form, crud_submission.get_all_submissions(db, form.id)))

    content = export_service.submissions_workbook(selected)
    logger.info(f"Exported {len(selected)} forms for {current_user.uid}")
    return _download(content, XLSX_MEDIA_TYPE, export_service.export_filename("xlsx"))
