"""Spreadsheet and report exports of submissions and analytics."""
import csv
import io
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple
from xml.sax.saxutils import escape

from openpyxl import Workbook
from openpyxl.styles import Font
from reportlab.lib.colors import black, HexColor
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from adparlay.models.form import Form
from adparlay.models.submission import FormSubmission

logger = logging.getLogger(__name__)

MAX_SHEET_TITLE = 31
INVALID_SHEET_CHARS = set('[]:*?/\\')
BASE_COLUMNS = ["Form Title", "Submission Date", "Submission Time", "User Agent", "IP Address"]


def format_answer(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)


def sheet_title(title: str, taken: Iterable[str] = ()) -> str:
    """Excel sheet names: at most 31 chars, no []:*?/\\, unique within the workbook."""
    cleaned = "".join(c for c in (title or "Form") if c not in INVALID_SHEET_CHARS).strip() or "Form"
    name = cleaned[:MAX_SHEET_TITLE]
    taken = set(taken)
    suffix = 2
    while name in taken:
        tag = f" ({suffix})"
        name = cleaned[:MAX_SHEET_TITLE - len(tag)] + tag
        suffix += 1
    return name


def _question_keys(form: Form, submissions: List[FormSubmission]) -> List[str]:
    """Question ids in form order, then any stray answer keys in first-seen order."""
    keys = [q.get("id") for q in form.questions or [] if q.get("id")]
    for submission in submissions:
        for key in (submission.form_data or {}):
            if key not in keys:
                keys.append(key)
    return keys


def submission_rows(form: Form, submissions: List[FormSubmission]) -> Tuple[List[str], List[List[str]]]:
    keys = _question_keys(form, submissions)
    header = BASE_COLUMNS + [f"Question: {key}" for key in keys]
    rows = []
    for submission in submissions:
        submitted_at = submission.submitted_at
        answers = submission.form_data or {}
        rows.append([
            form.title,
            submitted_at.strftime("%Y-%m-%d") if submitted_at else "",
            submitted_at.strftime("%H:%M:%S") if submitted_at else "",
            submission.user_agent or "",
            submission.ip_address or "",
        ] + [format_answer(answers.get(key)) for key in keys])
    return header, rows


def submissions_csv(form: Form, submissions: List[FormSubmission]) -> bytes:
    header, rows = submission_rows(form, submissions)
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(header)
    writer.writerows(rows)
    return output.getvalue().encode("utf-8")


def _write_sheet(sheet, header: List[str], rows: List[List[Any]]) -> None:
    sheet.append(header)
    for cell in sheet[1]:
        cell.font = Font(bold=True)
    for row in rows:
        sheet.append(row)


def _workbook_bytes(workbook: Workbook) -> bytes:
    buffer = io.BytesIO()
    workbook.save(buffer)
    buffer.seek(0)
    return buffer.getvalue()


def submissions_workbook(forms_with_submissions: List[Tuple[Form, List[FormSubmission]]]) -> bytes:
    """One sheet per form."""
    workbook = Workbook()
    workbook.remove(workbook.active)
    taken: List[str] = []
    for form, submissions in forms_with_submissions:
        title = sheet_title(form.title, taken)
        taken.append(title)
        header, rows = submission_rows(form, submissions)
        _write_sheet(workbook.create_sheet(title=title), header, rows)
    if not taken:
        workbook.create_sheet(title="Submissions")
    return _workbook_bytes(workbook)


def analytics_workbook(overview: Dict[str, Any], days: int) -> bytes:
    workbook = Workbook()
    summary = workbook.active
    summary.title = "Summary"
    _write_sheet(summary, ["Metric", "Value"], [
        ["Date Range (days)", days],
        ["Total Forms", overview["total_forms"]],
        ["Total Submissions", overview["total_submissions"]],
        ["Total Views", overview["total_views"]],
        ["Total Starts", overview["total_starts"]],
        ["Total Completes", overview["total_completes"]],
        ["Total Abandons", overview["total_abandons"]],
        ["Conversion Rate (%)", overview["conversion_rate"]],
    ])

    _write_sheet(
        workbook.create_sheet(title="Form Performance"),
        ["Form", "Submissions", "Views", "Starts", "Completes", "Abandons", "Conversion Rate (%)"],
        [
            [row["title"], row["submissions"], row["views"], row["starts"], row["completes"], row["abandons"], row["conversion_rate"]]
            for row in overview["forms"]
        ],
    )

    _write_sheet(
        workbook.create_sheet(title="Device Stats"),
        ["Device", "Count", "Percentage (%)"],
        [[row["device"], row["count"], row["percentage"]] for row in overview["device_stats"]],
    )
    return _workbook_bytes(workbook)


def analytics_pdf(overview: Dict[str, Any], days: int, owner_name: Optional[str] = None) -> bytes:
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, topMargin=0.75*inch, bottomMargin=0.75*inch)

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'ReportTitle',
        parent=styles['Title'],
        fontSize=20,
        spaceAfter=12,
        alignment=TA_CENTER,
        textColor=black
    )

    content = [Paragraph("Form Analytics Report", title_style)]
    subtitle = f"Last {days} days, generated {datetime.utcnow().strftime('%B %d, %Y')}"
    if owner_name:
        subtitle = f"{escape(owner_name)} - {subtitle}"
    content.append(Paragraph(subtitle, styles['Normal']))
    content.append(Spacer(1, 20))

    content.append(Paragraph("Summary", styles['Heading2']))
    for label, key in [
        ("Total forms", "total_forms"),
        ("Total submissions", "total_submissions"),
        ("Total views", "total_views"),
        ("Completed", "total_completes"),
        ("Abandoned", "total_abandons"),
    ]:
        content.append(Paragraph(f"{label}: <b>{overview[key]}</b>", styles['Normal']))
    content.append(Paragraph(f"Conversion rate: <b>{overview['conversion_rate']}%</b>", styles['Normal']))
    content.append(Spacer(1, 20))

    if overview["forms"]:
        content.append(Paragraph("Form Performance", styles['Heading2']))
        data = [["Form", "Submissions", "Views", "Completes", "Conversion"]]
        for row in overview["forms"]:
            data.append([row["title"][:40], row["submissions"], row["views"], row["completes"], f"{row['conversion_rate']}%"])
        table = Table(data, repeatRows=1)
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), HexColor('#1f2937')),
            ('TEXTCOLOR', (0, 0), (-1, 0), HexColor('#ffffff')),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('GRID', (0, 0), (-1, -1), 0.5, HexColor('#d1d5db')),
        ]))
        content.append(table)

    doc.build(content)
    buffer.seek(0)
    return buffer.getvalue()


def export_filename(extension: str, prefix: str = "adparlay-export") -> str:
    return f"{prefix}-{datetime.utcnow().strftime('%Y-%m-%d')}.{extension}"
