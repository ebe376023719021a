"""Multi-sheet Excel export of learners needing attention."""

import io
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import openpyxl
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet
import structlog

from intervention_service.analytics.aggregation import percentage
from intervention_service.models.analysis import AnalysisResult
from intervention_service.models.learner import AtRiskLearner, RiskLevel
from intervention_service.reports.directory import LearnerDirectory
from intervention_service.reports.outreach import recommended_action
from intervention_service.utils.formatting import course_abbreviation, unique_sheet_name

logger = structlog.get_logger()

SUMMARY_SHEET = "Summary"
COURSE_SUMMARY_SHEET = "Course Summary"
ALL_LEARNERS_SHEET = "All Learners Need Attention"

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


COURSE_SUMMARY_COLUMNS = [
    "Course Name", "Total Learners", "At Risk", "Not Started", "Needs Attention Total",
    "Attention Percentage", "In Progress", "Completed",
]

ATTENTION_COLUMNS = [
    "Email", "First Name", "Last Name", "Full Name", "Slack ID", "Course Name",
    "Status Category", "Current Week", "Progress Percentage", "Risk Level", "Week Status",
    "Last Activity", "Last Completed Module", "Next Action", "Weeks Behind", "Recommended Action",
]

COURSE_SHEET_COLUMNS = [
    "Email", "First Name", "Last Name", "Full Name", "Slack ID", "Status Category",
    "Current Week", "Progress Percentage", "Risk Level", "Week Status", "Last Activity",
    "Weeks Behind", "Recommended Action",
]


def attention_workbook_filename(report_date: date) -> str:
    return f"learners-needing-attention-{report_date.isoformat()}.xlsx"


def build_attention_workbook(
    result: AnalysisResult,
    directory: Optional[LearnerDirectory] = None,
    report_date: Optional[date] = None
) -> bytes:
    """Build the attention workbook and return it as xlsx bytes.

    Sheets: Summary, Course Summary, All Learners Need Attention, then one
    sheet per course named by its abbreviation. At-risk rows are left out
    while the grace period is active.
    """
    directory = directory or LearnerDirectory()
    report_date = report_date or date.today()
    listed = [] if result.is_grace_period else list(result.at_risk_learners)

    wb = openpyxl.Workbook()
    _set_workbook_properties(wb, report_date)

    summary = wb.active
    summary.title = SUMMARY_SHEET
    _write_rows(summary, _summary_rows(result, directory, report_date), ["Metric", "Value"])

    course_rows = _course_summary_rows(result)
    _write_rows(wb.create_sheet(COURSE_SUMMARY_SHEET), course_rows, COURSE_SUMMARY_COLUMNS)

    attention_rows = [_learner_row(learner, directory, include_course=True) for learner in listed]
    _write_rows(wb.create_sheet(ALL_LEARNERS_SHEET), attention_rows, ATTENTION_COLUMNS)

    used = {SUMMARY_SHEET, COURSE_SUMMARY_SHEET, ALL_LEARNERS_SHEET}
    for course_name, rows in _course_groups(result, listed, directory).items():
        sheet_name = unique_sheet_name(course_abbreviation(course_name), used)
        used.add(sheet_name)
        _write_rows(wb.create_sheet(sheet_name), rows, COURSE_SHEET_COLUMNS)

    buffer = io.BytesIO()
    wb.save(buffer)

    logger.info(
        "Attention workbook built",
        sheets=len(wb.sheetnames),
        learners=len(attention_rows),
        grace_period=result.is_grace_period
    )
    return buffer.getvalue()


def _summary_rows(result: AnalysisResult, directory: LearnerDirectory, report_date: date) -> List[Dict[str, Any]]:
    at_risk = result.at_risk_learners
    actionable = len({learner.identity for learner in at_risk})
    with_contact = len({
        learner.identity for learner in at_risk if directory.has_contact(learner.email)
    })

    def level_count(level: RiskLevel) -> int:
        return sum(1 for learner in at_risk if learner.risk_level == level)

    actionable_label = "Actionable Learners (1-3 weeks behind)"
    if result.is_grace_period:
        actionable_label += " (informational, grace period)"

    metrics = [
        ("Total Unique Learners", result.total_learners),
        (actionable_label, actionable),
        ("- Urgent (3 weeks behind)", level_count(RiskLevel.HIGH)),
        ("- Check-in (2 weeks behind)", level_count(RiskLevel.MEDIUM)),
        ("- Nudge (1 week behind)", level_count(RiskLevel.LOW)),
        ("Learner Directory Loaded", "Yes" if len(directory) else "No"),
        ("Directory Entries", len(directory)),
        ("At-Risk Learners with Contact Info", f"{with_contact}/{actionable}"),
        ("Contact Info Coverage", f"{percentage(with_contact, actionable)}%"),
        ("Intervention Success Rate Potential", f"{percentage(actionable, result.total_learners)}%"),
        ("Total Courses", len(result.course_stats)),
        ("Current Program Week", result.current_week),
        ("Grace Period Active", "Yes" if result.is_grace_period else "No"),
        ("Report Generated", report_date.isoformat()),
    ]
    return [{"Metric": metric, "Value": value} for metric, value in metrics]


def _course_summary_rows(result: AnalysisResult) -> List[Dict[str, Any]]:
    rows = []
    for course in result.course_stats:
        needs_attention = course.at_risk + course.not_started
        rows.append({
            "Course Name": course.course_name,
            "Total Learners": course.total_learners,
            "At Risk": course.at_risk,
            "Not Started": course.not_started,
            "Needs Attention Total": needs_attention,
            "Attention Percentage": f"{percentage(needs_attention, course.total_learners)}%",
            "In Progress": course.in_progress,
            "Completed": course.completed,
        })
    return rows


def _learner_row(learner: AtRiskLearner, directory: LearnerDirectory, include_course: bool) -> Dict[str, Any]:
    contact = directory.contact_for(learner.email)
    row = {
        "Email": learner.email,
        "First Name": contact.first_name,
        "Last Name": contact.last_name,
        "Full Name": contact.full_name,
        "Slack ID": contact.slack_id,
        "Course Name": learner.course_name,
        "Status Category": "At Risk",
        "Current Week": learner.current_week,
        "Progress Percentage": f"{learner.week_percentage:g}%",
        "Risk Level": learner.risk_level.value,
        "Week Status": learner.week_status,
        "Last Activity": learner.last_activity,
        "Last Completed Module": learner.last_completed_module,
        "Next Action": learner.next_action,
        "Weeks Behind": learner.weeks_behind,
        "Recommended Action": recommended_action(learner.risk_level),
    }
    if not include_course:
        row.pop("Course Name")
    return row


def _course_groups(
    result: AnalysisResult,
    listed: List[AtRiskLearner],
    directory: LearnerDirectory
) -> Dict[str, List[Dict[str, Any]]]:
    groups: Dict[str, List[Dict[str, Any]]] = {}
    for learner in listed:
        groups.setdefault(learner.course_name, []).append(
            _learner_row(learner, directory, include_course=False)
        )

    # one placeholder line per course summarizing learners who never started
    for course in result.course_stats:
        if course.not_started > 0:
            groups.setdefault(course.course_name, []).append({
                "Email": f"{course.not_started} learners not started",
                "Status Category": "Not Started",
                "Current Week": "N/A",
                "Progress Percentage": "0%",
                "Risk Level": "N/A",
                "Week Status": "Not Started",
                "Last Activity": "N/A",
                "Weeks Behind": "N/A",
                "Recommended Action": "Initial outreach and enrollment support",
            })
    return groups


# -------------------------
# Excel writing helpers
# -------------------------

def _set_workbook_properties(wb: openpyxl.Workbook, report_date: date) -> None:
    props = wb.properties
    props.creator = "Learner Intervention Service"
    props.lastModifiedBy = "Learner Intervention Service"
    stamp = datetime(report_date.year, report_date.month, report_date.day)
    props.created = stamp
    props.modified = stamp
    props.title = "Learners Needing Attention"


def _write_rows(ws: Worksheet, rows: List[Dict[str, Any]], columns: List[str]) -> None:
    header_font = Font(bold=True)
    for j, column in enumerate(columns, start=1):
        cell = ws.cell(row=1, column=j, value=column)
        cell.font = header_font
        cell.alignment = Alignment(wrap_text=True, vertical="top")

    for i, row in enumerate(rows, start=2):
        for j, column in enumerate(columns, start=1):
            value = row.get(column)
            if value is not None and value != "":
                cell = ws.cell(row=i, column=j, value=value)
                # uploaded text is data, never a formula
                if isinstance(value, str):
                    cell.data_type = "s"

    _autosize_columns(ws)


def _autosize_columns(ws: Worksheet, max_width: int = 45) -> None:
    widths: Dict[int, int] = {}
    for row in ws.iter_rows(min_row=1, max_row=min(ws.max_row, 200), values_only=True):
        for idx, v in enumerate(row, start=1):
            if v is None:
                continue
            widths[idx] = max(widths.get(idx, 0), len(str(v)))
    for idx, w in widths.items():
        ws.column_dimensions[get_column_letter(idx)].width = min(max(10, w + 2), max_width)
