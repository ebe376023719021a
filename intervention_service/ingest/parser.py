"""Parse uploaded progress sheets and learner directories into models."""

import io
import math
import re
from typing import Any, Dict, List, Sequence

import pandas as pd
import structlog

from intervention_service.models.learner import LearnerDirectoryEntry, LearnerRecord

logger = structlog.get_logger()

CSV_EXTENSIONS = {"csv"}
EXCEL_EXTENSIONS = {"xlsx", "xls"}

# Field name -> accepted column headers, first non-blank wins.
LEARNER_COLUMNS: Dict[str, Sequence[str]] = {
    "email": ("Email", "email"),
    "course_name": ("Course Name", "courseName"),
    "current_week": ("Current Week", "currentWeek"),
    "current_week_name": ("Current Week Name", "currentWeekName"),
    "week_status": ("Week Status", "weekStatus"),
    "current_week_progress": ("Current Week Progress", "currentWeekProgress"),
    "week_percentage": ("Week Percentage", "weekPercentage"),
    "last_activity": ("Last Activity", "lastActivity"),
    "last_completed_module": ("Last Completed Module", "lastCompletedModule"),
    "next_action": ("Next Action", "nextAction"),
}

DIRECTORY_COLUMNS: Dict[str, Sequence[str]] = {
    "email": ("Learner Emailaddress", "Email", "email"),
    "first_name": ("Learner Firstname", "First Name", "firstName"),
    "last_name": ("Learner Lastname", "Last Name", "lastName"),
    "slack_id": ("Slack ID", "SlackID", "slackId"),
}

LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")


class UploadError(Exception):
    """Base class for problems with an uploaded file."""


class UnsupportedFileError(UploadError):
    """File extension is not one we can read."""


class UploadParseError(UploadError):
    """File could not be read as a spreadsheet."""


class EmptyUploadError(UploadError):
    """File was readable but held no usable rows."""


def file_extension(filename: str) -> str:
    return (filename or "").rsplit(".", 1)[-1].lower() if "." in (filename or "") else ""


def parse_learner_upload(filename: str, content: bytes) -> List[LearnerRecord]:
    """Parse a CSV or Excel progress export into learner records.

    Rows without an email are dropped. Raises EmptyUploadError when nothing
    usable is left.
    """
    extension = file_extension(filename)
    if extension in CSV_EXTENSIONS:
        frame = _read_csv(content)
    elif extension in EXCEL_EXTENSIONS:
        frame = _read_excel(content, "Error parsing Excel file")
    else:
        raise UnsupportedFileError("Unsupported file format. Please upload CSV or Excel files.")

    records = [
        _learner_from_row(row)
        for row in frame.to_dict(orient="records")
    ]
    records = [record for record in records if record.email]

    if not records:
        raise EmptyUploadError("No valid data found in the file.")

    logger.info("Learner upload parsed", filename=filename, rows=len(frame), records=len(records))
    return records


def parse_directory_upload(filename: str, content: bytes) -> List[LearnerDirectoryEntry]:
    """Parse an Excel learner directory (email, names, Slack ID)."""
    if file_extension(filename) not in EXCEL_EXTENSIONS:
        raise UnsupportedFileError("Learner directory must be an Excel file (.xlsx or .xls)")

    frame = _read_excel(content, "Error parsing learner directory Excel file")
    entries = [
        LearnerDirectoryEntry(**{
            field: _first_text(row, aliases) for field, aliases in DIRECTORY_COLUMNS.items()
        })
        for row in frame.to_dict(orient="records")
    ]
    entries = [entry for entry in entries if entry.email]

    logger.info("Learner directory parsed", filename=filename, entries=len(entries))
    return entries


def parse_int(value: Any) -> int:
    """Leading integer of a cell, 0 when there is none."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) else 0
    match = LEADING_INT.match(str(value or ""))
    return int(match.group(1)) if match else 0


def parse_percentage(value: Any) -> float:
    """Numeric part of a percentage cell such as '45%' or 45.5, 0 when unparseable."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else 0.0
    match = LEADING_FLOAT.match(str(value or "").replace("%", ""))
    return float(match.group(1)) if match else 0.0


def _read_csv(content: bytes) -> pd.DataFrame:
    try:
        frame = pd.read_csv(io.BytesIO(content), dtype=str, keep_default_na=False, skip_blank_lines=True)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
        raise UploadParseError(f"CSV parsing error: {e}") from e
    return _clean_columns(frame)


def _read_excel(content: bytes, message: str) -> pd.DataFrame:
    try:
        frame = pd.read_excel(io.BytesIO(content), sheet_name=0, dtype=object)
    except Exception as e:
        logger.warning("Excel upload unreadable", error=str(e))
        raise UploadParseError(message) from e
    return _clean_columns(frame)


def _clean_columns(frame: pd.DataFrame) -> pd.DataFrame:
    frame.columns = [str(column).strip() for column in frame.columns]
    return frame


def _learner_from_row(row: Dict[str, Any]) -> LearnerRecord:
    fields: Dict[str, Any] = {
        field: _first_text(row, aliases) for field, aliases in LEARNER_COLUMNS.items()
    }
    fields["current_week"] = max(0, parse_int(_first_value(row, LEARNER_COLUMNS["current_week"])))
    fields["week_percentage"] = parse_percentage(_first_value(row, LEARNER_COLUMNS["week_percentage"]))
    return LearnerRecord(**fields)


def _is_blank(value: Any) -> bool:
    if isinstance(value, str):
        return not value.strip()
    return value is None or bool(pd.isna(value))


def _first_value(row: Dict[str, Any], aliases: Sequence[str]) -> Any:
    for alias in aliases:
        value = row.get(alias)
        if not _is_blank(value):
            return value
    return ""


def _first_text(row: Dict[str, Any], aliases: Sequence[str]) -> str:
    value = _first_value(row, aliases)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()
