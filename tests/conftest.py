"""Test configuration and fixtures."""
import csv
import io
from typing import AsyncGenerator, Callable, Dict, List, Sequence

import openpyxl
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from intervention_service.main import app
from intervention_service.models.learner import LearnerDirectoryEntry, LearnerRecord

PROGRESS_HEADERS = [
    "Email", "Course Name", "Current Week", "Current Week Name", "Week Status",
    "Current Week Progress", "Week Percentage", "Last Activity", "Last Completed Module",
    "Next Action",
]

DIRECTORY_HEADERS = ["Learner Emailaddress", "Learner Firstname", "Learner Lastname", "Slack ID"]


def build_csv(headers: Sequence[str], rows: List[Dict[str, object]]) -> bytes:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(headers))
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    return buffer.getvalue().encode("utf-8")


def build_xlsx(headers: Sequence[str], rows: List[Dict[str, object]]) -> bytes:
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.append(list(headers))
    for row in rows:
        ws.append([row.get(header) for header in headers])
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def make_learner() -> Callable[..., LearnerRecord]:
    def factory(
        email: str,
        current_week: int = 1,
        course_name: str = "Data Foundations",
        week_status: str = "In Progress",
        week_percentage: float = 50.0,
        next_action: str = "",
        current_week_name: str = "",
    ) -> LearnerRecord:
        return LearnerRecord(
            email=email,
            course_name=course_name,
            current_week=current_week,
            current_week_name=current_week_name,
            week_status=week_status,
            week_percentage=week_percentage,
            next_action=next_action,
        )
    return factory


@pytest.fixture
def progress_rows() -> List[Dict[str, object]]:
    """Two courses, one learner listed twice, one learner without an email."""
    return [
        {"Email": "ana@example.com", "Course Name": "Data Foundations", "Current Week": "5",
         "Current Week Name": "Week 5: Joins", "Week Status": "In Progress",
         "Week Percentage": "40%", "Next Action": "Complete Module 5"},
        {"Email": "ben@example.com", "Course Name": "Data Foundations", "Current Week": "3",
         "Current Week Name": "Week 3: Filtering", "Week Status": "In Progress",
         "Week Percentage": "10%", "Next Action": "Complete Module 3"},
        {"Email": "BEN@example.com", "Course Name": "Data Foundations", "Current Week": "4",
         "Current Week Name": "Week 4: Grouping", "Week Status": "In Progress",
         "Week Percentage": "30%", "Next Action": "Move to Week 5"},
        {"Email": "cara@example.com", "Course Name": "Developer Fundamentals", "Current Week": "6",
         "Current Week Name": "Week 6: APIs", "Week Status": "Completed",
         "Week Percentage": "100%", "Next Action": "Move to Week 7"},
        {"Email": "dev@example.com", "Course Name": "Developer Fundamentals", "Current Week": "1",
         "Current Week Name": "Week 1: Setup", "Week Status": "Not Started",
         "Week Percentage": "0%", "Next Action": ""},
        {"Email": "", "Course Name": "Developer Fundamentals", "Current Week": "2"},
    ]


@pytest.fixture
def progress_csv(progress_rows) -> bytes:
    return build_csv(PROGRESS_HEADERS, progress_rows)


@pytest.fixture
def directory_entries() -> List[LearnerDirectoryEntry]:
    return [
        LearnerDirectoryEntry(email="Ben@Example.com", first_name="Ben", last_name="Okafor", slack_id="U0BEN"),
        LearnerDirectoryEntry(email="ana@example.com", first_name="Ana", last_name="Silva", slack_id=""),
    ]


@pytest.fixture
def directory_xlsx() -> bytes:
    return build_xlsx(DIRECTORY_HEADERS, [
        {"Learner Emailaddress": "ben@example.com", "Learner Firstname": "Ben",
         "Learner Lastname": "Okafor", "Slack ID": "U0BEN"},
        {"Learner Emailaddress": "ana@example.com", "Learner Firstname": "Ana",
         "Learner Lastname": "Silva"},
    ])


@pytest_asyncio.fixture(scope="function")
async def client() -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def csv_upload() -> Callable[[List[Dict[str, object]]], bytes]:
    def factory(rows: List[Dict[str, object]], headers: Sequence[str] = PROGRESS_HEADERS) -> bytes:
        return build_csv(headers, rows)
    return factory


@pytest.fixture
def xlsx_upload() -> Callable[[List[Dict[str, object]]], bytes]:
    def factory(rows: List[Dict[str, object]], headers: Sequence[str] = PROGRESS_HEADERS) -> bytes:
        return build_xlsx(headers, rows)
    return factory
