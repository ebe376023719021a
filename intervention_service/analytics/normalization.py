"""Collapse raw progress rows into canonical per-learner views."""

from typing import Dict, Iterable

from intervention_service.models.learner import LearnerRecord


def dedupe_learners(rows: Iterable[LearnerRecord]) -> Dict[str, LearnerRecord]:
    """Map learner identity to the last row seen for it, across all courses."""
    learners: Dict[str, LearnerRecord] = {}
    for row in rows:
        learners[row.identity] = row
    return learners


def dedupe_by_course(rows: Iterable[LearnerRecord]) -> Dict[str, Dict[str, LearnerRecord]]:
    """Map course name to {learner identity: last row seen in that course}.

    Courses keep the order in which they first appear in the input.
    """
    courses: Dict[str, Dict[str, LearnerRecord]] = {}
    for row in rows:
        courses.setdefault(row.course_name, {})[row.identity] = row
    return courses


def rows_for_course(rows: Iterable[LearnerRecord], course_name: str) -> list:
    """Rows belonging to one course, in input order."""
    return [row for row in rows if row.course_name == course_name]


def distinct_courses(rows: Iterable[LearnerRecord]) -> list:
    """Distinct non-empty course names in first-appearance order."""
    seen: Dict[str, None] = {}
    for row in rows:
        if row.course_name:
            seen.setdefault(row.course_name, None)
    return list(seen)
