"""Status bucketing and behind-schedule classification."""

from typing import Callable, Iterable, List, Optional, Set, Tuple

from intervention_service.models.analysis import AnalysisPolicy
from intervention_service.models.learner import (
    AtRiskLearner,
    LearnerRecord,
    RiskLevel,
    StatusCategory,
)

# Ordered, first match wins.
STATUS_RULES: List[Tuple[Callable[[str], bool], StatusCategory]] = [
    (lambda status: "completed" in status, StatusCategory.COMPLETED),
    (lambda status: "progress" in status, StatusCategory.IN_PROGRESS),
    (lambda status: "not started" in status, StatusCategory.NOT_STARTED),
]
DEFAULT_STATUS = StatusCategory.IN_PROGRESS

# Next actions that mean the learner is ready to advance.
ADVANCE_MARKERS = ("move to week", "move to next")

DEFAULT_POLICY = AnalysisPolicy()

AT_RISK_LABEL = "At Risk"


def classify_status(week_status: str) -> StatusCategory:
    """Bucket a free-text week status into a status category."""
    status = (week_status or "").lower()
    for matches, category in STATUS_RULES:
        if matches(status):
            return category
    return DEFAULT_STATUS


def weeks_behind(row: LearnerRecord, current_week: int) -> int:
    """Weeks between the reference week and the learner's week, floored at 0."""
    return max(0, current_week - row.current_week)


def risk_level_for(behind: int, policy: AnalysisPolicy = DEFAULT_POLICY) -> Optional[RiskLevel]:
    """Risk level for a learner `behind` weeks behind, or None outside the window."""
    if behind < 1 or behind > policy.at_risk_max_weeks_behind:
        return None
    if behind >= 3:
        return RiskLevel.HIGH
    if behind == 2:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def find_at_risk_learners(
    rows: Iterable[LearnerRecord],
    current_week: int,
    policy: AnalysisPolicy = DEFAULT_POLICY
) -> List[AtRiskLearner]:
    """Learners 1..N weeks behind, most behind first.

    Learners further behind than the window are left out entirely; the
    list targets learners who can still catch up.
    """
    at_risk = []
    for row in rows:
        behind = weeks_behind(row, current_week)
        level = risk_level_for(behind, policy)
        if level is None:
            continue
        at_risk.append(
            AtRiskLearner(**row.model_dump(), weeks_behind=behind, risk_level=level)
        )

    # sorted() is stable, ties keep input order
    return sorted(at_risk, key=lambda learner: learner.weeks_behind, reverse=True)


def is_ready_to_advance(row: LearnerRecord) -> bool:
    next_action = (row.next_action or "").lower()
    return any(marker in next_action for marker in ADVANCE_MARKERS)


def find_off_track_learners(rows: Iterable[LearnerRecord], current_week: int) -> List[LearnerRecord]:
    """Learners behind the reference week who are not flagged to move on."""
    return [
        row for row in rows
        if row.current_week < current_week and not is_ready_to_advance(row)
    ]


def is_grace_period(current_week: int, policy: AnalysisPolicy = DEFAULT_POLICY) -> bool:
    """True during the opening weeks when risk lists are informational only."""
    return current_week <= policy.grace_period_weeks


def at_risk_identities(at_risk: Iterable[AtRiskLearner]) -> Set[str]:
    return {learner.identity for learner in at_risk}


def at_risk_course_pairs(at_risk: Iterable[AtRiskLearner]) -> Set[Tuple[str, str]]:
    return {(learner.identity, learner.course_name) for learner in at_risk}


def distribution_category(
    row: LearnerRecord,
    at_risk_ids: Set[str]
) -> str:
    """Status-distribution bucket; At Risk only replaces In Progress."""
    category = classify_status(row.week_status)
    if category is StatusCategory.IN_PROGRESS and row.identity in at_risk_ids:
        return AT_RISK_LABEL
    return category.value
