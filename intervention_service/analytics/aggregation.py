"""Summary views folded over classified learner rows."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Sequence, Set, Tuple

from intervention_service.analytics.classification import (
    AT_RISK_LABEL,
    classify_status,
    distribution_category,
)
from intervention_service.models.analysis import (
    AnalysisPolicy,
    CourseStats,
    CourseWeekStats,
    NextActionStats,
    ProgressBucket,
    RiskDistributionEntry,
    WeeklyProgress,
)
from intervention_service.models.learner import LearnerRecord, StatusCategory

# (label, min, max), inclusive on both ends
PROGRESS_RANGES: List[Tuple[str, float, float]] = [
    ("0-20%", 0, 20),
    ("21-40%", 21, 40),
    ("41-60%", 41, 60),
    ("61-80%", 61, 80),
    ("81-100%", 81, 100),
]

RISK_DISTRIBUTION_ORDER = [
    StatusCategory.IN_PROGRESS.value,
    StatusCategory.COMPLETED.value,
    AT_RISK_LABEL,
    StatusCategory.NOT_STARTED.value,
]


def percentage(part: float, whole: float) -> int:
    """Whole-number percentage, ties rounded away from zero, 0 for an empty whole."""
    if not whole:
        return 0
    value = Decimal(part) * 100 / Decimal(whole)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def build_course_stats(
    course_learners: Dict[str, Dict[str, LearnerRecord]],
    at_risk_pairs: Set[Tuple[str, str]]
) -> List[CourseStats]:
    """Status counts per course over its deduplicated learners."""
    stats = []
    for course_name, learners in course_learners.items():
        counts = {category: 0 for category in StatusCategory}
        at_risk = 0
        for identity, learner in learners.items():
            counts[classify_status(learner.week_status)] += 1
            if (identity, course_name) in at_risk_pairs:
                at_risk += 1

        stats.append(CourseStats(
            course_name=course_name,
            total_learners=len(learners),
            in_progress=counts[StatusCategory.IN_PROGRESS],
            completed=counts[StatusCategory.COMPLETED],
            not_started=counts[StatusCategory.NOT_STARTED],
            at_risk=at_risk
        ))
    return stats


def build_progress_distribution(learners: Iterable[LearnerRecord]) -> List[ProgressBucket]:
    """Histogram of week percentage over unique learners."""
    values = [learner.week_percentage for learner in learners]
    return [
        ProgressBucket(
            range=label,
            count=sum(1 for value in values if low <= value <= high)
        )
        for label, low, high in PROGRESS_RANGES
    ]


def build_risk_distribution(
    learners: Iterable[LearnerRecord],
    at_risk_ids: Set[str]
) -> List[RiskDistributionEntry]:
    """Four-way status breakdown of unique learners; empty buckets are dropped."""
    learners = list(learners)
    counts = {name: 0 for name in RISK_DISTRIBUTION_ORDER}
    for learner in learners:
        counts[distribution_category(learner, at_risk_ids)] += 1

    total = len(learners)
    return [
        RiskDistributionEntry(name=name, count=counts[name], percentage=percentage(counts[name], total))
        for name in RISK_DISTRIBUTION_ORDER
        if counts[name] > 0
    ]


def build_weekly_progress(rows: Sequence[LearnerRecord]) -> List[WeeklyProgress]:
    """One entry per distinct week number, ascending; every row counts."""
    weeks: Dict[int, Dict[str, object]] = {}
    for row in rows:
        week = weeks.get(row.current_week)
        if week is None:
            week = weeks[row.current_week] = {
                "name": row.current_week_name or f"Week {row.current_week}",
                "counts": {category: 0 for category in StatusCategory},
                "total": 0,
            }
        week["counts"][classify_status(row.week_status)] += 1
        week["total"] += 1

    return [
        WeeklyProgress(
            week_number=number,
            week_name=week["name"],
            learners_count=week["total"],
            completed_count=week["counts"][StatusCategory.COMPLETED],
            in_progress_count=week["counts"][StatusCategory.IN_PROGRESS],
            not_started_count=week["counts"][StatusCategory.NOT_STARTED]
        )
        for number, week in sorted(weeks.items())
    ]


def build_next_action_stats(rows: Sequence[LearnerRecord]) -> List[NextActionStats]:
    """Frequency of each distinct next action across all rows."""
    counts: Dict[str, int] = {}
    for row in rows:
        action = (row.next_action or "").strip()
        if action:
            counts[action] = counts.get(action, 0) + 1

    total = len(rows)
    stats = [
        NextActionStats(action=action, count=count, percentage=percentage(count, total))
        for action, count in counts.items()
    ]
    return sorted(stats, key=lambda stat: stat.count, reverse=True)


def build_course_week_stats(
    course_names: Iterable[str],
    rows: Sequence[LearnerRecord],
    policy: AnalysisPolicy
) -> List[CourseWeekStats]:
    """Weekly breakdown per course plus its program length."""
    stats = []
    for course_name in course_names:
        course_rows = [row for row in rows if row.course_name == course_name]
        if not course_rows:
            continue

        stats.append(CourseWeekStats(
            course_name=course_name,
            current_week=max(row.current_week for row in course_rows),
            total_weeks=policy.total_weeks_for(course_name),
            weekly_breakdown=build_weekly_progress(course_rows)
        ))
    return stats
