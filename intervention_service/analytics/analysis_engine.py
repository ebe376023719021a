"""Learner progress analysis engine."""

from typing import List, Optional, Sequence
import structlog

from intervention_service.analytics.aggregation import (
    build_course_stats,
    build_course_week_stats,
    build_next_action_stats,
    build_progress_distribution,
    build_risk_distribution,
    build_weekly_progress,
)
from intervention_service.analytics.classification import (
    at_risk_course_pairs,
    at_risk_identities,
    find_at_risk_learners,
    find_off_track_learners,
    is_grace_period,
)
from intervention_service.analytics.normalization import (
    dedupe_by_course,
    dedupe_learners,
    distinct_courses,
    rows_for_course,
)
from intervention_service.core.config import Settings
from intervention_service.models.analysis import AnalysisPolicy, AnalysisResult, CourseOverview
from intervention_service.models.learner import LearnerRecord
from intervention_service.utils.formatting import course_abbreviation

logger = structlog.get_logger()


def policy_from_settings(settings: Settings) -> AnalysisPolicy:
    """Build the analysis policy from application settings."""
    return AnalysisPolicy(
        at_risk_max_weeks_behind=settings.AT_RISK_MAX_WEEKS_BEHIND,
        grace_period_weeks=settings.GRACE_PERIOD_WEEKS,
        default_course_total_weeks=settings.DEFAULT_COURSE_TOTAL_WEEKS,
        course_total_weeks=dict(settings.COURSE_TOTAL_WEEKS)
    )


class AnalysisEngine:
    """Engine for classifying learners and aggregating progress statistics.

    Stateless apart from its immutable policy: every call recomputes the
    whole result from the rows it is given, so one instance can be shared
    between concurrent requests.
    """

    def __init__(self, policy: Optional[AnalysisPolicy] = None):
        self.policy = policy or AnalysisPolicy()

    def analyze(
        self,
        rows: Sequence[LearnerRecord],
        current_week: int,
        course: Optional[str] = None
    ) -> AnalysisResult:
        """Analyze progress rows against the current program week."""
        rows = list(rows)
        if course:
            rows = rows_for_course(rows, course)

        # Normalization
        learners = dedupe_learners(rows)
        course_learners = dedupe_by_course(rows)

        # Classification
        at_risk = find_at_risk_learners(rows, current_week, self.policy)
        off_track = find_off_track_learners(rows, current_week)
        grace_period = is_grace_period(current_week, self.policy)

        # Aggregation
        course_stats = build_course_stats(course_learners, at_risk_course_pairs(at_risk))

        result = AnalysisResult(
            total_learners=len(learners),
            at_risk_learners=at_risk,
            course_stats=course_stats,
            progress_distribution=build_progress_distribution(learners.values()),
            risk_distribution=build_risk_distribution(learners.values(), at_risk_identities(at_risk)),
            weekly_progress_stats=build_weekly_progress(rows),
            next_action_stats=build_next_action_stats(rows),
            course_week_stats=build_course_week_stats(
                [stats.course_name for stats in course_stats], rows, self.policy
            ),
            off_track_learners=off_track,
            is_grace_period=grace_period,
            current_week=current_week
        )

        logger.info(
            "Learner analysis completed",
            rows=len(rows),
            unique_learners=result.total_learners,
            courses=len(course_stats),
            at_risk=len(at_risk),
            off_track=len(off_track),
            current_week=current_week,
            grace_period=grace_period
        )

        return result

    def available_courses(self, rows: Sequence[LearnerRecord]) -> List[str]:
        """Distinct course names in the order they first appear."""
        return distinct_courses(rows)

    def analyze_all_courses(
        self,
        rows: Sequence[LearnerRecord],
        current_week: int
    ) -> List[CourseOverview]:
        """Run a separate analysis for every course in the upload."""
        rows = list(rows)
        return [
            CourseOverview(
                course_name=course_name,
                abbreviation=course_abbreviation(course_name),
                result=self.analyze(rows, current_week, course=course_name)
            )
            for course_name in self.available_courses(rows)
        ]
