"""Analysis result models."""

from typing import Dict, List
from pydantic import BaseModel, ConfigDict, Field

from intervention_service.models.learner import AtRiskLearner, LearnerRecord


class _Snapshot(BaseModel):
    model_config = ConfigDict(frozen=True)


class CourseStats(_Snapshot):
    """Status counts over the deduplicated learners of one course."""
    course_name: str
    total_learners: int = 0
    in_progress: int = 0
    completed: int = 0
    not_started: int = 0
    at_risk: int = 0


class WeeklyProgress(_Snapshot):
    """Row counts for one program week."""
    week_number: int
    week_name: str
    learners_count: int = 0
    completed_count: int = 0
    in_progress_count: int = 0
    not_started_count: int = 0


class NextActionStats(_Snapshot):
    action: str
    count: int
    percentage: int


class CourseWeekStats(_Snapshot):
    """Weekly breakdown scoped to a single course."""
    course_name: str
    current_week: int
    total_weeks: int
    weekly_breakdown: List[WeeklyProgress] = Field(default_factory=list)


class ProgressBucket(_Snapshot):
    range: str
    count: int


class RiskDistributionEntry(_Snapshot):
    name: str
    count: int
    percentage: int


class AnalysisResult(_Snapshot):
    """Immutable snapshot produced by one analysis run."""
    total_learners: int
    at_risk_learners: List[AtRiskLearner] = Field(default_factory=list)
    course_stats: List[CourseStats] = Field(default_factory=list)
    progress_distribution: List[ProgressBucket] = Field(default_factory=list)
    risk_distribution: List[RiskDistributionEntry] = Field(default_factory=list)
    weekly_progress_stats: List[WeeklyProgress] = Field(default_factory=list)
    next_action_stats: List[NextActionStats] = Field(default_factory=list)
    course_week_stats: List[CourseWeekStats] = Field(default_factory=list)
    off_track_learners: List[LearnerRecord] = Field(default_factory=list)
    is_grace_period: bool
    current_week: int


class CourseOverview(_Snapshot):
    """Per-course analysis used for cross-course comparison."""
    course_name: str
    abbreviation: str
    result: AnalysisResult


class AnalysisPolicy(_Snapshot):
    """Tunable thresholds for classification and course lengths."""
    at_risk_max_weeks_behind: int = 3
    grace_period_weeks: int = 3
    default_course_total_weeks: int = 11
    course_total_weeks: Dict[str, int] = Field(
        default_factory=lambda: {"developer fundamentals": 10}
    )

    def total_weeks_for(self, course_name: str) -> int:
        """Look up program length by case-insensitive substring match."""
        lowered = (course_name or "").lower()
        for fragment, weeks in self.course_total_weeks.items():
            if fragment.lower() in lowered:
                return weeks
        return self.default_course_total_weeks
