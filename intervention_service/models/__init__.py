"""Data models for the Learner Intervention Service."""

from intervention_service.models.learner import (
    AtRiskLearner,
    LearnerDirectoryEntry,
    LearnerRecord,
    RiskLevel,
    StatusCategory,
)
from intervention_service.models.analysis import (
    AnalysisPolicy,
    AnalysisResult,
    CourseOverview,
    CourseStats,
    CourseWeekStats,
    NextActionStats,
    ProgressBucket,
    RiskDistributionEntry,
    WeeklyProgress,
)

__all__ = [
    "AtRiskLearner",
    "LearnerDirectoryEntry",
    "LearnerRecord",
    "RiskLevel",
    "StatusCategory",
    "AnalysisPolicy",
    "AnalysisResult",
    "CourseOverview",
    "CourseStats",
    "CourseWeekStats",
    "NextActionStats",
    "ProgressBucket",
    "RiskDistributionEntry",
    "WeeklyProgress",
]
