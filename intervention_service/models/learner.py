"""Learner progress records and directory entries."""

from enum import Enum
from pydantic import BaseModel, ConfigDict


class StatusCategory(str, Enum):
    """Bucketed week status of a learner."""
    COMPLETED = "Completed"
    IN_PROGRESS = "In Progress"
    NOT_STARTED = "Not Started"


class RiskLevel(str, Enum):
    """Intervention urgency for a learner who is behind schedule."""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class LearnerRecord(BaseModel):
    """One learner + course observation from an uploaded progress sheet."""
    model_config = ConfigDict(frozen=True)

    email: str = ""
    course_name: str = ""
    current_week: int = 0
    current_week_name: str = ""
    week_status: str = ""
    current_week_progress: str = ""
    week_percentage: float = 0.0
    last_activity: str = ""
    last_completed_module: str = ""
    next_action: str = ""

    @property
    def identity(self) -> str:
        """Key used to match the same learner across rows."""
        return learner_key(self.email)


class AtRiskLearner(LearnerRecord):
    """Learner record annotated with how far behind schedule it is."""
    weeks_behind: int
    risk_level: RiskLevel


class LearnerDirectoryEntry(BaseModel):
    """Contact details for a learner, matched to progress rows by email."""
    model_config = ConfigDict(frozen=True)

    email: str = ""
    first_name: str = ""
    last_name: str = ""
    slack_id: str = ""


def learner_key(email: str) -> str:
    """Case-insensitive identity for an email address."""
    return (email or "").strip().lower()
