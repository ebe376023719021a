"""Learner directory lookups used to personalize reports."""

from typing import Dict, Iterable, Optional
from pydantic import BaseModel, ConfigDict

from intervention_service.models.learner import LearnerDirectoryEntry, learner_key


class ContactInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    first_name: str = ""
    last_name: str = ""
    full_name: str = ""
    slack_id: str = ""

    @property
    def slack_mention(self) -> str:
        return f"<@{self.slack_id}>" if self.slack_id else ""


class LearnerDirectory:
    """Case-insensitive email index over directory entries."""

    def __init__(self, entries: Optional[Iterable[LearnerDirectoryEntry]] = None):
        self._entries: Dict[str, LearnerDirectoryEntry] = {}
        for entry in entries or []:
            # first entry for an address wins
            self._entries.setdefault(learner_key(entry.email), entry)

    def __len__(self) -> int:
        return len(self._entries)

    def contact_for(self, email: str) -> ContactInfo:
        """Contact details for an email; blank fields when unknown."""
        entry = self._entries.get(learner_key(email))
        if entry is None:
            return ContactInfo()
        return ContactInfo(
            first_name=entry.first_name,
            last_name=entry.last_name,
            full_name=f"{entry.first_name} {entry.last_name}".strip(),
            slack_id=entry.slack_id
        )

    def has_contact(self, email: str) -> bool:
        contact = self.contact_for(email)
        return bool(contact.first_name or contact.slack_id)
