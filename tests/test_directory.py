"""Tests for learner directory lookups."""
from intervention_service.models.learner import LearnerDirectoryEntry
from intervention_service.reports.directory import LearnerDirectory


def test_lookup_is_case_insensitive(directory_entries):
    directory = LearnerDirectory(directory_entries)

    contact = directory.contact_for("  BEN@example.COM")

    assert contact.first_name == "Ben"
    assert contact.full_name == "Ben Okafor"
    assert contact.slack_mention == "<@U0BEN>"


def test_unknown_email_has_blank_contact(directory_entries):
    contact = LearnerDirectory(directory_entries).contact_for("nobody@example.com")

    assert contact.full_name == ""
    assert contact.slack_mention == ""


def test_first_entry_wins():
    directory = LearnerDirectory([
        LearnerDirectoryEntry(email="a@x.com", first_name="First"),
        LearnerDirectoryEntry(email="A@X.com", first_name="Second"),
    ])

    assert len(directory) == 1
    assert directory.contact_for("a@x.com").first_name == "First"


def test_has_contact(directory_entries):
    directory = LearnerDirectory(directory_entries + [LearnerDirectoryEntry(email="blank@x.com")])

    assert directory.has_contact("ben@example.com")
    assert directory.has_contact("ana@example.com")
    assert not directory.has_contact("blank@x.com")
    assert not directory.has_contact("missing@x.com")
    assert len(LearnerDirectory()) == 0
