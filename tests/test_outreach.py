"""Tests for Slack outreach script generation."""
from datetime import date

from intervention_service.analytics.analysis_engine import AnalysisEngine
from intervention_service.models.learner import RiskLevel
from intervention_service.reports.directory import LearnerDirectory
from intervention_service.reports.outreach import (
    OutreachScriptGenerator,
    outreach_filename,
    recommended_action,
    render_template,
)


def _rows(make_learner):
    return [
        make_learner("ana@example.com", current_week=5),
        make_learner("ben@example.com", current_week=3),
        make_learner("zoe@example.com", course_name="Web Development", current_week=4),
    ]


def test_scripts_grouped_by_course_and_risk(make_learner, directory_entries):
    result = AnalysisEngine().analyze(_rows(make_learner), 6)

    script = OutreachScriptGenerator(LearnerDirectory(directory_entries)).generate(result)

    assert script.startswith("# Slack Outreach Scripts by Course")
    assert "✅ 2 learners with contact info" in script
    assert "## Data Foundations\n**Actionable Learners:** 2 (1 Urgent, 0 Check-in, 1 Nudge)" in script
    assert "## Web Development\n**Actionable Learners:** 1 (0 Urgent, 1 Check-in, 0 Nudge)" in script
    assert "**Ben Okafor** (ben@example.com) - Slack: <@U0BEN>" in script
    assert "**Ana Silva** (ana@example.com)\n" in script
    assert "**zoe@example.com** (zoe@example.com)" in script
    assert "Hi Ben," in script
    assert "Hi there," in script
    assert "I see you're about 3 weeks behind in Data Foundations." in script
    assert "#web-development-support" in script
    assert script.index("## Data Foundations") < script.index("## General Outreach Tips")


def test_scripts_without_directory(make_learner):
    result = AnalysisEngine().analyze(_rows(make_learner), 6)

    script = OutreachScriptGenerator().generate(result)

    assert "❌ No learner directory uploaded" in script
    assert "Personalized Messages" not in script
    assert "Hi [NAME]," in script


def test_grace_period_suppresses_learner_sections(make_learner):
    rows = [make_learner("ana@example.com", current_week=1)]
    result = AnalysisEngine().analyze(rows, 3)

    script = OutreachScriptGenerator().generate(result)

    assert "Grace period active (week 3)" in script
    assert "Actionable Learners" not in script
    assert "ana@example.com" not in script
    assert "## General Outreach Tips" in script


def test_render_template_leaves_unknown_placeholders():
    assert render_template("Hi {first_name}, {other}", {"first_name": "Ana"}) == "Hi Ana, {other}"


def test_helpers():
    assert recommended_action(RiskLevel.MEDIUM) == "Schedule check-in (2 weeks behind)"
    assert outreach_filename(date(2024, 3, 1)) == "slack-outreach-scripts-by-course-2024-03-01.md"
