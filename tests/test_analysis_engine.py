"""Tests for the end-to-end analysis engine."""
from intervention_service.analytics.analysis_engine import AnalysisEngine, policy_from_settings
from intervention_service.core.config import Settings
from intervention_service.models.learner import RiskLevel


def test_duplicate_learner_scenario(make_learner):
    rows = [
        make_learner("a@x.com", current_week=5),
        make_learner("b@x.com", current_week=3),
        make_learner("b@x.com", current_week=4),
    ]

    result = AnalysisEngine().analyze(rows, 6)

    assert result.total_learners == 2
    assert result.is_grace_period is False

    levels = {(learner.email, learner.current_week): learner.risk_level for learner in result.at_risk_learners}
    assert levels[("a@x.com", 5)] is RiskLevel.LOW
    assert levels[("b@x.com", 4)] is RiskLevel.MEDIUM
    # raw rows are classified individually
    assert levels[("b@x.com", 3)] is RiskLevel.HIGH

    course = result.course_stats[0]
    assert course.course_name == "Data Foundations"
    assert (course.total_learners, course.at_risk) == (2, 2)

    assert [(entry.name, entry.count, entry.percentage) for entry in result.risk_distribution] == [
        ("At Risk", 2, 100),
    ]


def test_analysis_of_mixed_upload(make_learner):
    rows = [
        make_learner("ana@x.com", current_week=5, week_percentage=40, next_action="Complete Module 5"),
        make_learner("ben@x.com", current_week=3, week_percentage=10),
        make_learner("BEN@x.com", current_week=4, week_percentage=30, next_action="Move to Week 5"),
        make_learner("cara@x.com", course_name="Developer Fundamentals", current_week=6,
                     week_status="Completed", week_percentage=100, next_action="Move to Week 7"),
        make_learner("dev@x.com", course_name="Developer Fundamentals", current_week=1,
                     week_status="Not Started", week_percentage=0),
    ]

    result = AnalysisEngine().analyze(rows, 6)

    assert result.total_learners == 4
    assert [learner.email for learner in result.at_risk_learners] == ["ben@x.com", "BEN@x.com", "ana@x.com"]
    assert [row.email for row in result.off_track_learners] == ["ana@x.com", "ben@x.com", "dev@x.com"]
    assert [(entry.name, entry.count) for entry in result.risk_distribution] == [
        ("Completed", 1), ("At Risk", 2), ("Not Started", 1),
    ]
    assert [bucket.count for bucket in result.progress_distribution] == [1, 2, 0, 0, 1]
    assert [week.week_number for week in result.weekly_progress_stats] == [1, 3, 4, 5, 6]
    assert [(s.course_name, s.current_week, s.total_weeks) for s in result.course_week_stats] == [
        ("Data Foundations", 5, 11),
        ("Developer Fundamentals", 6, 10),
    ]


def test_analysis_is_idempotent(make_learner):
    rows = [make_learner("a@x.com", current_week=2), make_learner("b@x.com", current_week=4)]
    engine = AnalysisEngine()

    assert engine.analyze(rows, 5) == engine.analyze(rows, 5)


def test_empty_input_produces_zeroed_result():
    result = AnalysisEngine().analyze([], 5)

    assert result.total_learners == 0
    assert result.at_risk_learners == []
    assert result.course_stats == []
    assert result.risk_distribution == []
    assert result.weekly_progress_stats == []
    assert result.next_action_stats == []
    assert result.course_week_stats == []
    assert result.off_track_learners == []
    assert [bucket.count for bucket in result.progress_distribution] == [0, 0, 0, 0, 0]


def test_grace_period_flag_only(make_learner):
    rows = [make_learner("a@x.com", current_week=1)]

    result = AnalysisEngine().analyze(rows, 3)

    assert result.is_grace_period is True
    assert len(result.at_risk_learners) == 1
    assert result.current_week == 3


def test_course_filter(make_learner):
    rows = [
        make_learner("a@x.com", course_name="Web", current_week=2),
        make_learner("b@x.com", course_name="Data", current_week=2),
    ]

    result = AnalysisEngine().analyze(rows, 4, course="Web")

    assert result.total_learners == 1
    assert [course.course_name for course in result.course_stats] == ["Web"]
    assert [learner.email for learner in result.at_risk_learners] == ["a@x.com"]


def test_analyze_all_courses(make_learner):
    rows = [
        make_learner("a@x.com", course_name="Data Foundations", current_week=2),
        make_learner("b@x.com", course_name="Web Development", current_week=4),
        make_learner("c@x.com", course_name="Data Foundations", current_week=4),
    ]
    engine = AnalysisEngine()

    overview = engine.analyze_all_courses(rows, 4)

    assert engine.available_courses(rows) == ["Data Foundations", "Web Development"]
    assert [(course.course_name, course.abbreviation) for course in overview] == [
        ("Data Foundations", "DF"),
        ("Web Development", "WD"),
    ]
    assert overview[0].result.total_learners == 2
    assert overview[1].result.at_risk_learners == []


def test_policy_from_settings():
    settings = Settings(
        AT_RISK_MAX_WEEKS_BEHIND=2,
        GRACE_PERIOD_WEEKS=1,
        COURSE_TOTAL_WEEKS={"  Web Development ": 8},
    )

    policy = policy_from_settings(settings)

    assert policy.at_risk_max_weeks_behind == 2
    assert policy.grace_period_weeks == 1
    assert policy.total_weeks_for("Intro to Web Development") == 8

    result = AnalysisEngine(policy).analyze([], 2)
    assert result.is_grace_period is False
