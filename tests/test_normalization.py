"""Tests for learner deduplication."""
from intervention_service.analytics.normalization import (
    dedupe_by_course,
    dedupe_learners,
    distinct_courses,
    rows_for_course,
)


def test_dedupe_learners_last_row_wins(make_learner):
    rows = [
        make_learner("b@x.com", current_week=3),
        make_learner("a@x.com", current_week=2),
        make_learner("B@X.com ", current_week=4),
    ]

    learners = dedupe_learners(rows)

    assert list(learners) == ["b@x.com", "a@x.com"]
    assert learners["b@x.com"].current_week == 4
    # display casing comes from the surviving row
    assert learners["b@x.com"].email == "B@X.com "


def test_dedupe_learners_spans_courses(make_learner):
    rows = [
        make_learner("a@x.com", course_name="Data Foundations"),
        make_learner("a@x.com", course_name="Developer Fundamentals"),
    ]

    assert len(dedupe_learners(rows)) == 1
    assert dedupe_learners(rows)["a@x.com"].course_name == "Developer Fundamentals"


def test_dedupe_by_course(make_learner):
    rows = [
        make_learner("a@x.com", course_name="Web", current_week=1),
        make_learner("a@x.com", course_name="Data", current_week=2),
        make_learner("b@x.com", course_name="Web", current_week=3),
        make_learner("A@x.com", course_name="Web", current_week=5),
    ]

    courses = dedupe_by_course(rows)

    assert list(courses) == ["Web", "Data"]
    assert sorted(courses["Web"]) == ["a@x.com", "b@x.com"]
    assert courses["Web"]["a@x.com"].current_week == 5
    assert courses["Data"]["a@x.com"].current_week == 2


def test_empty_input():
    assert dedupe_learners([]) == {}
    assert dedupe_by_course([]) == {}
    assert distinct_courses([]) == []


def test_distinct_courses_skips_blank(make_learner):
    rows = [
        make_learner("a@x.com", course_name="Web"),
        make_learner("b@x.com", course_name=""),
        make_learner("c@x.com", course_name="Data"),
        make_learner("d@x.com", course_name="Web"),
    ]

    assert distinct_courses(rows) == ["Web", "Data"]
    assert [row.email for row in rows_for_course(rows, "Web")] == ["a@x.com", "d@x.com"]
