"""Course ranking and narrative insights over an analysis result."""

from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from intervention_service.analytics.aggregation import percentage
from intervention_service.analytics.normalization import dedupe_learners
from intervention_service.models.analysis import AnalysisResult, CourseStats
from intervention_service.models.learner import LearnerRecord
from intervention_service.reports.directory import LearnerDirectory


def rank_courses(course_stats: Sequence[CourseStats]) -> List[Dict[str, Any]]:
    """Courses ordered by how much intervention they need, most first.

    Attention score weights at-risk learners 3, not-started 2 and every
    other unfinished learner 1.
    """
    ranking = []
    for course in course_stats:
        remaining = course.total_learners - course.completed - course.at_risk - course.not_started
        ranking.append({
            "course_name": course.course_name,
            "total_learners": course.total_learners,
            "completion_rate": percentage(course.completed, course.total_learners),
            "at_risk_rate": percentage(course.at_risk, course.total_learners),
            "not_started_rate": percentage(course.not_started, course.total_learners),
            "attention_score": (
                course.at_risk * 3 + course.not_started * 2 + remaining
                if course.total_learners else 0
            ),
        })
    return sorted(ranking, key=lambda course: course["attention_score"], reverse=True)


def generate_insights(
    result: AnalysisResult,
    rows: Sequence[LearnerRecord],
    directory: Optional[LearnerDirectory] = None
) -> Dict[str, Any]:
    """Summarize an analysis into headline metrics, insights and recommendations."""
    completed = sum(course.completed for course in result.course_stats)
    not_started = sum(course.not_started for course in result.course_stats)
    at_risk_count = len({learner.identity for learner in result.at_risk_learners})
    completion_rate = percentage(completed, result.total_learners)
    # during the grace period nobody is reported as at risk
    at_risk_rate = 0 if result.is_grace_period else percentage(at_risk_count, result.total_learners)

    progress = np.array(
        [learner.week_percentage for learner in dedupe_learners(rows).values()],
        dtype=float
    )
    average_progress = float(np.round(progress.mean(), 1)) if progress.size else 0.0
    median_progress = float(np.round(np.median(progress), 1)) if progress.size else 0.0

    ranking = rank_courses(result.course_stats)
    by_completion = sorted(ranking, key=lambda course: course["completion_rate"], reverse=True)

    insights = []
    recommendations = []

    if result.is_grace_period:
        insights.append(
            f"Week {result.current_week} is within the grace period; behind-schedule flags are informational only."
        )
    elif at_risk_count:
        insights.append(
            f"{at_risk_count} learners ({at_risk_rate}%) are 1-3 weeks behind and can still catch up."
        )
        recommendations.append("Start outreach with the 3-weeks-behind group, then work down to gentle nudges.")

    if not_started:
        insights.append(f"{not_started} learners have not started their current week.")
        recommendations.append("Send initial outreach and enrollment support to learners who have not started.")

    if len(ranking) > 1:
        insights.append(f"{ranking[0]['course_name']} needs the most attention.")
        recommendations.append(
            f"Review what works in {by_completion[0]['course_name']} and apply it to other courses."
        )

    if result.off_track_learners and not result.is_grace_period:
        insights.append(f"{len(result.off_track_learners)} rows are behind the current week without a move-on action.")

    top_action = result.next_action_stats[0] if result.next_action_stats else None

    summary: Dict[str, Any] = {
        "total_learners": result.total_learners,
        "completion_rate": completion_rate,
        "at_risk_rate": at_risk_rate,
        "average_progress": average_progress,
        "median_progress": median_progress,
        "best_course": by_completion[0]["course_name"] if by_completion else None,
        "most_attention_course": ranking[0]["course_name"] if ranking else None,
        "top_next_action": top_action.action if top_action else None,
        "course_ranking": ranking,
        "insights": insights,
        "recommendations": recommendations,
        "is_grace_period": result.is_grace_period,
    }

    if directory is not None:
        with_contact = len({
            learner.identity for learner in result.at_risk_learners
            if directory.has_contact(learner.email)
        })
        summary["contact_coverage"] = percentage(with_contact, at_risk_count)
        if at_risk_count and with_contact < at_risk_count and not result.is_grace_period:
            recommendations.append("Add missing Slack IDs to the learner directory before outreach.")

    return summary
