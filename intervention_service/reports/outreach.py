"""Templated Slack outreach scripts for learners behind schedule."""

from datetime import date
from typing import Any, Dict, List, Optional
import structlog

from intervention_service.models.analysis import AnalysisResult
from intervention_service.models.learner import AtRiskLearner, RiskLevel
from intervention_service.reports.directory import LearnerDirectory
from intervention_service.utils.formatting import channel_slug

logger = structlog.get_logger()

OUTREACH_TEMPLATES: Dict[RiskLevel, Dict[str, str]] = {
    RiskLevel.HIGH: {
        "label": "Urgent",
        "title": "🚨 3 Weeks Behind - Urgent Intervention Required",
        "recommended_action": "Urgent intervention (3 weeks behind)",
        "message": (
            "Hi [NAME],\n\n"
            "I see you're about 3 weeks behind in {course_name}. The good news is you can still catch up! 🚀\n\n"
            "Let's schedule a 20-minute call this week to:\n"
            "• Create a catch-up plan that works for your schedule\n"
            "• Identify any blockers or challenges\n"
            "• Set up additional support resources\n\n"
            "You've got this - let's get you back on track!\n\n"
            "Best regards,\n[YOUR_NAME]\n"
        ),
        "personalized": (
            "Hi {first_name},\n\n"
            "I see you're about 3 weeks behind in {course_name}. The good news is you can still catch up! 🚀\n\n"
            "Let's schedule a 20-minute call this week to get you back on track.\n\n"
            "Best regards,\n[YOUR_NAME]\n"
        ),
    },
    RiskLevel.MEDIUM: {
        "label": "Check-in",
        "title": "⚠️ 2 Weeks Behind - Check-in Needed",
        "recommended_action": "Schedule check-in (2 weeks behind)",
        "message": (
            "Hi [NAME],\n\n"
            "Just checking in on your progress in {course_name}. I noticed you're about 2 weeks behind the current schedule.\n\n"
            "How are things going? Any questions or challenges I can help with?\n\n"
            "If you'd like, we can set up a quick 15-minute check-in to:\n"
            "• Review your progress\n"
            "• Adjust your learning plan if needed\n"
            "• Make sure you have everything you need to succeed\n\n"
            "Let me know how I can support you!\n\n"
            "Best regards,\n[YOUR_NAME]\n"
        ),
        "personalized": (
            "Hi {first_name},\n\n"
            "Just checking in on your {course_name} progress! How are things going?\n\n"
            "Let me know if you need any support!\n\n"
            "Best regards,\n[YOUR_NAME]\n"
        ),
    },
    RiskLevel.LOW: {
        "label": "Nudge",
        "title": "💛 1 Week Behind - Gentle Nudge",
        "recommended_action": "Gentle nudge (1 week behind)",
        "message": (
            "Hi [NAME],\n\n"
            "Hope you're doing well! I noticed you're about a week behind in {course_name}.\n\n"
            "No worries - this is totally manageable! 💪\n\n"
            "Just wanted to check:\n"
            "• Are you finding the material challenging?\n"
            "• Do you need any clarification on recent topics?\n"
            "• Is your current pace working for your schedule?\n\n"
            "Feel free to reach out if you need any support. You're doing great!\n\n"
            "Best regards,\n[YOUR_NAME]\n"
        ),
        "personalized": (
            "Hi {first_name},\n\n"
            "Hope you're doing well! Just a gentle nudge on {course_name} - you're only about a week behind, totally manageable! 💪\n\n"
            "Let me know if you need any support!\n\n"
            "Best regards,\n[YOUR_NAME]\n"
        ),
    },
}

RISK_ORDER = [RiskLevel.HIGH, RiskLevel.MEDIUM, RiskLevel.LOW]

OUTREACH_TIPS = [
    "**Be supportive, not punitive** - Focus on helping rather than highlighting problems",
    "**Personalize when possible** - Use their name and specific course details",
    "**Offer concrete help** - Mention specific support options",
    "**Follow up appropriately** - If no response in 3-5 days, send a gentle follow-up",
    "**Track engagement** - Note who responds and what support they need",
]


def recommended_action(level: RiskLevel) -> str:
    return OUTREACH_TEMPLATES[level]["recommended_action"]


def outreach_filename(report_date: date) -> str:
    return f"slack-outreach-scripts-by-course-{report_date.isoformat()}.md"


def render_template(template: str, values: Dict[str, Any]) -> str:
    """Substitute {placeholders} present in `values`, leaving others untouched."""
    message = template
    for key, value in values.items():
        message = message.replace(f"{{{key}}}", str(value))
    return message


class OutreachScriptGenerator:
    """Builds Markdown outreach scripts grouped by course and risk level."""

    def __init__(self, directory: Optional[LearnerDirectory] = None):
        self.directory = directory or LearnerDirectory()

    def generate(self, result: AnalysisResult) -> str:
        """Render the full outreach document for an analysis result."""
        parts = ["# Slack Outreach Scripts by Course\n\n", self._directory_status()]

        if result.is_grace_period:
            parts.append(
                f"> **Grace period active (week {result.current_week}).** "
                "Learners in the first weeks of the program are not flagged for outreach; "
                "behind-schedule counts are informational only.\n\n"
            )
            parts.append(self._tips())
            logger.info("Outreach scripts suppressed during grace period", current_week=result.current_week)
            return "".join(parts)

        by_course = self._group_by_course(result.at_risk_learners)
        for course_name, learners in by_course.items():
            parts.append(self._course_section(course_name, learners))

        parts.append(self._tips())
        parts.append(self._bulk_actions(by_course))

        logger.info(
            "Outreach scripts generated",
            courses=len(by_course),
            learners=len(result.at_risk_learners),
            directory_entries=len(self.directory)
        )
        return "".join(parts)

    def _directory_status(self) -> str:
        if len(self.directory):
            status = f"✅ {len(self.directory)} learners with contact info"
        else:
            status = "❌ No learner directory uploaded"
        return f"**Directory Status:** {status}\n\n"

    def _group_by_course(self, learners: List[AtRiskLearner]) -> Dict[str, List[AtRiskLearner]]:
        groups: Dict[str, List[AtRiskLearner]] = {}
        for learner in learners:
            groups.setdefault(learner.course_name, []).append(learner)
        return groups

    def _course_section(self, course_name: str, learners: List[AtRiskLearner]) -> str:
        by_level = {
            level: [learner for learner in learners if learner.risk_level == level]
            for level in RISK_ORDER
        }
        counts = ", ".join(
            f"{len(by_level[level])} {OUTREACH_TEMPLATES[level]['label']}" for level in RISK_ORDER
        )
        section = f"## {course_name}\n**Actionable Learners:** {len(learners)} ({counts})\n\n"

        for level in RISK_ORDER:
            if by_level[level]:
                section += self._risk_section(course_name, level, by_level[level])

        return section + "---\n\n"

    def _risk_section(self, course_name: str, level: RiskLevel, learners: List[AtRiskLearner]) -> str:
        template = OUTREACH_TEMPLATES[level]
        lines = [f"### {template['title']} ({len(learners)} learners)\n"]

        for learner in learners:
            contact = self.directory.contact_for(learner.email)
            name = contact.full_name or learner.email
            slack = f" - Slack: {contact.slack_mention}" if contact.slack_id else ""
            lines.append(f"**{name}** ({learner.email}){slack}\n")
        lines.append("\n")

        lines.append("**Template Message:**\n```\n")
        lines.append(render_template(template["message"], {"course_name": course_name}))
        lines.append("```\n\n")

        if len(self.directory):
            lines.append("**Personalized Messages:**\n")
            for learner in learners:
                contact = self.directory.contact_for(learner.email)
                message = render_template(template["personalized"], {
                    "first_name": contact.first_name or "there",
                    "course_name": course_name,
                })
                lines.append(f"\n**For {contact.full_name or learner.email}:**\n```\n{message}```\n")
                if contact.slack_id:
                    lines.append(f"**Slack mention:** {contact.slack_mention}\n")
            lines.append("\n")

        return "".join(lines)

    def _tips(self) -> str:
        tips = "".join(f"{index}. {tip}\n" for index, tip in enumerate(OUTREACH_TIPS, start=1))
        return f"## General Outreach Tips\n{tips}\n"

    def _bulk_actions(self, by_course: Dict[str, List[AtRiskLearner]]) -> str:
        parts = ["## Bulk Actions by Course\n"]
        for course_name in by_course:
            parts.append(
                f"### {course_name}\n"
                f"- Create a dedicated Slack channel: #{channel_slug(course_name)}-support\n"
                "- Schedule virtual office hours for this course\n"
                "- Share course-specific resources and tips\n"
                "- Consider peer mentoring within this course\n\n"
            )
        return "".join(parts)
