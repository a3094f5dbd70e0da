import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader

from careerflow.app.api.routes.route_logic.text_parsing import (
    parse_roadmap_segments,
    parse_suggestions,
    split_links,
)
from careerflow.app.models.interview_session import InterviewSession, InterviewStatus
from careerflow.app.models.resume_analysis import ResumeAnalysis
from careerflow.app.models.skill_gap_roadmap import SkillGapRoadmap

log = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent.parent / "templates"
env = Environment(loader=FileSystemLoader(str(TEMPLATES_DIR)), autoescape=True)


def _date_format_filter(value: datetime | None, format_string: str = "%Y-%m-%d") -> str:
    """Jinja2 filter to format a datetime object as a string."""
    if value is None:
        return ""
    return value.strftime(format_string)


env.filters["date_format"] = _date_format_filter
env.filters["split_links"] = split_links


def render_alert(detail: str) -> str:
    """Render an inline error alert for HTMX swaps."""
    template = env.get_template("partials/common/_alert.html")
    return template.render(detail=detail)


def roadmap_segments(roadmap: SkillGapRoadmap) -> list[dict[str, str]]:
    """Return the roadmap's display segments.

    Explicit sections supplied by the model are used when present; otherwise the
    Markdown is split on its bold headers.
    """
    if roadmap.sections:
        return [
            {"title": section.get("title", ""), "content": section.get("content", "")}
            for section in roadmap.sections
        ]
    return parse_roadmap_segments(roadmap.roadmap)


def render_roadmap(roadmap: SkillGapRoadmap) -> str:
    """Render a roadmap as an accordion of its segments.

    Args:
        roadmap (SkillGapRoadmap): The saved roadmap.

    Returns:
        str: HTML with one collapsible block per segment; URLs become links.

    """
    template = env.get_template("partials/history/_roadmap.html")
    return template.render(roadmap=roadmap, segments=roadmap_segments(roadmap))


def render_analysis(analysis: ResumeAnalysis) -> str:
    """Render an analysis with its scores, keywords, and numbered suggestions."""
    template = env.get_template("partials/history/_analysis.html")
    return template.render(
        analysis=analysis,
        suggestions=parse_suggestions(analysis.suggestions),
    )


def render_interview_turn(
    session: InterviewSession,
    record_id: str | None = None,
    persistence_error: str | None = None,
) -> str:
    """Render the chat fragment for the latest interview turn.

    Args:
        session (InterviewSession): The session after the transition.
        record_id (str | None): The saved record, once completed.
        persistence_error (str | None): Why the record could not be saved.

    Returns:
        str: HTML for the candidate's last answer and the interviewer's reply.
            A completed session renders the final score and feedback instead of
            an answer form.

    Notes:
        1. The fragment carries `question_count` so the next submission can send
           it back as `expected_question_count`.

    """
    messages: list[dict[str, Any]] = list(session.messages or [])
    latest_answer = next(
        (message for message in reversed(messages) if message.get("role") == "user"),
        None,
    )
    reply = messages[-1] if messages and messages[-1].get("role") == "assistant" else None

    template = env.get_template("partials/interview/_turn.html")
    return template.render(
        session=session,
        latest_answer=latest_answer,
        reply=reply,
        is_completed=session.status == InterviewStatus.COMPLETED,
        record_id=record_id,
        persistence_error=persistence_error,
    )
