import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import JSON, Column, String, Text
from sqlalchemy.dialects.postgresql import JSONB

from careerflow.app.models import Base
from careerflow.app.models.history_record import HistoryRecordMixin

log = logging.getLogger(__name__)


@dataclass
class SkillGapRoadmapData:
    """Dataclass to hold data for SkillGapRoadmap initialization."""

    target_role: str
    job_description: str
    roadmap: str
    sections: list[dict[str, Any]] = field(default_factory=list)


class SkillGapRoadmap(HistoryRecordMixin, Base):
    """A generated 30-day learning roadmap.

    Attributes:
        target_role (str): The role the roadmap prepares for.
        job_description (str): The job description it was derived from.
        roadmap (str): The roadmap as Markdown.
        sections (list[dict]): Ordered `{title, content}` sections, when the model supplied them.

    """

    __tablename__ = "skill_gap_roadmaps"

    target_role = Column(String(255), nullable=False)
    job_description = Column(Text, nullable=False)
    roadmap = Column(Text, nullable=False)
    sections = Column(JSONB().with_variant(JSON, "sqlite"), nullable=False)

    def __init__(self, user_id: int, data: SkillGapRoadmapData):
        _msg = f"Initializing SkillGapRoadmap for user_id: {user_id}"
        log.debug(_msg)

        self.user_id = user_id
        self.target_role = data.target_role
        self.job_description = data.job_description
        self.roadmap = data.roadmap
        self.sections = list(data.sections)
