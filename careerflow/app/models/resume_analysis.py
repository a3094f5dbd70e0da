import logging
from dataclasses import dataclass, field

from sqlalchemy import JSON, Column, Float, Text
from sqlalchemy.dialects.postgresql import JSONB

from careerflow.app.models import Base
from careerflow.app.models.history_record import HistoryRecordMixin

log = logging.getLogger(__name__)


@dataclass
class ResumeAnalysisData:
    """Dataclass to hold data for ResumeAnalysis initialization."""

    overall_score: float
    student_project_portfolio_score: float
    technical_knowledge_score: float
    keyword_score: float
    suggestions: str
    job_description: str
    keyword_matches: list[str] = field(default_factory=list)
    keyword_gaps: list[str] = field(default_factory=list)


class ResumeAnalysis(HistoryRecordMixin, Base):
    """The result of analyzing a resume against a job description.

    Attributes:
        overall_score (float): Weighted overall ATS score, 0-100.
        student_project_portfolio_score (float): Project portfolio score, 0-100.
        technical_knowledge_score (float): Technical depth score, 0-100.
        keyword_score (float): Keyword alignment score, 0-100.
        keyword_matches (list[str]): Job keywords found in the resume.
        keyword_gaps (list[str]): Job keywords missing from the resume.
        suggestions (str): Numbered optimization suggestions.
        job_description (str): The job description analyzed against.

    """

    __tablename__ = "resume_analyses"

    overall_score = Column(Float, nullable=False)
    student_project_portfolio_score = Column(Float, nullable=False)
    technical_knowledge_score = Column(Float, nullable=False)
    keyword_score = Column(Float, nullable=False)
    keyword_matches = Column(JSONB().with_variant(JSON, "sqlite"), nullable=False)
    keyword_gaps = Column(JSONB().with_variant(JSON, "sqlite"), nullable=False)
    suggestions = Column(Text, nullable=False)
    job_description = Column(Text, nullable=False)

    def __init__(self, user_id: int, data: ResumeAnalysisData):
        _msg = f"Initializing ResumeAnalysis for user_id: {user_id}"
        log.debug(_msg)

        self.user_id = user_id
        self.overall_score = data.overall_score
        self.student_project_portfolio_score = data.student_project_portfolio_score
        self.technical_knowledge_score = data.technical_knowledge_score
        self.keyword_score = data.keyword_score
        self.keyword_matches = list(data.keyword_matches)
        self.keyword_gaps = list(data.keyword_gaps)
        self.suggestions = data.suggestions
        self.job_description = data.job_description
