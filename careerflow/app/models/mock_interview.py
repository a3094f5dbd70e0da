import logging
from dataclasses import dataclass

from sqlalchemy import JSON, Column, Float, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB

from careerflow.app.models import Base
from careerflow.app.models.history_record import HistoryRecordMixin

log = logging.getLogger(__name__)


@dataclass
class MockInterviewRecordData:
    """Dataclass to hold data for MockInterviewRecord initialization."""

    session_id: str
    job_description: str
    transcript: str
    final_score: float
    final_feedback: str
    question_count: int
    messages: list[dict[str, str]] | None = None


class MockInterviewRecord(HistoryRecordMixin, Base):
    """A completed mock interview.

    Attributes:
        session_id (str): The interview session this record was produced from.
        job_description (str): The job description the interview targeted.
        transcript (str): Role-tagged transcript, one paragraph per message.
        final_score (float): Aggregate score, 0-100.
        final_feedback (str): Final summary feedback.
        question_count (int): Questions asked before completion.
        messages (list[dict] | None): The transcript as `{role, content}` messages.
            Records written before this column existed have only `transcript`.

    """

    __tablename__ = "mock_interviews"

    session_id = Column(String(36), nullable=False, unique=True, index=True)
    job_description = Column(Text, nullable=False)
    transcript = Column(Text, nullable=False)
    final_score = Column(Float, nullable=False)
    final_feedback = Column(Text, nullable=False)
    question_count = Column(Integer, nullable=False)
    messages = Column(JSONB().with_variant(JSON, "sqlite"), nullable=True)

    def __init__(self, user_id: int, data: MockInterviewRecordData):
        _msg = f"Initializing MockInterviewRecord for session: {data.session_id}"
        log.debug(_msg)

        self.user_id = user_id
        self.session_id = data.session_id
        self.job_description = data.job_description
        self.transcript = data.transcript
        self.final_score = data.final_score
        self.final_feedback = data.final_feedback
        self.question_count = data.question_count
        self.messages = data.messages
