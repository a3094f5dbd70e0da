import enum
import logging
from dataclasses import dataclass

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB

from careerflow.app.models import Base
from careerflow.app.models.history_record import generate_record_id, utc_now

log = logging.getLogger(__name__)


class InterviewStatus(str, enum.Enum):
    """Lifecycle states of a mock interview."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class InterviewChannel(str, enum.Enum):
    """How the candidate interacts with the interviewer."""

    TEXT = "text"
    VOICE = "voice"


@dataclass
class InterviewSessionData:
    """Dataclass to hold data for InterviewSession initialization."""

    job_description: str
    channel: InterviewChannel = InterviewChannel.TEXT
    resume_text: str | None = None


class InterviewSession(Base):
    """Server-side state of one mock interview.

    Attributes:
        id (str): Opaque generated identifier.
        user_id (int): The owning user.
        status (InterviewStatus): Current lifecycle state.
        channel (InterviewChannel): Interaction channel chosen at start.
        job_description (str): Immutable for the session.
        resume_text (str | None): Immutable, used to personalize questions.
        question_count (int): Assistant questions asked, excluding the opening greeting.
        conversation_summary (str): Model-maintained summary, advisory only.
        current_question (str): The most recent question. Empty once completed.
        is_over (bool): True once the session is terminal.
        last_score (float | None): Per-turn score, the aggregate once completed.
        last_feedback (str | None): Per-turn feedback, the final summary once completed.
        messages (list[dict]): Append-only transcript of `{role, content, feedback?, score?}`.
        record_id (str | None): The MockInterviewRecord written on completion.
        version (int): Optimistic concurrency counter.
        created_at (datetime): Creation timestamp.
        updated_at (datetime): Last transition timestamp.

    Notes:
        1. `messages` is always reassigned, never mutated in place, so the JSON
           column change is tracked.
        2. `version` is the mapper's version_id_col; a commit racing another
           commit on the same row raises StaleDataError.

    """

    __tablename__ = "interview_sessions"

    id = Column(String(36), primary_key=True, default=generate_record_id)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(
        Enum(InterviewStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=InterviewStatus.NOT_STARTED,
    )
    channel = Column(
        Enum(InterviewChannel, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=InterviewChannel.TEXT,
    )
    job_description = Column(Text, nullable=False)
    resume_text = Column(Text, nullable=True)
    question_count = Column(Integer, nullable=False, default=0)
    conversation_summary = Column(Text, nullable=False, default="")
    current_question = Column(Text, nullable=False, default="")
    is_over = Column(Boolean, nullable=False, default=False)
    last_score = Column(Float, nullable=True)
    last_feedback = Column(Text, nullable=True)
    messages = Column(JSONB().with_variant(JSON, "sqlite"), nullable=False)
    record_id = Column(String(36), nullable=True)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __init__(self, user_id: int, data: InterviewSessionData):
        _msg = f"Initializing InterviewSession for user_id: {user_id}"
        log.debug(_msg)

        self.user_id = user_id
        self.job_description = data.job_description
        self.channel = data.channel
        self.resume_text = data.resume_text
        self.status = InterviewStatus.NOT_STARTED
        self.question_count = 0
        self.conversation_summary = ""
        self.current_question = ""
        self.is_over = False
        self.messages = []
