import logging
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from careerflow.app.llm.models import RoadmapSection, Tone
from careerflow.app.models.interview_session import InterviewChannel, InterviewStatus

log = logging.getLogger(__name__)


# Shared
class BulkDeleteRequest(BaseModel):
    """Request model for deleting several history records at once.

    Attributes:
        ids (list[str]): The records to delete. All must exist and belong to the user.

    """

    ids: list[str] = Field(..., min_length=1)


class BulkDeleteResponse(BaseModel):
    deleted: int


# LinkedIn posts
class PostGenerateRequest(BaseModel):
    """Request model for generating a LinkedIn post.

    Attributes:
        project_details (str): The project or achievement to write about.
        tone (Tone): professional, casual, or hype.

    """

    project_details: str
    tone: Tone = Tone.PROFESSIONAL


class PostGenerateResponse(BaseModel):
    post: str


class PostSaveRequest(BaseModel):
    """Request model for saving a generated post to the user's history.

    Attributes:
        post (str): The post text, possibly edited by the user.
        tone (Tone): The tone it was generated with.
        project_details (str): The details it was generated from.

    """

    post: str = Field(..., min_length=1)
    tone: Tone
    project_details: str


class PostResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    post: str
    tone: str
    project_details: str
    created_at: datetime


# Resumes
class ResumeUploadRequest(BaseModel):
    """Request model for storing a resume.

    Attributes:
        data_uri (str): The resume as `data:<mime>;base64,<payload>`.
        file_name (str): The original file name.
        replace_resume_id (str | None): A stored resume to replace when the user is at the limit.

    """

    data_uri: str
    file_name: str = "resume"
    replace_resume_id: str | None = None


class StoredResumeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    file_name: str
    mime_type: str
    size_bytes: int
    created_at: datetime


# Resume analyses
class AnalysisRequest(BaseModel):
    """Request model for analyzing a resume.

    Attributes:
        job_description (str): The target job description.
        resume_data_uri (str | None): An inline resume as a data URI.
        resume_id (str | None): A stored resume to analyze instead.

    Notes:
        1. Exactly one of `resume_data_uri` and `resume_id` must be given.

    """

    job_description: str
    resume_data_uri: str | None = None
    resume_id: str | None = None

    @model_validator(mode="after")
    def check_one_resume_source(self) -> "AnalysisRequest":
        if bool(self.resume_data_uri) == bool(self.resume_id):
            raise ValueError("Provide either resume_data_uri or resume_id.")
        return self


class AnalysisResponse(BaseModel):
    """A saved (or, on a persistence failure, unsaved) resume analysis.

    Attributes:
        id (str | None): The history record id; None when saving failed.
        persistence_error (str | None): Why the analysis could not be saved.

    """

    model_config = ConfigDict(from_attributes=True)

    id: str | None = None
    overall_score: float
    student_project_portfolio_score: float
    technical_knowledge_score: float
    keyword_score: float
    keyword_matches: list[str]
    keyword_gaps: list[str]
    suggestions: str
    job_description: str
    created_at: datetime | None = None
    persistence_error: str | None = None


# Roadmaps
class RoadmapRequest(BaseModel):
    target_role: str
    job_description: str


class RoadmapResponse(BaseModel):
    """A generated learning roadmap.

    Attributes:
        segments (list[RoadmapSection]): Display segments, from the model's sections
            when present, otherwise parsed from the Markdown.

    """

    id: str | None = None
    target_role: str
    job_description: str
    learning_roadmap: str
    segments: list[RoadmapSection]
    created_at: datetime | None = None
    persistence_error: str | None = None


# Interviews
class InterviewStartRequest(BaseModel):
    """Request model for starting a mock interview.

    Attributes:
        job_description (str): The target job description.
        channel (InterviewChannel): text or voice.
        resume_id (str | None): A stored resume; required when the user has any.

    """

    job_description: str
    channel: InterviewChannel = InterviewChannel.TEXT
    resume_id: str | None = None


class TurnRequest(BaseModel):
    """Request model for answering the current interview question.

    Attributes:
        user_response (str): The candidate's answer.
        expected_question_count (int | None): The question count the client last saw.

    """

    user_response: str
    expected_question_count: int | None = Field(default=None, ge=0)


class EndInterviewRequest(BaseModel):
    expected_question_count: int | None = Field(default=None, ge=0)


class InterviewSessionResponse(BaseModel):
    """The state and message log of an interview session."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    status: InterviewStatus
    channel: InterviewChannel
    job_description: str
    question_count: int
    current_question: str
    is_over: bool
    last_score: float | None = None
    last_feedback: str | None = None
    messages: list[dict[str, Any]]
    record_id: str | None = None
    created_at: datetime
    updated_at: datetime
    persistence_error: str | None = None


class InterviewRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    session_id: str
    job_description: str
    transcript: str
    final_score: float
    final_feedback: str
    question_count: int
    created_at: datetime


class RecordSavedResponse(BaseModel):
    record_id: str


# History
class SuggestionItem(BaseModel):
    number: int | None
    title: str
    description: str


class AnalysisHistoryItem(AnalysisResponse):
    suggestion_intro: str = ""
    suggestion_items: list[SuggestionItem] = []


class InterviewHistoryItem(InterviewRecordResponse):
    transcript_lines: list[dict[str, str]] = []


class HistoryResponse(BaseModel):
    """All four history collections of the current user, newest first."""

    linkedin_posts: list[PostResponse]
    resume_analyses: list[AnalysisHistoryItem]
    skill_gap_roadmaps: list[RoadmapResponse]
    mock_interviews: list[InterviewHistoryItem]
