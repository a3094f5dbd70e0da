import logging
from enum import Enum

from pydantic import BaseModel, Field

log = logging.getLogger(__name__)


class Tone(str, Enum):
    """Tones a LinkedIn post can be written in."""

    PROFESSIONAL = "professional"
    CASUAL = "casual"
    HYPE = "hype"


class LinkedInPostInput(BaseModel):
    """Input to the post generation flow.

    Attributes:
        project_details (str): The project or achievement to write about. May carry
            recalled previous posts appended under a "Previous posts" heading.
        tone (Tone): The desired tone of the post.

    """

    project_details: str
    tone: Tone


class LinkedInPostOutput(BaseModel):
    """Structured output of the post generation flow."""

    post: str = Field(..., description="The generated LinkedIn post.")


class ResumeAnalysisInput(BaseModel):
    """Input to the resume analysis flow.

    Attributes:
        resume_data_uri (str): The resume as `data:<mime>;base64,<payload>`.
        job_description (str): The target job description.

    """

    resume_data_uri: str
    job_description: str


class ResumeAnalysisOutput(BaseModel):
    """Structured output of the resume analysis flow. Every score lies in [0, 100]."""

    overall_score: float = Field(
        ...,
        ge=0,
        le=100,
        description="The overall ATS score of the resume (0-100), the weighted average of the three scores below.",
    )
    student_project_portfolio_score: float = Field(
        ...,
        ge=0,
        le=100,
        description="The score for the project portfolio and its relevance (0-100).",
    )
    technical_knowledge_score: float = Field(
        ...,
        ge=0,
        le=100,
        description="The score for technical knowledge and experience depth (0-100).",
    )
    keyword_score: float = Field(
        ...,
        ge=0,
        le=100,
        description="The score based on keyword matches and their context (0-100).",
    )
    keyword_matches: list[str] = Field(
        ...,
        description="Keywords from the job description found in the resume.",
    )
    keyword_gaps: list[str] = Field(
        ...,
        description="Critical keywords from the job description missing from the resume.",
    )
    suggestions: str = Field(
        ...,
        description="An introductory sentence followed by a numbered list of titled suggestions, one per line, formatted as 'N. Title: description'.",
    )


class RoadmapInput(BaseModel):
    """Input to the learning roadmap flow."""

    target_role: str
    job_description: str


class RoadmapSection(BaseModel):
    """One titled section of a learning roadmap."""

    title: str = Field(..., description="The section heading, e.g. 'Week 1: Foundational Bedrock'.")
    content: str = Field(..., description="The Markdown body of the section.")


class RoadmapOutput(BaseModel):
    """Structured output of the learning roadmap flow.

    Attributes:
        learning_roadmap (str): The full roadmap as Markdown.
        sections (list[RoadmapSection]): The same roadmap as ordered sections, when
            the model supplied them. Older or uncooperative output leaves this empty
            and is segmented by text parsing instead.

    """

    learning_roadmap: str = Field(
        ...,
        description="A 30-day learning roadmap tailored to the target role, including topics, resources, and GitHub links, as Markdown.",
    )
    sections: list[RoadmapSection] = Field(
        default_factory=list,
        description="The roadmap split into ordered sections: one for the introduction and one per week.",
    )


class InterviewTurnInput(BaseModel):
    """Input to one interview turn.

    Attributes:
        job_description (str): The job description for the target role.
        resume_text (str | None): Candidate resume text used to personalize questions.
        user_response (str): The candidate's latest answer.
        interview_question (str): The question being answered.
        previous_conversation (str | None): The model-maintained summary so far.
        transcript (str): The most recent transcript messages, rendered as text.
        question_count (int): Questions asked so far.

    """

    job_description: str
    resume_text: str | None = None
    user_response: str
    interview_question: str
    previous_conversation: str | None = None
    transcript: str = ""
    question_count: int = Field(..., ge=0)


class InterviewTurnOutput(BaseModel):
    """Structured output of one interview turn.

    The range and termination invariants are checked by the interview controller,
    not here, so that a violation is reported as a schema error instead of a
    pydantic validation error.

    """

    feedback: str = Field(..., description="Feedback on the candidate's response.")
    score: float = Field(..., description="The score for the response (0-100).")
    next_question: str = Field(
        ...,
        description="The next interview question. Empty string when the interview is over.",
    )
    conversation_history: str = Field(
        ...,
        description="A concise summary of the conversation so far, including the latest exchange.",
    )
    is_interview_over: bool = Field(
        ...,
        description="True when the interview has ended.",
    )


class LLMConfig(BaseModel):
    """Configuration for LLM client initialization."""

    llm_endpoint: str | None = None
    api_key: str | None = None
    llm_model_name: str | None = None
    temperature: float = 0.7


class GenerationPolicy(BaseModel):
    """Timeout and retry policy for a single structured generation.

    Attributes:
        timeout_seconds (float): Bound on one attempt.
        max_attempts (int): Attempts including the first.
        base_delay_seconds (float): Base of the jittered exponential backoff.

    """

    timeout_seconds: float = Field(default=45.0, gt=0)
    max_attempts: int = Field(default=3, ge=1)
    base_delay_seconds: float = Field(default=1.0, ge=0)
