import logging
from typing import Any

from langchain_core.output_parsers import PydanticOutputParser
from langchain_core.prompts import ChatPromptTemplate

from careerflow.app.core.exceptions import InputValidationError
from careerflow.app.llm.models import (
    InterviewTurnInput,
    InterviewTurnOutput,
    LinkedInPostInput,
    LinkedInPostOutput,
    ResumeAnalysisOutput,
    RoadmapInput,
    RoadmapOutput,
)
from careerflow.app.llm.prompts import (
    INTERVIEW_HUMAN_PROMPT,
    INTERVIEW_RESUME_BLOCK,
    INTERVIEW_SYSTEM_PROMPT,
    LINKEDIN_POST_HUMAN_PROMPT,
    LINKEDIN_POST_SYSTEM_PROMPT,
    RESUME_ANALYSIS_HUMAN_PROMPT,
    RESUME_ANALYSIS_SYSTEM_PROMPT,
    ROADMAP_HUMAN_PROMPT,
    ROADMAP_SYSTEM_PROMPT,
)

log = logging.getLogger(__name__)

MIN_PROJECT_DETAILS_LENGTH = 20
MIN_JOB_DESCRIPTION_LENGTH = 50
MIN_TARGET_ROLE_LENGTH = 3
MIN_USER_RESPONSE_LENGTH = 10

PromptWithVariables = tuple[ChatPromptTemplate, dict[str, Any]]


def require_min_length(value: str | None, field: str, minimum: int, label: str) -> str:
    """Reject a missing or under-length form field.

    Args:
        value (str | None): The submitted value.
        field (str): The form field name reported back with the error.
        minimum (int): Minimum length after stripping whitespace.
        label (str): Human-readable field name for the message.

    Returns:
        str: The value stripped of leading/trailing whitespace.

    Raises:
        InputValidationError: If the value is missing or shorter than `minimum`.

    """
    stripped = (value or "").strip()
    if len(stripped) < minimum:
        _msg = f"Rejected {field}: {len(stripped)} characters, minimum is {minimum}"
        log.warning(_msg)
        raise InputValidationError(
            f"{label} must be at least {minimum} characters.",
            field=field,
        )
    return stripped


def validate_job_description(job_description: str | None) -> str:
    return require_min_length(
        job_description,
        "job_description",
        MIN_JOB_DESCRIPTION_LENGTH,
        "Job description",
    )


def validate_project_details(project_details: str | None) -> str:
    return require_min_length(
        project_details,
        "project_details",
        MIN_PROJECT_DETAILS_LENGTH,
        "Project details",
    )


def validate_target_role(target_role: str | None) -> str:
    return require_min_length(
        target_role,
        "target_role",
        MIN_TARGET_ROLE_LENGTH,
        "Target role",
    )


def validate_user_response(user_response: str | None) -> str:
    return require_min_length(
        user_response,
        "user_response",
        MIN_USER_RESPONSE_LENGTH,
        "Response",
    )


def append_previous_posts(project_details: str, previous_posts: list[str]) -> str:
    """Append recalled posts to the project details so the model keeps the user's voice.

    Args:
        project_details (str): The user's project details.
        previous_posts (list[str]): Recalled posts, most recent first.

    Returns:
        str: The project details, followed by a "Previous posts" block when any
            posts were recalled. Unchanged otherwise.

    """
    if not previous_posts:
        return project_details
    joined = "\n\n".join(post.strip() for post in previous_posts)
    return f"{project_details}\n\nPrevious posts:\n{joined}"


def _build_prompt(system_prompt: str, human_prompt: str, output_model) -> ChatPromptTemplate:
    parser = PydanticOutputParser(pydantic_object=output_model)
    return ChatPromptTemplate.from_messages(
        [
            ("system", system_prompt),
            ("human", human_prompt),
        ]
    ).partial(format_instructions=parser.get_format_instructions())


def build_linkedin_post_prompt(post_input: LinkedInPostInput) -> PromptWithVariables:
    """Assemble the post generation prompt.

    Args:
        post_input (LinkedInPostInput): Project details (possibly with recalled
            posts appended) and tone.

    Returns:
        PromptWithVariables: The prompt template and the variables to invoke it with.

    Notes:
        1. Field values are passed as template variables, never formatted into the
           template text, so braces in user input need no escaping.

    """
    _msg = f"Building LinkedIn post prompt with tone '{post_input.tone.value}'"
    log.debug(_msg)
    prompt = _build_prompt(
        LINKEDIN_POST_SYSTEM_PROMPT,
        LINKEDIN_POST_HUMAN_PROMPT,
        LinkedInPostOutput,
    )
    variables = {
        "project_details": post_input.project_details,
        "tone": post_input.tone.value,
    }
    return prompt, variables


def build_resume_analysis_prompt(
    job_description: str,
    resume_text: str,
    mime_type: str,
) -> PromptWithVariables:
    """Assemble the resume analysis prompt.

    Args:
        job_description (str): The validated job description.
        resume_text (str): Text extracted from the resume document.
        mime_type (str): The document's MIME type, shown to the model for context.

    Returns:
        PromptWithVariables: The prompt template and the variables to invoke it with.

    """
    _msg = "Building resume analysis prompt"
    log.debug(_msg)
    prompt = _build_prompt(
        RESUME_ANALYSIS_SYSTEM_PROMPT,
        RESUME_ANALYSIS_HUMAN_PROMPT,
        ResumeAnalysisOutput,
    )
    variables = {
        "job_description": job_description,
        "resume_text": resume_text,
        "mime_type": mime_type,
    }
    return prompt, variables


def build_roadmap_prompt(roadmap_input: RoadmapInput) -> PromptWithVariables:
    _msg = f"Building roadmap prompt for role '{roadmap_input.target_role}'"
    log.debug(_msg)
    prompt = _build_prompt(ROADMAP_SYSTEM_PROMPT, ROADMAP_HUMAN_PROMPT, RoadmapOutput)
    variables = {
        "target_role": roadmap_input.target_role,
        "job_description": roadmap_input.job_description,
    }
    return prompt, variables


def build_interview_prompt(turn_input: InterviewTurnInput) -> PromptWithVariables:
    """Assemble the prompt for one interview turn.

    Args:
        turn_input (InterviewTurnInput): The session context and the latest response.

    Returns:
        PromptWithVariables: The prompt template and the variables to invoke it with.

    Notes:
        1. The resume block is omitted entirely when no resume text is available.
        2. Missing summary or transcript render as "(none)" so the model is not
           shown an empty, ambiguous slot.

    """
    _msg = f"Building interview prompt at question_count={turn_input.question_count}"
    log.debug(_msg)
    prompt = _build_prompt(
        INTERVIEW_SYSTEM_PROMPT,
        INTERVIEW_HUMAN_PROMPT,
        InterviewTurnOutput,
    )
    resume_block = ""
    if turn_input.resume_text and turn_input.resume_text.strip():
        resume_block = INTERVIEW_RESUME_BLOCK.format(resume_text=turn_input.resume_text)

    variables = {
        "job_description": turn_input.job_description,
        "resume_block": resume_block,
        "question_count": turn_input.question_count,
        "previous_conversation": turn_input.previous_conversation or "(none)",
        "transcript": turn_input.transcript or "(none)",
        "interview_question": turn_input.interview_question,
        "user_response": turn_input.user_response,
    }
    return prompt, variables
