import logging

from careerflow.app.api.routes.route_logic.resume_documents import (
    extract_text,
    parse_data_uri,
)
from careerflow.app.core.config import Settings
from careerflow.app.llm.invocation import create_llm, invoke_structured
from careerflow.app.llm.models import (
    GenerationPolicy,
    InterviewTurnInput,
    InterviewTurnOutput,
    LinkedInPostInput,
    LinkedInPostOutput,
    LLMConfig,
    ResumeAnalysisInput,
    ResumeAnalysisOutput,
    RoadmapInput,
    RoadmapOutput,
    Tone,
)
from careerflow.app.llm.prompt_assembly import (
    append_previous_posts,
    build_interview_prompt,
    build_linkedin_post_prompt,
    build_resume_analysis_prompt,
    build_roadmap_prompt,
    validate_job_description,
    validate_project_details,
    validate_target_role,
)

log = logging.getLogger(__name__)


def generation_policy_from_settings(settings: Settings) -> GenerationPolicy:
    """Build the timeout and retry policy from application settings."""
    return GenerationPolicy(
        timeout_seconds=settings.llm_timeout_seconds,
        max_attempts=settings.llm_max_attempts,
        base_delay_seconds=settings.llm_retry_base_delay_seconds,
    )


async def generate_linkedin_post(
    project_details: str,
    tone: Tone,
    previous_posts: list[str],
    llm_config: LLMConfig,
    policy: GenerationPolicy | None = None,
) -> LinkedInPostOutput:
    """Uses an LLM to write a LinkedIn post about a project.

    Args:
        project_details (str): The user's project or achievement details.
        tone (Tone): The desired tone.
        previous_posts (list[str]): Recently saved posts, most recent first, used to
            keep the user's voice consistent. May be empty.
        llm_config (LLMConfig): The resolved LLM configuration.
        policy (GenerationPolicy | None): Timeout and retry policy.

    Returns:
        LinkedInPostOutput: The generated post.

    Raises:
        InputValidationError: If the project details are shorter than 20 characters.
        GenerationError: If the generation fails.

    Notes:
        1. Validate the project details before anything else.
        2. Append the recalled posts under a "Previous posts" heading.
        3. Assemble the prompt and invoke the model.
        4. Nothing is persisted here; saving a post is a separate operation.

    Network access:
        - This function makes a network request to the LLM endpoint.

    """
    _msg = "generate_linkedin_post starting"
    log.debug(_msg)

    details = validate_project_details(project_details)
    post_input = LinkedInPostInput(
        project_details=append_previous_posts(details, previous_posts),
        tone=tone,
    )
    prompt, variables = build_linkedin_post_prompt(post_input)
    result = await invoke_structured(
        prompt,
        variables,
        LinkedInPostOutput,
        llm=create_llm(llm_config),
        policy=policy,
    )

    _msg = "generate_linkedin_post returning"
    log.debug(_msg)
    return result


async def analyze_resume(
    analysis_input: ResumeAnalysisInput,
    llm_config: LLMConfig,
    max_resume_bytes: int,
    policy: GenerationPolicy | None = None,
) -> ResumeAnalysisOutput:
    """Uses an LLM to score a resume against a job description.

    Args:
        analysis_input (ResumeAnalysisInput): The resume data URI and job description.
        llm_config (LLMConfig): The resolved LLM configuration.
        max_resume_bytes (int): Maximum decoded resume size.
        policy (GenerationPolicy | None): Timeout and retry policy.

    Returns:
        ResumeAnalysisOutput: Scores in [0, 100], keyword matches and gaps, and suggestions.

    Raises:
        InputValidationError: If the job description is too short or the resume is invalid.
        GenerationSchemaError: If the model returns a score outside [0, 100].
        GenerationError: If the generation fails.

    Notes:
        1. Validate the job description.
        2. Decode the data URI and extract the resume text.
        3. Assemble the prompt with the resume text and invoke the model.

    Network access:
        - This function makes a network request to the LLM endpoint.

    """
    _msg = "analyze_resume starting"
    log.debug(_msg)

    job_description = validate_job_description(analysis_input.job_description)
    document = parse_data_uri(analysis_input.resume_data_uri, max_bytes=max_resume_bytes)
    resume_text = extract_text(document)

    prompt, variables = build_resume_analysis_prompt(
        job_description=job_description,
        resume_text=resume_text,
        mime_type=document.mime_type,
    )
    result = await invoke_structured(
        prompt,
        variables,
        ResumeAnalysisOutput,
        llm=create_llm(llm_config),
        policy=policy,
    )

    _msg = "analyze_resume returning"
    log.debug(_msg)
    return result


async def generate_learning_roadmap(
    roadmap_input: RoadmapInput,
    llm_config: LLMConfig,
    policy: GenerationPolicy | None = None,
) -> RoadmapOutput:
    """Uses an LLM to produce a 30-day learning roadmap for a target role.

    Raises:
        InputValidationError: If the target role or job description is too short.
        GenerationError: If the generation fails.

    Network access:
        - This function makes a network request to the LLM endpoint.

    """
    _msg = "generate_learning_roadmap starting"
    log.debug(_msg)

    validated = RoadmapInput(
        target_role=validate_target_role(roadmap_input.target_role),
        job_description=validate_job_description(roadmap_input.job_description),
    )
    prompt, variables = build_roadmap_prompt(validated)
    result = await invoke_structured(
        prompt,
        variables,
        RoadmapOutput,
        llm=create_llm(llm_config),
        policy=policy,
    )

    _msg = "generate_learning_roadmap returning"
    log.debug(_msg)
    return result


async def advance_interview(
    turn_input: InterviewTurnInput,
    llm_config: LLMConfig,
    policy: GenerationPolicy | None = None,
) -> InterviewTurnOutput:
    """Uses an LLM to evaluate one interview answer and produce the next question.

    The output is returned unchecked; the interview controller validates it
    before changing any session state.

    Args:
        turn_input (InterviewTurnInput): The session context and latest response.
        llm_config (LLMConfig): The resolved LLM configuration.
        policy (GenerationPolicy | None): Timeout and retry policy.

    Returns:
        InterviewTurnOutput: Feedback, score, next question, summary and the
            termination flag.

    Network access:
        - This function makes a network request to the LLM endpoint.

    """
    _msg = f"advance_interview starting at question_count={turn_input.question_count}"
    log.debug(_msg)

    prompt, variables = build_interview_prompt(turn_input)
    result = await invoke_structured(
        prompt,
        variables,
        InterviewTurnOutput,
        llm=create_llm(llm_config),
        policy=policy,
    )

    _msg = "advance_interview returning"
    log.debug(_msg)
    return result
