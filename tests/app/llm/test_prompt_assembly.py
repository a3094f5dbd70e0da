import pytest

from careerflow.app.core.exceptions import InputValidationError
from careerflow.app.llm.models import (
    InterviewTurnInput,
    LinkedInPostInput,
    RoadmapInput,
    Tone,
)
from careerflow.app.llm.prompt_assembly import (
    append_previous_posts,
    build_interview_prompt,
    build_linkedin_post_prompt,
    build_resume_analysis_prompt,
    build_roadmap_prompt,
    require_min_length,
    validate_job_description,
    validate_project_details,
    validate_target_role,
    validate_user_response,
)

JOB_DESCRIPTION = "Data engineer maintaining Spark pipelines and Airflow DAGs on AWS."


def test_require_min_length_strips():
    assert require_min_length("  long enough  ", "field", 5, "Field") == "long enough"


@pytest.mark.parametrize("value", [None, "", "   ", "abc"])
def test_require_min_length_rejects(value):
    with pytest.raises(InputValidationError) as exc_info:
        require_min_length(value, "target_role", 5, "Target role")

    assert exc_info.value.field == "target_role"
    assert "Target role must be at least 5 characters." in str(exc_info.value)


def test_field_validators_minimums():
    assert validate_project_details("x" * 20) == "x" * 20
    assert validate_job_description("y" * 50) == "y" * 50
    assert validate_target_role("SRE") == "SRE"
    assert validate_user_response("z" * 10) == "z" * 10

    with pytest.raises(InputValidationError):
        validate_project_details("x" * 19)
    with pytest.raises(InputValidationError):
        validate_job_description("y" * 49)
    with pytest.raises(InputValidationError):
        validate_target_role("QA")
    with pytest.raises(InputValidationError):
        validate_user_response("z" * 9)


def test_append_previous_posts():
    assert append_previous_posts("My project", []) == "My project"
    assert append_previous_posts("My project", ["  First post ", "Second post"]) == (
        "My project\n\nPrevious posts:\nFirst post\n\nSecond post"
    )


def test_build_linkedin_post_prompt():
    prompt, variables = build_linkedin_post_prompt(
        LinkedInPostInput(project_details="Built a {templating} engine in Rust", tone=Tone.HYPE)
    )
    rendered = prompt.format(**variables)

    assert variables["tone"] == "hype"
    assert "Built a {templating} engine in Rust" in rendered
    assert '"post"' in rendered


def test_build_resume_analysis_prompt():
    prompt, variables = build_resume_analysis_prompt(
        job_description=JOB_DESCRIPTION,
        resume_text="Jane Doe, Spark and Airflow",
        mime_type="application/pdf",
    )
    rendered = prompt.format(**variables)

    assert JOB_DESCRIPTION in rendered
    assert "Jane Doe, Spark and Airflow" in rendered
    assert "application/pdf" in rendered
    assert "keyword_gaps" in rendered


def test_build_roadmap_prompt():
    prompt, variables = build_roadmap_prompt(
        RoadmapInput(target_role="Data Engineer", job_description=JOB_DESCRIPTION)
    )
    rendered = prompt.format(**variables)

    assert "Target Role: Data Engineer" in rendered
    assert "learning_roadmap" in rendered


def test_build_interview_prompt_without_resume_or_history():
    prompt, variables = build_interview_prompt(
        InterviewTurnInput(
            job_description=JOB_DESCRIPTION,
            user_response="Hello, thank you for having me.",
            interview_question="Please introduce yourself.",
            question_count=0,
        )
    )
    rendered = prompt.format(**variables)

    assert variables["resume_block"] == ""
    assert variables["previous_conversation"] == "(none)"
    assert variables["transcript"] == "(none)"
    assert "Candidate Resume:" not in rendered
    assert "Questions asked so far: 0" in rendered
    assert "Candidate response: Hello, thank you for having me." in rendered


def test_build_interview_prompt_with_resume_and_history():
    prompt, variables = build_interview_prompt(
        InterviewTurnInput(
            job_description=JOB_DESCRIPTION,
            resume_text="Jane Doe, five years of Spark",
            user_response="I partitioned the tables by date.",
            interview_question="How did you speed up the nightly job?",
            previous_conversation="Candidate introduced themselves.",
            transcript="Interviewer: How did you speed up the nightly job?",
            question_count=3,
        )
    )
    rendered = prompt.format(**variables)

    assert "Candidate Resume:" in rendered
    assert "Jane Doe, five years of Spark" in rendered
    assert "Candidate introduced themselves." in rendered
    assert "Questions asked so far: 3" in rendered
    assert "Current interview question: How did you speed up the nightly job?" in rendered
