import pytest

from careerflow.app.api.routes.route_logic.resume_documents import build_data_uri
from careerflow.app.core.exceptions import GenerationSchemaError, InputValidationError
from careerflow.app.llm.models import (
    InterviewTurnInput,
    LLMConfig,
    ResumeAnalysisInput,
    RoadmapInput,
    Tone,
)
from careerflow.app.llm.orchestration import (
    advance_interview,
    analyze_resume,
    generate_learning_roadmap,
    generate_linkedin_post,
    generation_policy_from_settings,
)

LLM_CONFIG = LLMConfig(api_key="sk-test")
JOB_DESCRIPTION = "Frontend engineer building accessible React applications with TypeScript."
ANALYSIS = {
    "overall_score": 72,
    "student_project_portfolio_score": 65,
    "technical_knowledge_score": 80,
    "keyword_score": 70,
    "keyword_matches": ["React", "TypeScript"],
    "keyword_gaps": ["Accessibility"],
    "suggestions": "Strengthen these areas:\n1. Accessibility: Mention WCAG work.",
}


def test_generation_policy_from_settings(test_settings):
    policy = generation_policy_from_settings(test_settings)

    assert policy.max_attempts == 1
    assert policy.timeout_seconds == 5.0
    assert policy.base_delay_seconds == 0.0


@pytest.mark.asyncio
async def test_generate_linkedin_post_with_previous_posts(patch_llm):
    prompts = patch_llm({"post": "Excited to share my new CLI!"})

    result = await generate_linkedin_post(
        "Built a command line tool for tracking job applications",
        Tone.CASUAL,
        ["My last post about Docker"],
        LLM_CONFIG,
    )

    assert result.post == "Excited to share my new CLI!"
    assert "Tone: casual" in prompts[0]
    assert "Previous posts:\nMy last post about Docker" in prompts[0]


@pytest.mark.asyncio
async def test_generate_linkedin_post_short_details_not_sent(patch_llm):
    prompts = patch_llm()

    with pytest.raises(InputValidationError) as exc_info:
        await generate_linkedin_post("Too short", Tone.PROFESSIONAL, [], LLM_CONFIG)

    assert exc_info.value.field == "project_details"
    assert prompts == []


@pytest.mark.asyncio
async def test_analyze_resume(patch_llm):
    prompts = patch_llm(ANALYSIS)
    data_uri = build_data_uri("text/plain", b"Jane Doe\nReact and TypeScript developer")

    result = await analyze_resume(
        ResumeAnalysisInput(resume_data_uri=data_uri, job_description=JOB_DESCRIPTION),
        LLM_CONFIG,
        max_resume_bytes=4096,
    )

    assert result.overall_score == 72
    assert result.keyword_gaps == ["Accessibility"]
    assert "React and TypeScript developer" in prompts[0]
    assert "Resume (text/plain)" in prompts[0]


@pytest.mark.asyncio
async def test_analyze_resume_score_out_of_range(patch_llm):
    patch_llm({**ANALYSIS, "keyword_score": 140})

    with pytest.raises(GenerationSchemaError):
        await analyze_resume(
            ResumeAnalysisInput(
                resume_data_uri=build_data_uri("text/plain", b"Jane Doe"),
                job_description=JOB_DESCRIPTION,
            ),
            LLM_CONFIG,
            max_resume_bytes=4096,
        )


@pytest.mark.asyncio
async def test_analyze_resume_invalid_data_uri_not_sent(patch_llm):
    prompts = patch_llm()

    with pytest.raises(InputValidationError):
        await analyze_resume(
            ResumeAnalysisInput(resume_data_uri="not-a-data-uri", job_description=JOB_DESCRIPTION),
            LLM_CONFIG,
            max_resume_bytes=4096,
        )

    assert prompts == []


@pytest.mark.asyncio
async def test_generate_learning_roadmap(patch_llm):
    prompts = patch_llm(
        {
            "learning_roadmap": "**Week 1: Foundations**\nLearn hooks.",
            "sections": [{"title": "Week 1: Foundations", "content": "Learn hooks."}],
        }
    )

    result = await generate_learning_roadmap(
        RoadmapInput(target_role="  Frontend Engineer ", job_description=JOB_DESCRIPTION),
        LLM_CONFIG,
    )

    assert result.sections[0].title == "Week 1: Foundations"
    assert "Target Role: Frontend Engineer\n" in prompts[0]


@pytest.mark.asyncio
async def test_generate_learning_roadmap_without_sections(patch_llm):
    patch_llm({"learning_roadmap": "**Week 1: Foundations**\nLearn hooks."})

    result = await generate_learning_roadmap(
        RoadmapInput(target_role="Frontend Engineer", job_description=JOB_DESCRIPTION),
        LLM_CONFIG,
    )

    assert result.sections == []


@pytest.mark.asyncio
async def test_advance_interview_returns_unchecked_output(patch_llm):
    patch_llm(
        {
            "feedback": "Great start.",
            "score": 120,
            "next_question": "",
            "conversation_history": "Greeting.",
            "is_interview_over": False,
        }
    )

    result = await advance_interview(
        InterviewTurnInput(
            job_description=JOB_DESCRIPTION,
            user_response="Hello, thank you for having me.",
            interview_question="Please introduce yourself.",
            question_count=0,
        ),
        LLM_CONFIG,
    )

    assert result.score == 120
    assert result.next_question == ""
