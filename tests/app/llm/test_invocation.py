import asyncio

import httpx
import pytest
from langchain_core.messages import AIMessage
from langchain_core.prompts import ChatPromptTemplate
from langchain_core.runnables import RunnableLambda
from langchain_openai import ChatOpenAI
from openai import APIConnectionError, AuthenticationError, BadRequestError

from careerflow.app.core.exceptions import (
    GenerationError,
    GenerationSchemaError,
    GenerationTimeoutError,
)
from careerflow.app.llm.invocation import (
    create_llm,
    invoke_structured,
    parse_structured_output,
)
from careerflow.app.llm.models import GenerationPolicy, LinkedInPostOutput, LLMConfig

PROMPT = ChatPromptTemplate.from_messages([("human", "Write about {topic}")])
FAST_POLICY = GenerationPolicy(timeout_seconds=1.0, max_attempts=3, base_delay_seconds=0.0)
REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def _model(*responses):
    """A chat model stand-in returning or raising the queued responses in order."""
    queue = list(responses)
    calls = []

    def respond(prompt_value):
        calls.append(prompt_value.to_string())
        response = queue.pop(0)
        if isinstance(response, Exception):
            raise response
        return AIMessage(content=response)

    return RunnableLambda(respond), calls


def test_create_llm_defaults():
    llm = create_llm(LLMConfig(api_key="sk-test"))

    assert isinstance(llm, ChatOpenAI)
    assert llm.model_name == "gpt-4o"
    assert llm.max_retries == 0


def test_create_llm_openrouter():
    llm = create_llm(
        LLMConfig(
            llm_endpoint="https://openrouter.ai/api/v1",
            llm_model_name="anthropic/claude-3-haiku",
            api_key="sk-or",
        )
    )

    assert llm.model_name == "anthropic/claude-3-haiku"
    assert llm.openai_api_base == "https://openrouter.ai/api/v1"
    assert llm.default_headers["X-Title"] == "CareerFlow"


def test_create_llm_local_endpoint_without_key():
    llm = create_llm(LLMConfig(llm_endpoint="http://localhost:11434/v1", llm_model_name="llama3"))

    assert llm.openai_api_key.get_secret_value() == "not-needed"


def test_parse_structured_output_fenced_json():
    result = parse_structured_output('```json\n{"post": "Shipped it!"}\n```', LinkedInPostOutput)
    assert result.post == "Shipped it!"


@pytest.mark.parametrize("response", ["not json at all", '{"title": "missing post"}'])
def test_parse_structured_output_rejects(response):
    with pytest.raises(GenerationSchemaError):
        parse_structured_output(response, LinkedInPostOutput)


@pytest.mark.asyncio
async def test_invoke_structured_success():
    llm, calls = _model('{"post": "Hello LinkedIn"}')

    result = await invoke_structured(PROMPT, {"topic": "FastAPI"}, LinkedInPostOutput, llm, FAST_POLICY)

    assert result.post == "Hello LinkedIn"
    assert calls == ["Human: Write about FastAPI"]


@pytest.mark.asyncio
async def test_invoke_structured_retries_transient_errors():
    llm, calls = _model(
        APIConnectionError(request=REQUEST),
        APIConnectionError(request=REQUEST),
        '{"post": "Third time lucky"}',
    )

    result = await invoke_structured(PROMPT, {"topic": "retries"}, LinkedInPostOutput, llm, FAST_POLICY)

    assert result.post == "Third time lucky"
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_invoke_structured_transient_errors_exhausted():
    llm, calls = _model(*[APIConnectionError(request=REQUEST)] * 3)

    with pytest.raises(GenerationError) as exc_info:
        await invoke_structured(PROMPT, {"topic": "outage"}, LinkedInPostOutput, llm, FAST_POLICY)

    assert not isinstance(exc_info.value, GenerationTimeoutError)
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_invoke_structured_schema_error_not_retried():
    llm, calls = _model("I cannot answer in JSON.", '{"post": "unused"}')

    with pytest.raises(GenerationSchemaError):
        await invoke_structured(PROMPT, {"topic": "schema"}, LinkedInPostOutput, llm, FAST_POLICY)

    assert len(calls) == 1


@pytest.mark.asyncio
async def test_invoke_structured_provider_error_not_retried():
    error = BadRequestError(
        "context length exceeded",
        response=httpx.Response(400, request=REQUEST),
        body=None,
    )
    llm, calls = _model(error, '{"post": "unused"}')

    with pytest.raises(GenerationError):
        await invoke_structured(PROMPT, {"topic": "bad"}, LinkedInPostOutput, llm, FAST_POLICY)

    assert len(calls) == 1


@pytest.mark.asyncio
async def test_invoke_structured_authentication_error_passes_through():
    error = AuthenticationError(
        "Incorrect API key provided",
        response=httpx.Response(401, request=REQUEST),
        body=None,
    )
    llm, _ = _model(error)

    with pytest.raises(AuthenticationError):
        await invoke_structured(PROMPT, {"topic": "auth"}, LinkedInPostOutput, llm, FAST_POLICY)


@pytest.mark.asyncio
async def test_invoke_structured_timeout():
    attempts = []

    async def slow(prompt_value):
        attempts.append(prompt_value)
        await asyncio.sleep(1)
        return AIMessage(content='{"post": "too late"}')

    policy = GenerationPolicy(timeout_seconds=0.01, max_attempts=2, base_delay_seconds=0.0)

    with pytest.raises(GenerationTimeoutError):
        await invoke_structured(PROMPT, {"topic": "slow"}, LinkedInPostOutput, RunnableLambda(slow), policy)

    assert len(attempts) == 2
