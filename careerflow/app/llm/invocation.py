import asyncio
import json
import logging
import random
from typing import Any, TypeVar

from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_core.runnables import Runnable
from langchain_core.utils.json import parse_json_markdown
from langchain_openai import ChatOpenAI
from openai import (
    APIConnectionError,
    APIError,
    APITimeoutError,
    AuthenticationError,
    InternalServerError,
    RateLimitError,
)
from pydantic import BaseModel, ValidationError

from careerflow.app.core.exceptions import (
    GenerationError,
    GenerationSchemaError,
    GenerationTimeoutError,
)
from careerflow.app.llm.models import GenerationPolicy, LLMConfig

log = logging.getLogger(__name__)

OutputModel = TypeVar("OutputModel", bound=BaseModel)

DEFAULT_MODEL_NAME = "gpt-4o"

TRANSIENT_PROVIDER_ERRORS = (
    APIConnectionError,
    APITimeoutError,
    RateLimitError,
    InternalServerError,
)


def create_llm(llm_config: LLMConfig) -> ChatOpenAI:
    """Initialize the chat model client for a user's LLM configuration.

    Args:
        llm_config (LLMConfig): Endpoint, model name, decrypted API key and temperature.

    Returns:
        ChatOpenAI: The configured client.

    Notes:
        1. Fall back to the default model name when none is configured.
        2. A custom endpoint is passed as `openai_api_base`; OpenRouter endpoints
           also receive the attribution headers it asks for.
        3. A custom non-OpenRouter endpoint without a key (e.g. a local model
           server) gets a placeholder key to satisfy the client library.
        4. No network access happens until the client is invoked.

    """
    model_name = llm_config.llm_model_name if llm_config.llm_model_name else DEFAULT_MODEL_NAME

    llm_params: dict[str, Any] = {
        "model": model_name,
        "temperature": llm_config.temperature,
        "max_retries": 0,
    }
    llm_endpoint = llm_config.llm_endpoint
    if llm_endpoint:
        llm_params["openai_api_base"] = llm_endpoint
        if "openrouter.ai" in llm_endpoint:
            llm_params["default_headers"] = {
                "HTTP-Referer": "http://localhost:8000/",
                "X-Title": "CareerFlow",
            }

    if llm_config.api_key:
        llm_params["api_key"] = llm_config.api_key
    elif llm_endpoint and "openrouter.ai" not in llm_endpoint:
        llm_params["api_key"] = "not-needed"

    return ChatOpenAI(**llm_params)


def parse_structured_output(response_str: str, output_model: type[OutputModel]) -> OutputModel:
    """Parse a JSON-Markdown model response into the declared output shape.

    Args:
        response_str (str): The raw model response, JSON optionally fenced in ```json ... ```.
        output_model (type[BaseModel]): The declared output schema.

    Returns:
        BaseModel: The validated output.

    Raises:
        GenerationSchemaError: If the response is not JSON or does not match the schema.

    """
    try:
        parsed_json = parse_json_markdown(response_str)
        return output_model.model_validate(parsed_json)
    except (json.JSONDecodeError, ValidationError, ValueError, TypeError) as e:
        _msg = f"Failed to parse LLM response as {output_model.__name__}: {e!s}"
        log.warning(_msg)
        raise GenerationSchemaError(
            "The AI service returned an unexpected response. Please try again."
        ) from e


def _retry_delay(policy: GenerationPolicy, attempt: int) -> float:
    """Exponential backoff with jitter for the given 1-based attempt number."""
    base = policy.base_delay_seconds * (2 ** (attempt - 1))
    return random.uniform(base * 0.5, base * 1.5)


async def invoke_structured(
    prompt: ChatPromptTemplate,
    variables: dict[str, Any],
    output_model: type[OutputModel],
    llm: Runnable,
    policy: GenerationPolicy | None = None,
) -> OutputModel:
    """Invoke a prompt against the model and return validated structured output.

    Args:
        prompt (ChatPromptTemplate): The assembled prompt.
        variables (dict[str, Any]): Template variables for the prompt.
        output_model (type[BaseModel]): The declared output schema.
        llm (Runnable): The chat model, usually from `create_llm`.
        policy (GenerationPolicy | None): Timeout and retry policy. Defaults apply when None.

    Returns:
        BaseModel: An instance of `output_model`.

    Raises:
        GenerationTimeoutError: If every attempt timed out.
        GenerationSchemaError: If the response does not match `output_model`. Never retried.
        GenerationError: If the provider failed, or transient failures exhausted every attempt.
        AuthenticationError: Passed through unchanged so routes can report bad credentials.

    Notes:
        1. Build the chain `prompt | llm | StrOutputParser()` and invoke it,
           bounding each attempt with `policy.timeout_seconds`.
        2. Timeouts, connection errors, rate limits and provider 5xx responses are
           transient: wait a jittered, exponentially growing delay and try again,
           up to `policy.max_attempts` attempts in total.
        3. Any other provider error fails immediately.
        4. Parse and validate the response; a schema failure is raised at once.

    Network access:
        - This function makes network requests to the configured LLM endpoint.

    """
    policy = policy or GenerationPolicy()
    chain = prompt | llm | StrOutputParser()

    last_error: Exception | None = None
    for attempt in range(1, policy.max_attempts + 1):
        _msg = f"invoke_structured attempt {attempt}/{policy.max_attempts} for {output_model.__name__}"
        log.debug(_msg)
        try:
            response_str = await asyncio.wait_for(
                chain.ainvoke(variables),
                timeout=policy.timeout_seconds,
            )
        except AuthenticationError:
            raise
        except (TimeoutError, asyncio.TimeoutError, *TRANSIENT_PROVIDER_ERRORS) as e:
            last_error = e
            _msg = f"Transient LLM failure on attempt {attempt}/{policy.max_attempts}: {e!r}"
            log.warning(_msg)
            if attempt < policy.max_attempts:
                await asyncio.sleep(_retry_delay(policy, attempt))
            continue
        except APIError as e:
            _msg = f"LLM provider error: {e!s}"
            log.warning(_msg)
            raise GenerationError(f"The AI service failed: {e!s}") from e

        result = parse_structured_output(response_str, output_model)
        _msg = f"invoke_structured returning {output_model.__name__}"
        log.debug(_msg)
        return result

    if isinstance(last_error, (TimeoutError, asyncio.TimeoutError)):
        raise GenerationTimeoutError(
            f"The AI service did not respond within {policy.timeout_seconds:g} seconds. Please try again."
        ) from last_error
    raise GenerationError(
        "The AI service is temporarily unavailable. Please try again."
    ) from last_error
