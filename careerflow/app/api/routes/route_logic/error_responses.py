import logging

from cryptography.fernet import InvalidToken
from fastapi import HTTPException, Request, status
from fastapi.responses import HTMLResponse, JSONResponse, Response
from openai import AuthenticationError

from careerflow.app.api.routes.html_fragments import render_alert
from careerflow.app.core.exceptions import (
    GenerationError,
    GenerationTimeoutError,
    InputValidationError,
    InterviewStateError,
    PersistenceError,
    RecordNotFoundError,
)

log = logging.getLogger(__name__)

INVALID_API_KEY_DETAIL = "Invalid API key. Please update your settings."
LLM_AUTHENTICATION_DETAIL = "LLM authentication failed. Please check your API key in settings."


def classify_error(e: Exception) -> tuple[int, str]:
    """Map an exception to an HTTP status code and a user-facing message.

    Args:
        e (Exception): The exception raised by route logic.

    Returns:
        tuple[int, str]: The status code and the detail message.

    Notes:
        1. Subclasses are checked before their base classes, so a timeout maps
           to 504 rather than the 502 of other generation failures.
        2. Unrecognized exceptions map to 500 with a generic message.

    """
    if isinstance(e, InvalidToken):
        return status.HTTP_400_BAD_REQUEST, INVALID_API_KEY_DETAIL
    if isinstance(e, AuthenticationError):
        return status.HTTP_401_UNAUTHORIZED, LLM_AUTHENTICATION_DETAIL
    if isinstance(e, InputValidationError):
        return status.HTTP_422_UNPROCESSABLE_ENTITY, str(e)
    if isinstance(e, RecordNotFoundError):
        return status.HTTP_404_NOT_FOUND, str(e)
    if isinstance(e, InterviewStateError):
        return status.HTTP_409_CONFLICT, str(e)
    if isinstance(e, GenerationTimeoutError):
        return status.HTTP_504_GATEWAY_TIMEOUT, str(e)
    if isinstance(e, GenerationError):
        return status.HTTP_502_BAD_GATEWAY, str(e)
    if isinstance(e, PersistenceError):
        return status.HTTP_500_INTERNAL_SERVER_ERROR, str(e)
    if isinstance(e, ValueError):
        return status.HTTP_400_BAD_REQUEST, str(e)
    return status.HTTP_500_INTERNAL_SERVER_ERROR, f"An unexpected error occurred: {e!s}"


def error_response(request: Request, e: Exception, action: str) -> Response:
    """Convert an exception raised by route logic into a response.

    Args:
        request (Request): The incoming request, inspected for the `HX-Request` header.
        e (Exception): The exception to convert.
        action (str): What was being done, for the log message.

    Returns:
        Response: For HTMX requests, an inline alert fragment with status 200.
            Otherwise a JSON error body `{"detail": ...}` with the mapped status;
            validation errors also carry the offending `field`.

    Raises:
        HTTPException: Re-raised unchanged when `e` already is one.

    """
    if isinstance(e, HTTPException):
        raise e

    status_code, detail = classify_error(e)
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR and not isinstance(
        e, (GenerationError, PersistenceError)
    ):
        _msg = f"{action} failed unexpectedly: {e!s}"
        log.exception(_msg)
    else:
        _msg = f"{action} failed with {status_code}: {detail}"
        log.warning(_msg)

    if "HX-Request" in request.headers:
        return HTMLResponse(render_alert(detail), status_code=status.HTTP_200_OK)

    content: dict[str, str | None] = {"detail": detail}
    if isinstance(e, InputValidationError):
        content["field"] = e.field
    return JSONResponse(status_code=status_code, content=content)
