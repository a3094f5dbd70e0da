import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from careerflow.app.api.dependencies import get_interview_for_user
from careerflow.app.api.routes.html_fragments import render_interview_turn
from careerflow.app.api.routes.route_logic import (
    history_store,
    interview_session,
    settings_crud,
)
from careerflow.app.api.routes.route_logic.error_responses import error_response
from careerflow.app.api.routes.route_logic.history_store import HistoryCollection
from careerflow.app.api.routes.route_logic.interview_session import TurnResult
from careerflow.app.api.routes.route_models import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    EndInterviewRequest,
    InterviewRecordResponse,
    InterviewSessionResponse,
    InterviewStartRequest,
    RecordSavedResponse,
    TurnRequest,
)
from careerflow.app.core.auth import get_current_user_from_cookie
from careerflow.app.core.config import Settings, get_settings
from careerflow.app.database.database import get_db
from careerflow.app.llm.orchestration import generation_policy_from_settings
from careerflow.app.models.interview_session import InterviewSession
from careerflow.app.models.user import User

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/interviews", tags=["interviews"])


def _turn_response(request: Request, result: TurnResult) -> InterviewSessionResponse | Response:
    if "HX-Request" in request.headers:
        return HTMLResponse(
            render_interview_turn(
                result.session,
                record_id=result.record_id,
                persistence_error=result.persistence_error,
            )
        )
    response = InterviewSessionResponse.model_validate(result.session)
    return response.model_copy(update={"persistence_error": result.persistence_error})


@router.post("", response_model=InterviewSessionResponse, status_code=status.HTTP_201_CREATED)
async def start_interview(
    request: Request,
    body: InterviewStartRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user_from_cookie)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> InterviewSessionResponse | Response:
    """Start a mock interview.

    Args:
        request (Request): The incoming request.
        body (InterviewStartRequest): Job description, channel, and stored resume.
        db (Session): The database session.
        current_user (User): The authenticated user.
        settings (Settings): Application settings.

    Returns:
        InterviewSessionResponse | Response: The new session with its first
            question, the chat fragment for HTMX requests, or an error response.

    Network access:
        - This endpoint makes a network request to the LLM endpoint.

    """
    _msg = f"start_interview starting for user {current_user.id}"
    log.debug(_msg)
    try:
        llm_config = settings_crud.get_llm_config(db, current_user.id, settings)
        result = await interview_session.start_interview(
            db,
            current_user.id,
            job_description=body.job_description,
            llm_config=llm_config,
            policy=interview_session.interview_policy_from_settings(settings),
            generation_policy=generation_policy_from_settings(settings),
            channel=body.channel,
            resume_id=body.resume_id,
        )
    except Exception as e:
        return error_response(request, e, "Starting interview")
    return _turn_response(request, result)


@router.get("/records")
def list_interview_records(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user_from_cookie)],
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> list[InterviewRecordResponse]:
    """List the user's saved interview records, newest first."""
    records = history_store.list_records(
        db,
        HistoryCollection.MOCK_INTERVIEWS,
        current_user.id,
        limit=limit,
    )
    return [InterviewRecordResponse.model_validate(record) for record in records]


@router.delete("/records", response_model=BulkDeleteResponse)
def delete_interview_records(
    request: Request,
    body: BulkDeleteRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user_from_cookie)],
) -> BulkDeleteResponse | Response:
    """Delete selected interview records. Unknown ids reject the whole batch."""
    try:
        deleted = history_store.delete_records(
            db,
            HistoryCollection.MOCK_INTERVIEWS,
            current_user.id,
            body.ids,
        )
    except Exception as e:
        return error_response(request, e, "Deleting interview records")
    return BulkDeleteResponse(deleted=deleted)


@router.get("/{interview_id}")
def get_interview(
    session: Annotated[InterviewSession, Depends(get_interview_for_user)],
) -> InterviewSessionResponse:
    """Return an interview session's state and message log."""
    return InterviewSessionResponse.model_validate(session)


@router.post("/{interview_id}/turns", response_model=InterviewSessionResponse)
async def submit_turn(
    request: Request,
    interview_id: str,
    body: TurnRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user_from_cookie)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> InterviewSessionResponse | Response:
    """Answer the current question.

    Notes:
        1. A stale `expected_question_count` or a concurrent submission is
           rejected with 409 and leaves the session unchanged.
        2. A failed generation leaves the session unchanged, so the same
           answer can be resubmitted.

    Network access:
        - This endpoint makes a network request to the LLM endpoint.

    """
    _msg = f"submit_turn starting for interview {interview_id}"
    log.debug(_msg)
    try:
        llm_config = settings_crud.get_llm_config(db, current_user.id, settings)
        result = await interview_session.submit_turn(
            db,
            current_user.id,
            interview_id,
            user_response=body.user_response,
            llm_config=llm_config,
            policy=interview_session.interview_policy_from_settings(settings),
            generation_policy=generation_policy_from_settings(settings),
            expected_question_count=body.expected_question_count,
        )
    except Exception as e:
        return error_response(request, e, "Interview turn")
    return _turn_response(request, result)


@router.post("/{interview_id}/end", response_model=InterviewSessionResponse)
async def end_interview(
    request: Request,
    interview_id: str,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user_from_cookie)],
    settings: Annotated[Settings, Depends(get_settings)],
    body: EndInterviewRequest | None = None,
) -> InterviewSessionResponse | Response:
    """Ask the interviewer to end the interview.

    Network access:
        - This endpoint makes a network request to the LLM endpoint.

    """
    try:
        llm_config = settings_crud.get_llm_config(db, current_user.id, settings)
        result = await interview_session.end_interview(
            db,
            current_user.id,
            interview_id,
            llm_config=llm_config,
            policy=interview_session.interview_policy_from_settings(settings),
            generation_policy=generation_policy_from_settings(settings),
            expected_question_count=body.expected_question_count if body else None,
        )
    except Exception as e:
        return error_response(request, e, "Ending interview")
    return _turn_response(request, result)


@router.post("/{interview_id}/record", response_model=RecordSavedResponse)
def save_interview_record(
    request: Request,
    interview_id: str,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user_from_cookie)],
) -> RecordSavedResponse | Response:
    """Save a completed interview to the history. Safe to repeat."""
    try:
        record_id = interview_session.save_interview_record(db, current_user.id, interview_id)
    except Exception as e:
        return error_response(request, e, "Saving interview record")

    if "HX-Request" in request.headers:
        session = interview_session.get_session(db, current_user.id, interview_id)
        return HTMLResponse(render_interview_turn(session, record_id=record_id))
    return RecordSavedResponse(record_id=record_id)
