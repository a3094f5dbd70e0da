import logging
from typing import Annotated, Any, Callable

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from careerflow.app.api.routes.route_logic import history_store
from careerflow.app.api.routes.route_logic.error_responses import error_response
from careerflow.app.api.routes.route_logic.history_store import HistoryCollection
from careerflow.app.api.routes.route_logic.text_parsing import (
    parse_suggestions,
    parse_transcript,
)
from careerflow.app.api.routes.route_models import (
    AnalysisHistoryItem,
    HistoryResponse,
    InterviewHistoryItem,
    PostResponse,
    RoadmapResponse,
    SuggestionItem,
)
from careerflow.app.api.routes.skill_gap import roadmap_response
from careerflow.app.core.auth import get_current_user_from_cookie
from careerflow.app.core.exceptions import RecordNotFoundError
from careerflow.app.database.database import get_db
from careerflow.app.models.mock_interview import MockInterviewRecord
from careerflow.app.models.resume_analysis import ResumeAnalysis
from careerflow.app.models.user import User

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/history", tags=["history"])

HistoryItem = PostResponse | AnalysisHistoryItem | RoadmapResponse | InterviewHistoryItem


def analysis_item(record: ResumeAnalysis) -> AnalysisHistoryItem:
    """Build an analysis history item with its parsed suggestion items."""
    suggestions = parse_suggestions(record.suggestions)
    return AnalysisHistoryItem.model_validate(record).model_copy(
        update={
            "suggestion_intro": suggestions["intro"],
            "suggestion_items": [
                SuggestionItem(**suggestion) for suggestion in suggestions["items"]
            ],
        }
    )


def interview_item(record: MockInterviewRecord) -> InterviewHistoryItem:
    """Build an interview history item.

    Transcript lines come from the stored messages, or from parsing the
    transcript text for records that have none.
    """
    return InterviewHistoryItem.model_validate(record).model_copy(
        update={"transcript_lines": record.messages or parse_transcript(record.transcript)}
    )


HISTORY_ITEM_BUILDERS: dict[HistoryCollection, Callable[[Any], HistoryItem]] = {
    HistoryCollection.LINKEDIN_POSTS: PostResponse.model_validate,
    HistoryCollection.RESUME_ANALYSES: analysis_item,
    HistoryCollection.SKILL_GAP_ROADMAPS: roadmap_response,
    HistoryCollection.MOCK_INTERVIEWS: interview_item,
}


@router.get("")
def get_history(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user_from_cookie)],
) -> HistoryResponse:
    """Return every history collection of the current user.

    Returns:
        HistoryResponse: Posts, analyses, roadmaps, and interview records, each
            newest first. Analyses carry their parsed suggestion items, roadmaps
            their segments, and interview records their transcript lines.

    Notes:
        1. This function performs four database reads.

    """
    _msg = f"get_history starting for user {current_user.id}"
    log.debug(_msg)

    collections = {
        collection.value: [
            build(record)
            for record in history_store.list_records(db, collection, current_user.id)
        ]
        for collection, build in HISTORY_ITEM_BUILDERS.items()
    }
    return HistoryResponse(**collections)


@router.get("/{collection}/{record_id}", response_model=None)
def get_history_record(
    request: Request,
    collection: HistoryCollection,
    record_id: str,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user_from_cookie)],
) -> HistoryItem | Response:
    """Return one record of the current user, shaped as in `GET /api/history`.

    Args:
        request (Request): The incoming request.
        collection (HistoryCollection): The collection the record belongs to.
        record_id (str): The record id.
        db (Session): The database session.
        current_user (User): The authenticated user.

    Returns:
        HistoryItem | Response: The history item, or a 404 error response when the
            record does not exist for this user.

    """
    try:
        record = history_store.get_record(db, collection, current_user.id, record_id)
    except RecordNotFoundError as e:
        return error_response(request, e, "Reading history record")
    return HISTORY_ITEM_BUILDERS[collection](record)
