import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from careerflow.app.api.routes.html_fragments import render_roadmap, roadmap_segments
from careerflow.app.api.routes.route_logic import history_store, settings_crud
from careerflow.app.api.routes.route_logic.error_responses import error_response
from careerflow.app.api.routes.route_logic.history_store import HistoryCollection
from careerflow.app.api.routes.route_logic.text_parsing import parse_roadmap_segments
from careerflow.app.api.routes.route_models import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    RoadmapRequest,
    RoadmapResponse,
)
from careerflow.app.core.auth import get_current_user_from_cookie
from careerflow.app.core.config import Settings, get_settings
from careerflow.app.core.exceptions import PersistenceError
from careerflow.app.database.database import get_db
from careerflow.app.llm.models import RoadmapInput, RoadmapSection
from careerflow.app.llm.orchestration import (
    generate_learning_roadmap,
    generation_policy_from_settings,
)
from careerflow.app.models.skill_gap_roadmap import SkillGapRoadmap, SkillGapRoadmapData
from careerflow.app.models.user import User

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/roadmaps", tags=["roadmaps"])


def roadmap_response(record: SkillGapRoadmap) -> RoadmapResponse:
    """Build the response for a saved roadmap, with its display segments."""
    return RoadmapResponse(
        id=record.id,
        target_role=record.target_role,
        job_description=record.job_description,
        learning_roadmap=record.roadmap,
        segments=[RoadmapSection(**segment) for segment in roadmap_segments(record)],
        created_at=record.created_at,
    )


@router.post("", response_model=RoadmapResponse)
async def create_roadmap(
    request: Request,
    body: RoadmapRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user_from_cookie)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> RoadmapResponse | Response:
    """Generate a 30-day learning roadmap for a target role and save it.

    Args:
        request (Request): The incoming request.
        body (RoadmapRequest): The target role and job description.
        db (Session): The database session.
        current_user (User): The authenticated user.
        settings (Settings): Application settings.

    Returns:
        RoadmapResponse | Response: The roadmap, or the roadmap accordion for HTMX
            requests, or an error response.

    Notes:
        1. Generate the roadmap.
        2. Save it. A save failure is reported in `persistence_error`; the
           roadmap is still returned.

    Network access:
        - This endpoint makes a network request to the LLM endpoint.

    """
    _msg = f"create_roadmap starting for user {current_user.id}"
    log.debug(_msg)
    try:
        llm_config = settings_crud.get_llm_config(db, current_user.id, settings)
        result = await generate_learning_roadmap(
            RoadmapInput(target_role=body.target_role, job_description=body.job_description),
            llm_config=llm_config,
            policy=generation_policy_from_settings(settings),
        )
    except Exception as e:
        return error_response(request, e, "Roadmap generation")

    record = SkillGapRoadmap(
        user_id=current_user.id,
        data=SkillGapRoadmapData(
            target_role=body.target_role.strip(),
            job_description=body.job_description.strip(),
            roadmap=result.learning_roadmap,
            sections=[section.model_dump() for section in result.sections],
        ),
    )
    try:
        history_store.append_record(db, record)
    except PersistenceError as e:
        segments = result.sections or [
            RoadmapSection(**segment) for segment in parse_roadmap_segments(result.learning_roadmap)
        ]
        return RoadmapResponse(
            target_role=body.target_role.strip(),
            job_description=body.job_description.strip(),
            learning_roadmap=result.learning_roadmap,
            segments=segments,
            persistence_error=str(e),
        )

    if "HX-Request" in request.headers:
        return HTMLResponse(render_roadmap(record))
    return roadmap_response(record)


@router.get("")
def list_roadmaps(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user_from_cookie)],
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> list[RoadmapResponse]:
    """List the user's saved roadmaps, newest first."""
    records = history_store.list_records(
        db,
        HistoryCollection.SKILL_GAP_ROADMAPS,
        current_user.id,
        limit=limit,
    )
    return [roadmap_response(record) for record in records]


@router.delete("", response_model=BulkDeleteResponse)
def delete_roadmaps(
    request: Request,
    body: BulkDeleteRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user_from_cookie)],
) -> BulkDeleteResponse | Response:
    """Delete selected roadmaps. Unknown ids reject the whole batch."""
    try:
        deleted = history_store.delete_records(
            db,
            HistoryCollection.SKILL_GAP_ROADMAPS,
            current_user.id,
            body.ids,
        )
    except Exception as e:
        return error_response(request, e, "Deleting roadmaps")
    return BulkDeleteResponse(deleted=deleted)
