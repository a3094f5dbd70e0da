import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from careerflow.app.api.routes.html_fragments import render_analysis
from careerflow.app.api.routes.route_logic import history_store, resume_store, settings_crud
from careerflow.app.api.routes.route_logic.error_responses import error_response
from careerflow.app.api.routes.route_logic.history_store import HistoryCollection
from careerflow.app.api.routes.route_models import (
    AnalysisRequest,
    AnalysisResponse,
    BulkDeleteRequest,
    BulkDeleteResponse,
)
from careerflow.app.core.auth import get_current_user_from_cookie
from careerflow.app.core.config import Settings, get_settings
from careerflow.app.core.exceptions import PersistenceError
from careerflow.app.database.database import get_db
from careerflow.app.llm.models import ResumeAnalysisInput
from careerflow.app.llm.orchestration import analyze_resume, generation_policy_from_settings
from careerflow.app.models.resume_analysis import ResumeAnalysis, ResumeAnalysisData
from careerflow.app.models.user import User

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analyses", tags=["analyses"])


@router.post("", response_model=AnalysisResponse)
async def create_analysis(
    request: Request,
    body: AnalysisRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user_from_cookie)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AnalysisResponse | Response:
    """Analyze a resume against a job description and save the result.

    Args:
        request (Request): The incoming request.
        body (AnalysisRequest): The job description and either an inline data URI
            or a stored resume id.
        db (Session): The database session.
        current_user (User): The authenticated user.
        settings (Settings): Application settings.

    Returns:
        AnalysisResponse | Response: The analysis, the analysis card for HTMX
            requests, or an error response.

    Notes:
        1. Resolve the resume: the stored resume's data URI, or the inline one.
        2. Run the analysis flow.
        3. Save the analysis with its job description. A save failure is
           reported in `persistence_error`; the analysis is still returned.

    Network access:
        - This endpoint makes a network request to the LLM endpoint.

    """
    _msg = f"create_analysis starting for user {current_user.id}"
    log.debug(_msg)
    try:
        llm_config = settings_crud.get_llm_config(db, current_user.id, settings)
        if body.resume_id:
            data_uri = resume_store.get_resume(db, current_user.id, body.resume_id).data_uri
        else:
            data_uri = body.resume_data_uri
        result = await analyze_resume(
            ResumeAnalysisInput(resume_data_uri=data_uri, job_description=body.job_description),
            llm_config=llm_config,
            max_resume_bytes=settings.resume_max_bytes,
            policy=generation_policy_from_settings(settings),
        )
    except Exception as e:
        return error_response(request, e, "Resume analysis")

    record = ResumeAnalysis(
        user_id=current_user.id,
        data=ResumeAnalysisData(
            overall_score=result.overall_score,
            student_project_portfolio_score=result.student_project_portfolio_score,
            technical_knowledge_score=result.technical_knowledge_score,
            keyword_score=result.keyword_score,
            suggestions=result.suggestions,
            job_description=body.job_description.strip(),
            keyword_matches=result.keyword_matches,
            keyword_gaps=result.keyword_gaps,
        ),
    )
    try:
        history_store.append_record(db, record)
    except PersistenceError as e:
        return AnalysisResponse(
            **result.model_dump(),
            job_description=body.job_description.strip(),
            persistence_error=str(e),
        )

    if "HX-Request" in request.headers:
        return HTMLResponse(render_analysis(record))
    return AnalysisResponse.model_validate(record)


@router.get("")
def list_analyses(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user_from_cookie)],
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> list[AnalysisResponse]:
    """List the user's saved analyses, newest first."""
    records = history_store.list_records(
        db,
        HistoryCollection.RESUME_ANALYSES,
        current_user.id,
        limit=limit,
    )
    return [AnalysisResponse.model_validate(record) for record in records]


@router.delete("", response_model=BulkDeleteResponse)
def delete_analyses(
    request: Request,
    body: BulkDeleteRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user_from_cookie)],
) -> BulkDeleteResponse | Response:
    """Delete selected analyses. Unknown ids reject the whole batch."""
    try:
        deleted = history_store.delete_records(
            db,
            HistoryCollection.RESUME_ANALYSES,
            current_user.id,
            body.ids,
        )
    except Exception as e:
        return error_response(request, e, "Deleting analyses")
    return BulkDeleteResponse(deleted=deleted)
