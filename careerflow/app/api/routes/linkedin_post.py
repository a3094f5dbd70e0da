import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from careerflow.app.api.routes.route_logic import history_store, settings_crud
from careerflow.app.api.routes.route_logic.error_responses import error_response
from careerflow.app.api.routes.route_logic.history_store import HistoryCollection
from careerflow.app.api.routes.route_models import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    PostGenerateRequest,
    PostGenerateResponse,
    PostResponse,
    PostSaveRequest,
)
from careerflow.app.core.auth import get_current_user_from_cookie
from careerflow.app.core.config import Settings, get_settings
from careerflow.app.database.database import get_db
from careerflow.app.llm.orchestration import (
    generate_linkedin_post,
    generation_policy_from_settings,
)
from careerflow.app.models.linkedin_post import LinkedInPost, LinkedInPostData
from careerflow.app.models.user import User

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/posts", tags=["posts"])


def recall_previous_posts(db: Session, user_id: int, limit: int) -> list[str]:
    """Return the text of the user's most recent saved posts, newest first."""
    if limit <= 0:
        return []
    records = history_store.list_records(
        db,
        HistoryCollection.LINKEDIN_POSTS,
        user_id,
        limit=limit,
    )
    return [record.post for record in records]


@router.post("/generate", response_model=PostGenerateResponse)
async def generate_post(
    request: Request,
    body: PostGenerateRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user_from_cookie)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> PostGenerateResponse | Response:
    """Generate a LinkedIn post without saving it.

    Args:
        request (Request): The incoming request.
        body (PostGenerateRequest): Project details and tone.
        db (Session): The database session.
        current_user (User): The authenticated user.
        settings (Settings): Application settings.

    Returns:
        PostGenerateResponse | Response: The generated post, or an error response.

    Notes:
        1. Resolve the user's LLM configuration.
        2. Recall the user's most recent saved posts for voice consistency.
        3. Generate the post. Saving it is a separate request.

    Network access:
        - This endpoint makes a network request to the LLM endpoint.

    """
    _msg = f"generate_post starting for user {current_user.id}"
    log.debug(_msg)
    try:
        llm_config = settings_crud.get_llm_config(db, current_user.id, settings)
        previous_posts = recall_previous_posts(db, current_user.id, settings.post_recall_limit)
        result = await generate_linkedin_post(
            project_details=body.project_details,
            tone=body.tone,
            previous_posts=previous_posts,
            llm_config=llm_config,
            policy=generation_policy_from_settings(settings),
        )
    except Exception as e:
        return error_response(request, e, "LinkedIn post generation")

    return PostGenerateResponse(post=result.post)


@router.post("", response_model=PostResponse, status_code=201)
def save_post(
    request: Request,
    body: PostSaveRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user_from_cookie)],
) -> PostResponse | Response:
    """Save a generated post to the user's history."""
    record = LinkedInPost(
        user_id=current_user.id,
        data=LinkedInPostData(
            post=body.post,
            tone=body.tone.value,
            project_details=body.project_details,
        ),
    )
    try:
        history_store.append_record(db, record)
    except Exception as e:
        return error_response(request, e, "Saving LinkedIn post")
    return PostResponse.model_validate(record)


@router.get("")
def list_posts(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user_from_cookie)],
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> list[PostResponse]:
    """List the user's saved posts, newest first."""
    records = history_store.list_records(
        db,
        HistoryCollection.LINKEDIN_POSTS,
        current_user.id,
        limit=limit,
    )
    return [PostResponse.model_validate(record) for record in records]


@router.delete("", response_model=BulkDeleteResponse)
def delete_posts(
    request: Request,
    body: BulkDeleteRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user_from_cookie)],
) -> BulkDeleteResponse | Response:
    """Delete selected saved posts. Unknown ids reject the whole batch."""
    try:
        deleted = history_store.delete_records(
            db,
            HistoryCollection.LINKEDIN_POSTS,
            current_user.id,
            body.ids,
        )
    except Exception as e:
        return error_response(request, e, "Deleting LinkedIn posts")
    return BulkDeleteResponse(deleted=deleted)
