import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile, status
from sqlalchemy.orm import Session

from careerflow.app.api.routes.route_logic import resume_store
from careerflow.app.api.routes.route_logic.error_responses import error_response
from careerflow.app.api.routes.route_logic.resume_documents import build_data_uri
from careerflow.app.api.routes.route_models import (
    ResumeUploadRequest,
    StoredResumeResponse,
)
from careerflow.app.core.auth import get_current_user_from_cookie
from careerflow.app.core.config import Settings, get_settings
from careerflow.app.database.database import get_db
from careerflow.app.models.user import User

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/resumes", tags=["resumes"])


@router.post("", response_model=StoredResumeResponse, status_code=status.HTTP_201_CREATED)
def upload_resume(
    request: Request,
    body: ResumeUploadRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user_from_cookie)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> StoredResumeResponse | Response:
    """Store a resume sent as a data URI.

    Args:
        request (Request): The incoming request.
        body (ResumeUploadRequest): The data URI, file name, and optional resume to replace.
        db (Session): The database session.
        current_user (User): The authenticated user.
        settings (Settings): Supplies the size and count limits.

    Returns:
        StoredResumeResponse | Response: The stored resume's metadata, or an error response.

    Notes:
        1. When the user already has the maximum number of resumes, the one named
           by `replace_resume_id` is replaced, otherwise the oldest.

    """
    _msg = f"upload_resume starting for user {current_user.id}"
    log.debug(_msg)
    try:
        resume = resume_store.store_resume(
            db,
            current_user.id,
            file_name=body.file_name,
            data_uri=body.data_uri,
            max_bytes=settings.resume_max_bytes,
            max_stored=settings.resume_max_stored,
            replace_resume_id=body.replace_resume_id,
        )
    except Exception as e:
        return error_response(request, e, "Storing resume")
    return StoredResumeResponse.model_validate(resume)


@router.post(
    "/upload",
    response_model=StoredResumeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_resume_file(
    request: Request,
    file: Annotated[UploadFile, File()],
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user_from_cookie)],
    settings: Annotated[Settings, Depends(get_settings)],
    replace_resume_id: Annotated[str | None, Form()] = None,
) -> StoredResumeResponse | Response:
    """Store a resume sent as a multipart file upload.

    The file is converted to a data URI and stored exactly as `upload_resume` does.
    """
    content = await file.read()
    mime_type = file.content_type or "application/octet-stream"
    try:
        resume = resume_store.store_resume(
            db,
            current_user.id,
            file_name=file.filename or "resume",
            data_uri=build_data_uri(mime_type, content),
            max_bytes=settings.resume_max_bytes,
            max_stored=settings.resume_max_stored,
            replace_resume_id=replace_resume_id or None,
        )
    except Exception as e:
        return error_response(request, e, "Storing uploaded resume")
    return StoredResumeResponse.model_validate(resume)


@router.get("")
def list_resumes(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user_from_cookie)],
) -> list[StoredResumeResponse]:
    """List the user's stored resumes, newest first."""
    return [
        StoredResumeResponse.model_validate(resume)
        for resume in resume_store.list_resumes(db, current_user.id)
    ]


@router.delete("/{resume_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_resume(
    request: Request,
    resume_id: str,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user_from_cookie)],
) -> Response:
    """Delete one stored resume."""
    try:
        resume_store.delete_resume(db, current_user.id, resume_id)
    except Exception as e:
        return error_response(request, e, "Deleting resume")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
