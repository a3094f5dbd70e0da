import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from careerflow.app.api.routes.route_logic.resume_documents import (
    extract_text,
    parse_data_uri,
)
from careerflow.app.core.exceptions import PersistenceError, RecordNotFoundError
from careerflow.app.models.stored_resume import StoredResume, StoredResumeData

log = logging.getLogger(__name__)


def list_resumes(db: Session, user_id: int) -> list[StoredResume]:
    """List a user's stored resumes, newest first."""
    _msg = f"Listing stored resumes for user_id: {user_id}"
    log.debug(_msg)
    return (
        db.query(StoredResume)
        .filter(StoredResume.user_id == user_id)
        .order_by(StoredResume.created_at.desc(), StoredResume.id.desc())
        .all()
    )


def get_resume(db: Session, user_id: int, resume_id: str) -> StoredResume:
    """Fetch one of a user's stored resumes.

    Raises:
        RecordNotFoundError: If the resume does not exist or belongs to another user.

    """
    resume = (
        db.query(StoredResume)
        .filter(StoredResume.id == resume_id, StoredResume.user_id == user_id)
        .first()
    )
    if resume is None:
        raise RecordNotFoundError(f"Resume {resume_id} not found.")
    return resume


def store_resume(
    db: Session,
    user_id: int,
    file_name: str,
    data_uri: str,
    max_bytes: int,
    max_stored: int,
    replace_resume_id: str | None = None,
) -> StoredResume:
    """Decode, extract and store an uploaded resume, evicting one when full.

    Args:
        db (Session): The database session.
        user_id (int): The owning user.
        file_name (str): The original file name.
        data_uri (str): The resume as `data:<mime>;base64,<payload>`.
        max_bytes (int): Maximum decoded size.
        max_stored (int): Maximum stored resumes per user.
        replace_resume_id (str | None): A stored resume to replace.

    Returns:
        StoredResume: The new stored resume.

    Raises:
        InputValidationError: If the data URI or the document is invalid.
        RecordNotFoundError: If `replace_resume_id` names no resume of this user.
        PersistenceError: If the write fails. Nothing is evicted.

    Notes:
        1. Decode the data URI and extract the text before touching the database.
        2. When `replace_resume_id` is given, that resume is removed.
        3. Otherwise, when the user already has `max_stored` resumes, the oldest
           ones are removed until there is room for the new one.
        4. The eviction and the insert are committed together.

    """
    _msg = f"Storing resume '{file_name}' for user_id: {user_id}"
    log.debug(_msg)

    document = parse_data_uri(data_uri, max_bytes=max_bytes)
    text_content = extract_text(document)

    existing = list_resumes(db, user_id)
    evicted: list[StoredResume] = []
    if replace_resume_id:
        evicted.append(get_resume(db, user_id, replace_resume_id))
    else:
        overflow = len(existing) - max_stored + 1
        if overflow > 0:
            # list_resumes is newest first
            evicted.extend(existing[-overflow:])

    new_resume = StoredResume(
        user_id=user_id,
        data=StoredResumeData(
            file_name=file_name or "resume",
            mime_type=document.mime_type,
            data_uri=data_uri.strip(),
            text_content=text_content,
            size_bytes=len(document.content),
        ),
    )

    try:
        for resume in evicted:
            _msg = f"Evicting stored resume {resume.id} for user_id: {user_id}"
            log.debug(_msg)
            db.delete(resume)
        db.add(new_resume)
        db.commit()
        db.refresh(new_resume)
    except SQLAlchemyError as e:
        db.rollback()
        _msg = f"Failed to store resume for user_id {user_id}: {e!s}"
        log.exception(_msg)
        raise PersistenceError("The resume could not be saved.") from e

    return new_resume


def delete_resume(db: Session, user_id: int, resume_id: str) -> None:
    """Delete one of a user's stored resumes.

    Raises:
        RecordNotFoundError: If the resume does not exist or belongs to another user.
        PersistenceError: If the delete fails.

    """
    resume = get_resume(db, user_id, resume_id)
    try:
        db.delete(resume)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        _msg = f"Failed to delete resume {resume_id}: {e!s}"
        log.exception(_msg)
        raise PersistenceError("The resume could not be deleted.") from e
