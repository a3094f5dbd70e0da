import logging
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from careerflow.app.core.exceptions import PersistenceError, RecordNotFoundError
from careerflow.app.models.history_record import HistoryRecordMixin
from careerflow.app.models.linkedin_post import LinkedInPost
from careerflow.app.models.mock_interview import MockInterviewRecord
from careerflow.app.models.resume_analysis import ResumeAnalysis
from careerflow.app.models.skill_gap_roadmap import SkillGapRoadmap

log = logging.getLogger(__name__)


class HistoryCollection(str, Enum):
    """Per-user history collections."""

    LINKEDIN_POSTS = "linkedin_posts"
    RESUME_ANALYSES = "resume_analyses"
    SKILL_GAP_ROADMAPS = "skill_gap_roadmaps"
    MOCK_INTERVIEWS = "mock_interviews"


COLLECTION_MODELS: dict[HistoryCollection, type[HistoryRecordMixin]] = {
    HistoryCollection.LINKEDIN_POSTS: LinkedInPost,
    HistoryCollection.RESUME_ANALYSES: ResumeAnalysis,
    HistoryCollection.SKILL_GAP_ROADMAPS: SkillGapRoadmap,
    HistoryCollection.MOCK_INTERVIEWS: MockInterviewRecord,
}


def append_record(db: Session, record: HistoryRecordMixin) -> str:
    """Persist a new history record.

    Args:
        db (Session): The database session.
        record (HistoryRecordMixin): A new record, already carrying its `user_id`.

    Returns:
        str: The generated record id.

    Raises:
        PersistenceError: If the write fails. The session is rolled back.

    Notes:
        1. Add the record, commit and refresh it so the generated id and
           timestamp are populated.
        2. This function performs a database write.

    """
    _msg = f"Appending {type(record).__name__} for user_id: {record.user_id}"
    log.debug(_msg)
    try:
        db.add(record)
        db.commit()
        db.refresh(record)
    except SQLAlchemyError as e:
        db.rollback()
        _msg = f"Failed to persist {type(record).__name__}: {e!s}"
        log.exception(_msg)
        raise PersistenceError("The result could not be saved to your history.") from e

    _msg = f"Appended {type(record).__name__} with id {record.id}"
    log.debug(_msg)
    return record.id


def list_records(
    db: Session,
    collection: HistoryCollection,
    user_id: int,
    limit: int | None = None,
) -> list[HistoryRecordMixin]:
    """List a user's records in a collection, newest first.

    Args:
        db (Session): The database session.
        collection (HistoryCollection): The collection to read.
        user_id (int): The owning user.
        limit (int | None): Maximum number of records, or None for all.

    Returns:
        list[HistoryRecordMixin]: Records in descending creation order. Records
            created in the same instant are ordered by id so the order is stable.

    """
    _msg = f"Listing {collection.value} for user_id: {user_id}"
    log.debug(_msg)
    model = COLLECTION_MODELS[collection]
    query = (
        db.query(model)
        .filter(model.user_id == user_id)
        .order_by(model.created_at.desc(), model.id.desc())
    )
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def get_record(
    db: Session,
    collection: HistoryCollection,
    user_id: int,
    record_id: str,
) -> HistoryRecordMixin:
    """Fetch one of a user's records.

    Raises:
        RecordNotFoundError: If no such record exists for this user.

    """
    model = COLLECTION_MODELS[collection]
    record = (
        db.query(model)
        .filter(model.id == record_id, model.user_id == user_id)
        .first()
    )
    if record is None:
        raise RecordNotFoundError(f"Record {record_id} not found.")
    return record


def delete_records(
    db: Session,
    collection: HistoryCollection,
    user_id: int,
    record_ids: list[str],
) -> int:
    """Delete the selected records as a single all-or-nothing batch.

    Args:
        db (Session): The database session.
        collection (HistoryCollection): The collection to delete from.
        user_id (int): The owning user.
        record_ids (list[str]): Ids of the records to delete.

    Returns:
        int: The number of records deleted.

    Raises:
        RecordNotFoundError: If any id is unknown or belongs to another user.
            Nothing is deleted.
        PersistenceError: If the delete fails. The session is rolled back and
            nothing is deleted.

    Notes:
        1. De-duplicate the ids; an empty selection deletes nothing.
        2. Select the user's records with those ids and compare the count,
           so a foreign or unknown id rejects the whole batch.
        3. Delete them and commit once.

    """
    unique_ids = set(record_ids)
    _msg = f"Deleting {len(unique_ids)} {collection.value} for user_id: {user_id}"
    log.debug(_msg)
    if not unique_ids:
        return 0

    model = COLLECTION_MODELS[collection]
    try:
        records = (
            db.query(model)
            .filter(model.user_id == user_id, model.id.in_(unique_ids))
            .all()
        )
        if len(records) != len(unique_ids):
            missing = sorted(unique_ids - {record.id for record in records})
            _msg = f"Rejecting delete of {collection.value}: unknown ids {missing}"
            log.warning(_msg)
            raise RecordNotFoundError(
                f"Records not found: {', '.join(missing)}. Nothing was deleted."
            )

        for record in records:
            db.delete(record)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        _msg = f"Failed to delete {collection.value}: {e!s}"
        log.exception(_msg)
        raise PersistenceError("The selected records could not be deleted.") from e

    _msg = f"Deleted {len(records)} {collection.value}"
    log.debug(_msg)
    return len(records)
