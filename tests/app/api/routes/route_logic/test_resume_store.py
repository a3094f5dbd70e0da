import logging
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from careerflow.app.api.routes.route_logic import resume_store
from careerflow.app.api.routes.route_logic.resume_documents import build_data_uri
from careerflow.app.core.exceptions import (
    InputValidationError,
    PersistenceError,
    RecordNotFoundError,
)

log = logging.getLogger(__name__)

MAX_BYTES = 4096


def _store(db, user_id, name, text=None, replace_resume_id=None, max_stored=2):
    return resume_store.store_resume(
        db,
        user_id,
        file_name=name,
        data_uri=build_data_uri("text/plain", (text or f"Resume {name}").encode()),
        max_bytes=MAX_BYTES,
        max_stored=max_stored,
        replace_resume_id=replace_resume_id,
    )


@pytest.fixture
def two_resumes(db_session, test_user, timestamps):
    """Two stored resumes, oldest first, with distinct creation times."""
    resumes = [_store(db_session, test_user.id, "old.txt"), _store(db_session, test_user.id, "new.txt")]
    for resume, created_at in zip(resumes, timestamps(2)):
        resume.created_at = created_at
    db_session.commit()
    return resumes


def test_store_resume_extracts_text(db_session, test_user):
    resume = _store(db_session, test_user.id, "cv.txt", text="  Jane Doe, Python engineer  ")

    assert resume.file_name == "cv.txt"
    assert resume.mime_type == "text/plain"
    assert resume.text_content == "Jane Doe, Python engineer"
    assert resume.size_bytes == len("  Jane Doe, Python engineer  ")
    assert resume.data_uri.startswith("data:text/plain;base64,")


def test_store_resume_invalid_document_stores_nothing(db_session, test_user):
    with pytest.raises(InputValidationError):
        resume_store.store_resume(
            db_session,
            test_user.id,
            file_name="cv.png",
            data_uri=build_data_uri("image/png", b"\x89PNG"),
            max_bytes=MAX_BYTES,
            max_stored=2,
        )
    assert resume_store.list_resumes(db_session, test_user.id) == []


def test_list_resumes_newest_first(db_session, test_user, two_resumes):
    names = [r.file_name for r in resume_store.list_resumes(db_session, test_user.id)]
    assert names == ["new.txt", "old.txt"]


def test_store_resume_when_full_evicts_oldest(db_session, test_user, two_resumes):
    _store(db_session, test_user.id, "newest.txt")

    names = {r.file_name for r in resume_store.list_resumes(db_session, test_user.id)}
    assert names == {"new.txt", "newest.txt"}


def test_store_resume_replaces_selected(db_session, test_user, two_resumes):
    _store(db_session, test_user.id, "replacement.txt", replace_resume_id=two_resumes[1].id)

    names = {r.file_name for r in resume_store.list_resumes(db_session, test_user.id)}
    assert names == {"old.txt", "replacement.txt"}


def test_store_resume_replace_unknown_id(db_session, test_user, two_resumes):
    with pytest.raises(RecordNotFoundError):
        _store(db_session, test_user.id, "x.txt", replace_resume_id="missing")
    assert len(resume_store.list_resumes(db_session, test_user.id)) == 2


def test_store_resume_persistence_error_keeps_existing(db_session, test_user, two_resumes):
    with patch.object(
        db_session,
        "commit",
        side_effect=OperationalError("INSERT", {}, Exception("disk full")),
    ):
        with pytest.raises(PersistenceError):
            _store(db_session, test_user.id, "newest.txt")

    names = {r.file_name for r in resume_store.list_resumes(db_session, test_user.id)}
    assert names == {"old.txt", "new.txt"}


def test_get_resume_of_other_user(db_session, other_user, two_resumes):
    with pytest.raises(RecordNotFoundError):
        resume_store.get_resume(db_session, other_user.id, two_resumes[0].id)


def test_delete_resume(db_session, test_user, two_resumes):
    resume_store.delete_resume(db_session, test_user.id, two_resumes[0].id)
    names = [r.file_name for r in resume_store.list_resumes(db_session, test_user.id)]
    assert names == ["new.txt"]


def test_delete_resume_not_found(db_session, test_user):
    with pytest.raises(RecordNotFoundError):
        resume_store.delete_resume(db_session, test_user.id, "missing")
