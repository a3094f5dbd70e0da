import logging

from careerflow.app.api.routes.route_logic import user_crud
from careerflow.app.core.security import verify_password
from careerflow.app.schemas.user import UserCreate

log = logging.getLogger(__name__)


def test_user_count(db_session, test_user, other_user):
    assert user_crud.user_count(db_session) == 2


def test_get_user_by_username_and_email(db_session, test_user):
    assert user_crud.get_user_by_username(db_session, "testuser").id == test_user.id
    assert user_crud.get_user_by_email(db_session, "test@example.com").id == test_user.id
    assert user_crud.get_user_by_username(db_session, "nobody") is None
    assert user_crud.get_user_by_email(db_session, "nobody@example.com") is None


def test_create_new_user_hashes_password(db_session):
    user = user_crud.create_new_user(
        db_session,
        UserCreate(username="newuser", email="new@example.com", password="newpassword"),
    )

    assert user.id is not None
    assert user.hashed_password != "newpassword"
    assert verify_password("newpassword", user.hashed_password)
    assert user_crud.user_count(db_session) == 1
