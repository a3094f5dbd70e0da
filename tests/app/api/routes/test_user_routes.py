import logging

from careerflow.app.core.security import decrypt_data
from careerflow.app.models.user_settings import UserSettings

log = logging.getLogger(__name__)


def test_register_user(client):
    response = client.post(
        "/api/users/register",
        json={"username": "newuser", "email": "new@example.com", "password": "newpassword"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["username"] == "newuser"
    assert data["email"] == "new@example.com"
    assert data["is_active"] is True
    assert "password" not in data
    assert "hashed_password" not in data


def test_register_duplicate_username(client):
    response = client.post(
        "/api/users/register",
        json={"username": "testuser", "email": "fresh@example.com", "password": "newpassword"},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Username already registered"


def test_register_duplicate_email(client):
    response = client.post(
        "/api/users/register",
        json={"username": "fresh", "email": "test@example.com", "password": "newpassword"},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Email already registered"


def test_register_short_password(client):
    response = client.post(
        "/api/users/register",
        json={"username": "fresh", "email": "fresh@example.com", "password": "short"},
    )

    assert response.status_code == 422


def test_login_sets_cookie(client, test_user):
    response = client.post(
        "/api/users/login",
        data={"username": "testuser", "password": "testpassword"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert response.cookies["access_token"] == data["access_token"]
    assert test_user.last_login_at is not None


def test_login_wrong_password(client):
    response = client.post(
        "/api/users/login",
        data={"username": "testuser", "password": "wrongpassword"},
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "Incorrect username or password"


def test_logout_clears_cookie(client):
    response = client.post("/api/users/logout")

    assert response.status_code == 200
    assert response.json() == {"status": "logged out"}
    assert 'access_token=""' in response.headers["set-cookie"]


def test_settings_default(client):
    response = client.get("/api/users/settings")

    assert response.status_code == 200
    assert response.json() == {
        "llm_endpoint": None,
        "llm_model_name": None,
        "api_key_is_set": False,
    }


def test_update_settings_never_returns_key(client, db_session, test_user):
    response = client.put(
        "/api/users/settings",
        json={
            "llm_endpoint": "https://openrouter.ai/api/v1",
            "llm_model_name": "openai/gpt-4o-mini",
            "api_key": "sk-secret",
        },
    )

    assert response.status_code == 200
    assert response.json() == {
        "llm_endpoint": "https://openrouter.ai/api/v1",
        "llm_model_name": "openai/gpt-4o-mini",
        "api_key_is_set": True,
    }
    assert "sk-secret" not in response.text

    stored = db_session.query(UserSettings).filter(UserSettings.user_id == test_user.id).one()
    assert decrypt_data(stored.encrypted_api_key) == "sk-secret"
