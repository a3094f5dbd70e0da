import json
import os
from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
from cryptography.fernet import Fernet

os.environ.setdefault("ENCRYPTION_KEY", Fernet.generate_key().decode())
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from fastapi.testclient import TestClient  # noqa: E402
from langchain_core.messages import AIMessage  # noqa: E402
from langchain_core.runnables import RunnableLambda  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from careerflow.app.core.auth import get_current_user_from_cookie  # noqa: E402
from careerflow.app.core.config import get_settings  # noqa: E402
from careerflow.app.core.security import get_password_hash  # noqa: E402
from careerflow.app.database.database import get_db  # noqa: E402
from careerflow.app.main import create_app  # noqa: E402
from careerflow.app.models import Base  # noqa: E402
from careerflow.app.models.user import User  # noqa: E402


@pytest.fixture
def db_engine():
    """In-memory SQLite engine shared by every connection in the test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def test_user(db_session):
    """A persisted user."""
    user = User(
        username="testuser",
        email="test@example.com",
        hashed_password=get_password_hash("testpassword"),
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def other_user(db_session):
    user = User(
        username="otheruser",
        email="other@example.com",
        hashed_password=get_password_hash("otherpassword"),
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def test_settings():
    """Application settings with a single fast attempt per generation."""
    get_settings.cache_clear()
    return get_settings().model_copy(
        update={
            "llm_max_attempts": 1,
            "llm_retry_base_delay_seconds": 0.0,
            "llm_timeout_seconds": 5.0,
        }
    )


@pytest.fixture
def app(db_session, test_user, test_settings):
    """App wired to the in-memory database, an authenticated user and test settings."""
    _app = create_app()

    def override_get_db():
        yield db_session

    _app.dependency_overrides[get_db] = override_get_db
    _app.dependency_overrides[get_current_user_from_cookie] = lambda: test_user
    _app.dependency_overrides[get_settings] = lambda: test_settings
    yield _app
    _app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def timestamps():
    """Return a function producing distinct, increasing creation timestamps."""

    def _timestamps(count: int) -> list[datetime]:
        start = datetime(2024, 1, 1, 12, 0, 0)
        return [start + timedelta(minutes=i) for i in range(count)]

    return _timestamps


@pytest.fixture
def patch_llm():
    """Replace the chat model with canned responses.

    Call it with the responses in order: a dict is sent back as fenced JSON, a
    string verbatim, an exception is raised. Returns the list of rendered prompts
    the model received.
    """
    patchers = []

    def _patch(*responses):
        queue = list(responses)
        prompts: list[str] = []

        def respond(prompt_value):
            prompts.append(prompt_value.to_string())
            response = queue.pop(0)
            if isinstance(response, Exception):
                raise response
            if isinstance(response, str):
                return AIMessage(content=response)
            return AIMessage(content=f"```json\n{json.dumps(response)}\n```")

        patcher = patch(
            "careerflow.app.llm.orchestration.create_llm",
            return_value=RunnableLambda(respond),
        )
        patcher.start()
        patchers.append(patcher)
        return prompts

    yield _patch
    for patcher in patchers:
        patcher.stop()
