import pytest
from pydantic import ValidationError

from careerflow.app.core.config import Settings


def test_database_url_override(monkeypatch):
    monkeypatch.setenv("DATABASE_URL_OVERRIDE", "sqlite:///./careerflow.db")
    settings = Settings(_env_file=None)
    assert settings.database_url == "sqlite:///./careerflow.db"


def test_database_url_from_components(monkeypatch):
    monkeypatch.delenv("DATABASE_URL_OVERRIDE", raising=False)
    monkeypatch.setenv("DB_HOST", "db")
    monkeypatch.setenv("DB_PORT", "5433")
    monkeypatch.setenv("DB_NAME", "careers")
    monkeypatch.setenv("DB_USER", "cf")
    monkeypatch.setenv("DB_PASSWORD", "secret")

    settings = Settings(_env_file=None)

    assert settings.database_url == "postgresql://cf:secret@db:5433/careers"


def test_policy_defaults():
    settings = Settings(_env_file=None)

    assert settings.interview_max_questions == 10
    assert settings.interview_transcript_window == 12
    assert settings.resume_max_stored == 2
    assert settings.resume_max_bytes == 5 * 1024 * 1024
    assert settings.post_recall_limit == 5
    assert settings.llm_max_attempts == 3
    assert settings.secure_cookies is False


def test_policy_from_environment(monkeypatch):
    monkeypatch.setenv("INTERVIEW_MAX_QUESTIONS", "4")
    monkeypatch.setenv("LLM_TIMEOUT_SECONDS", "12.5")
    monkeypatch.setenv("SECURE_COOKIES", "true")

    settings = Settings(_env_file=None)

    assert settings.interview_max_questions == 4
    assert settings.llm_timeout_seconds == 12.5
    assert settings.secure_cookies is True


def test_invalid_policy_rejected(monkeypatch):
    monkeypatch.setenv("INTERVIEW_MAX_QUESTIONS", "0")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_encryption_key_required(monkeypatch):
    monkeypatch.delenv("ENCRYPTION_KEY")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)
