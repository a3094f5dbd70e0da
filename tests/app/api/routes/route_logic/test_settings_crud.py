import logging

import pytest
from cryptography.fernet import Fernet, InvalidToken

from careerflow.app.api.routes.route_logic import settings_crud
from careerflow.app.core.security import decrypt_data
from careerflow.app.models.user_settings import UserSettings
from careerflow.app.schemas.user import UserSettingsUpdateRequest

log = logging.getLogger(__name__)


def test_get_user_settings_none(db_session, test_user):
    assert settings_crud.get_user_settings(db_session, test_user.id) is None


def test_update_user_settings_creates_and_encrypts(db_session, test_user):
    settings = settings_crud.update_user_settings(
        db_session,
        test_user.id,
        UserSettingsUpdateRequest(
            llm_endpoint="https://openrouter.ai/api/v1",
            llm_model_name="openai/gpt-4o-mini",
            api_key="sk-test",
        ),
    )

    assert settings.llm_endpoint == "https://openrouter.ai/api/v1"
    assert settings.llm_model_name == "openai/gpt-4o-mini"
    assert settings.encrypted_api_key != "sk-test"
    assert decrypt_data(settings.encrypted_api_key) == "sk-test"


def test_update_user_settings_none_keeps_and_empty_clears(db_session, test_user):
    settings_crud.update_user_settings(
        db_session,
        test_user.id,
        UserSettingsUpdateRequest(llm_endpoint="http://localhost:11434/v1", api_key="sk-test"),
    )
    settings = settings_crud.update_user_settings(
        db_session,
        test_user.id,
        UserSettingsUpdateRequest(llm_endpoint="", llm_model_name="llama3"),
    )

    assert settings.llm_endpoint is None
    assert settings.llm_model_name == "llama3"
    assert decrypt_data(settings.encrypted_api_key) == "sk-test"

    settings = settings_crud.update_user_settings(
        db_session,
        test_user.id,
        UserSettingsUpdateRequest(api_key=""),
    )
    assert settings.encrypted_api_key is None


def test_get_llm_config_defaults(db_session, test_user, test_settings):
    config = settings_crud.get_llm_config(db_session, test_user.id, test_settings)

    assert config.llm_endpoint == test_settings.llm_endpoint
    assert config.llm_model_name == test_settings.llm_model_name
    assert config.api_key == test_settings.llm_api_key
    assert config.temperature == test_settings.llm_temperature


def test_get_llm_config_user_overrides(db_session, test_user, test_settings):
    settings_crud.update_user_settings(
        db_session,
        test_user.id,
        UserSettingsUpdateRequest(llm_endpoint="http://custom/v1", api_key="sk-user"),
    )
    config = settings_crud.get_llm_config(db_session, test_user.id, test_settings)

    assert config.llm_endpoint == "http://custom/v1"
    assert config.llm_model_name == test_settings.llm_model_name
    assert config.api_key == "sk-user"


def test_get_llm_config_undecryptable_key(db_session, test_user, test_settings):
    foreign_key = Fernet(Fernet.generate_key()).encrypt(b"sk-other").decode()
    db_session.add(UserSettings(user_id=test_user.id, encrypted_api_key=foreign_key))
    db_session.commit()

    with pytest.raises(InvalidToken):
        settings_crud.get_llm_config(db_session, test_user.id, test_settings)
