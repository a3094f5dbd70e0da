import logging
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from careerflow.app.core.config import Settings
from careerflow.app.core.security import decrypt_data, encrypt_data
from careerflow.app.llm.models import LLMConfig
from careerflow.app.models.user_settings import UserSettings

if TYPE_CHECKING:
    from careerflow.app.schemas.user import UserSettingsUpdateRequest


log = logging.getLogger(__name__)


def get_user_settings(db: Session, user_id: int) -> UserSettings | None:
    """Retrieves the settings for a given user.

    Args:
        db (Session): The database session used to query the database.
        user_id (int): The unique identifier of the user whose settings are being retrieved.

    Returns:
        UserSettings | None: The user's settings if found, otherwise None.

    """
    _msg = f"Getting settings for user_id: {user_id}"
    log.debug(_msg)
    return db.query(UserSettings).filter(UserSettings.user_id == user_id).first()


def update_user_settings(
    db: Session,
    user_id: int,
    settings_data: "UserSettingsUpdateRequest",
) -> UserSettings:
    """Creates or updates settings for a user.

    Args:
        db (Session): The database session used to perform database operations.
        user_id (int): The unique identifier of the user whose settings are being updated.
        settings_data (UserSettingsUpdateRequest): The data containing the updated settings.

    Returns:
        UserSettings: The updated or newly created UserSettings object.

    Notes:
        1. Create the settings row if the user has none.
        2. A field left as None is unchanged; an empty string clears it.
        3. A non-empty API key is encrypted with `encrypt_data` before storage.
        4. Commit and refresh the row.
        5. This function performs a database read and possibly a write operation.

    """
    _msg = f"Updating settings for user_id: {user_id}"
    log.debug(_msg)

    settings = get_user_settings(db=db, user_id=user_id)
    if not settings:
        _msg = f"No settings found for user_id: {user_id}. Creating new settings."
        log.debug(_msg)
        settings = UserSettings(user_id=user_id)
        db.add(settings)

    if settings_data.llm_endpoint is not None:
        settings.llm_endpoint = settings_data.llm_endpoint or None

    if settings_data.llm_model_name is not None:
        settings.llm_model_name = settings_data.llm_model_name or None

    if settings_data.api_key is not None:
        if settings_data.api_key:
            settings.encrypted_api_key = encrypt_data(data=settings_data.api_key)
        else:
            settings.encrypted_api_key = None

    db.commit()
    db.refresh(settings)
    return settings


def get_llm_config(db: Session, user_id: int, app_settings: Settings) -> LLMConfig:
    """Resolve the LLM configuration for a user.

    Args:
        db (Session): The database session.
        user_id (int): The ID of the user.
        app_settings (Settings): Application settings supplying the defaults.

    Returns:
        LLMConfig: The user's overrides where set, the application defaults otherwise.

    Raises:
        InvalidToken: If the stored API key cannot be decrypted.

    """
    _msg = "get_llm_config starting"
    log.debug(_msg)
    settings = get_user_settings(db, user_id)

    llm_endpoint = app_settings.llm_endpoint
    llm_model_name = app_settings.llm_model_name
    api_key = app_settings.llm_api_key

    if settings:
        llm_endpoint = settings.llm_endpoint or llm_endpoint
        llm_model_name = settings.llm_model_name or llm_model_name
        if settings.encrypted_api_key:
            api_key = decrypt_data(settings.encrypted_api_key)

    _msg = "get_llm_config returning"
    log.debug(_msg)
    return LLMConfig(
        llm_endpoint=llm_endpoint,
        llm_model_name=llm_model_name,
        api_key=api_key,
        temperature=app_settings.llm_temperature,
    )
