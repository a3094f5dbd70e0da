import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from careerflow.app.api.routes.route_logic import settings_crud, user_crud
from careerflow.app.core.auth import get_current_user_from_cookie
from careerflow.app.core.config import Settings, get_settings
from careerflow.app.core.security import authenticate_user, create_access_token
from careerflow.app.database.database import get_db
from careerflow.app.models.user import User
from careerflow.app.schemas.user import (
    Token,
    UserCreate,
    UserResponse,
    UserSettingsResponse,
    UserSettingsUpdateRequest,
)

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("/register")
def register_user(
    user: UserCreate,
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    """Register a new user with the provided credentials.

    Args:
        user: Data containing username, email, and password for the new user.
        db: Database session dependency used to interact with the user database.

    Returns:
        UserResponse: The created user's data, excluding the password.

    Raises:
        HTTPException: If the username or email is already registered.

    Notes:
        1. Reject a username that already exists with 400.
        2. Reject an email that already exists with 400.
        3. Create the user and return it without the password.
        4. Database access: Performs read and write operations on the User table.

    """
    _msg = f"Starting register_user for username: {user.username}"
    log.debug(_msg)

    if user_crud.get_user_by_username(db, user.username):
        _msg = f"Username {user.username} already registered"
        log.debug(_msg)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already registered",
        )

    if user_crud.get_user_by_email(db, user.email):
        _msg = f"Email {user.email} already registered"
        log.debug(_msg)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    db_user = user_crud.create_new_user(db, user)

    _msg = f"Returning registered user: {user.username}"
    log.debug(_msg)
    return db_user


@router.post("/login")
def login_user(
    response: Response,
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> Token:
    """Authenticate a user and return an access token.

    Args:
        response: The outgoing response, used to set the session cookie.
        form_data: Form data containing username and password for authentication.
        db: Database session dependency used to verify user credentials.
        settings: Application settings used for token creation and configuration.

    Returns:
        Token: An access token for the authenticated user, formatted as a JWT.

    Raises:
        HTTPException: If the username or password is incorrect.

    Notes:
        1. Authenticate the user; on failure raise 401.
        2. Update the user's last_login_at timestamp and commit.
        3. Create a JWT and set it as the `access_token` cookie as well.
        4. Database access: Performs read and write operations on the User table.

    """
    _msg = f"Starting login_user for username: {form_data.username}"
    log.debug(_msg)

    user = authenticate_user(db, form_data.username, form_data.password)
    if not user:
        _msg = f"Authentication failed for user: {form_data.username}"
        log.debug(_msg)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user.last_login_at = datetime.now(timezone.utc)
    db.commit()

    access_token = create_access_token(data={"sub": user.username}, settings=settings)
    response.set_cookie(
        key="access_token",
        value=access_token,
        httponly=True,
        samesite="lax",
        path="/",
        secure=settings.secure_cookies,
    )

    _msg = f"Returning access token for user: {form_data.username}"
    log.debug(_msg)
    return Token(access_token=access_token, token_type="bearer")


@router.post("/logout")
def logout_user(response: Response) -> dict[str, str]:
    """Clear the session cookie."""
    response.delete_cookie(key="access_token", path="/")
    return {"status": "logged out"}


def _settings_response(settings) -> UserSettingsResponse:
    if not settings:
        return UserSettingsResponse()
    return UserSettingsResponse(
        llm_endpoint=settings.llm_endpoint,
        llm_model_name=settings.llm_model_name,
        api_key_is_set=bool(settings.encrypted_api_key),
    )


@router.get("/settings")
def get_user_settings(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user_from_cookie)],
) -> UserSettingsResponse:
    """Get the current user's LLM settings.

    Returns:
        UserSettingsResponse: The endpoint and model overrides, and whether an
            API key is stored. The key itself is never returned.

    """
    _msg = "Getting settings for current user"
    log.debug(_msg)
    return _settings_response(settings_crud.get_user_settings(db, current_user.id))


@router.put("/settings")
def update_user_settings(
    settings_data: UserSettingsUpdateRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user_from_cookie)],
) -> UserSettingsResponse:
    """Update the current user's LLM settings.

    Args:
        settings_data (UserSettingsUpdateRequest): Fields to change; None leaves a
            field unchanged and an empty string clears it.
        db (Session): The database session.
        current_user (User): The authenticated user.

    Returns:
        UserSettingsResponse: The updated settings.

    """
    _msg = "Updating settings for current user"
    log.debug(_msg)
    settings = settings_crud.update_user_settings(db, current_user.id, settings_data)
    return _settings_response(settings)
