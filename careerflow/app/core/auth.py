import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from careerflow.app.core.config import get_settings
from careerflow.app.core.security import oauth2_scheme
from careerflow.app.database.database import get_db
from careerflow.app.models.user import User

log = logging.getLogger(__name__)


def _get_user_from_token(token: str | None, db: Session) -> User | None:
    """Resolve a JWT into an active User.

    Args:
        token (str | None): The encoded JWT, or None when absent.
        db (Session): Database session used to look up the user.

    Returns:
        User | None: The active user named by the token's `sub` claim, or None
            if the token is missing, invalid, expired, or names no active user.

    """
    if not token:
        return None

    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
        )
    except JWTError:
        return None

    username: str | None = payload.get("sub")
    if username is None:
        return None

    user = db.query(User).filter(User.username == username).first()
    if user is None or not user.is_active:
        return None
    return user


def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Session = Depends(get_db),
) -> User:
    """Retrieve the authenticated user from the bearer token.

    Args:
        token (str): JWT extracted from the Authorization header.
        db (Session): Database session dependency.

    Returns:
        User: The authenticated user.

    Raises:
        HTTPException: 401 when the token is invalid or names no active user.

    Database Access:
        - Queries the User table to retrieve a user record by username.

    """
    user = _get_user_from_token(token, db)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_current_user_from_cookie(
    request: Request,
    db: Session = Depends(get_db),
) -> User:
    """Retrieve the authenticated user from the `access_token` cookie.

    A bearer token in the Authorization header is accepted when no cookie is
    present, so API clients and the browser share the same routes.

    Args:
        request (Request): The request, used to access cookies and headers.
        db (Session): Database session dependency.

    Returns:
        User: The authenticated user. Its `id` is the stable identity every
            history collection is scoped by.

    Raises:
        HTTPException: 401 when no valid token is found. HTMX requests also
            receive an `HX-Redirect` header pointing at the login endpoint.

    Notes:
        1. Read the token from the `access_token` cookie.
        2. Fall back to an `Authorization: Bearer` header.
        3. Decode the token and load the user.
        4. On failure raise 401.

    Database Access:
        - Queries the User table to retrieve a user record by username.

    """
    token = request.cookies.get("access_token")
    if not token:
        auth_header = request.headers.get("Authorization", "")
        scheme, _, value = auth_header.partition(" ")
        if scheme.lower() == "bearer" and value:
            token = value

    user = _get_user_from_token(token, db)
    if user is None:
        headers = {}
        if "hx-request" in request.headers:
            headers["HX-Redirect"] = "/api/users/login"
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers=headers,
        )
    return user
