import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Optional

import bcrypt
from cryptography.fernet import Fernet
from fastapi.security import OAuth2PasswordBearer
from jose import jwt
from sqlalchemy.orm import Session

from careerflow.app.core.config import Settings, get_settings

if TYPE_CHECKING:
    from careerflow.app.models.user import User

log = logging.getLogger(__name__)

# Bearer clients and the `access_token` cookie carry the same token.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/users/login")


def create_access_token(
    data: dict,
    settings: Settings,
    expires_delta: timedelta | None = None,
) -> str:
    """Create the CareerFlow session token.

    Login returns it as a bearer token and also sets it as the `access_token`
    cookie. The session middleware calls this again on every authenticated
    request, so an active user's session keeps sliding forward.

    Args:
        data (dict): Claims to encode. CareerFlow puts the username in `sub`.
        settings (Settings): Supplies the signing key, algorithm and default lifetime.
        expires_delta (timedelta | None): Lifetime override, otherwise
            `ACCESS_TOKEN_EXPIRE_MINUTES`.

    Returns:
        str: The signed JWT.

    """
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims = {**data, "exp": datetime.now(UTC) + lifetime}
    _msg = f"Issuing session token for {claims.get('sub')}, valid for {lifetime}"
    log.debug(_msg)
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a login password against the stored bcrypt hash."""
    return bcrypt.checkpw(
        plain_password.encode("utf-8"),
        hashed_password.encode("utf-8"),
    )


def get_password_hash(password: str) -> str:
    """Hash a password for storage on the User row.

    Used by registration and by the `create-user` management command.
    """
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def authenticate_user(db: Session, username: str, password: str) -> Optional["User"]:
    """Resolve login credentials to a user.

    Args:
        db (Session): The database session.
        username (str): The submitted username.
        password (str): The submitted password.

    Returns:
        Optional[User]: The user, or None when the username is unknown, the
            account is deactivated, or the password does not match.

    Notes:
        1. A deactivated account is refused before the password is checked, so
           it cannot be used to test guesses at the password.
        2. This function performs one database read.

    """
    _msg = f"Authenticating user: {username}"
    log.debug(_msg)

    from careerflow.app.models.user import User

    user = db.query(User).filter(User.username == username).first()
    if user is None or not user.is_active:
        return None
    if not verify_password(password, user.hashed_password):
        _msg = f"Password mismatch for user: {username}"
        log.debug(_msg)
        return None
    return user


def _fernet(settings: Settings | None) -> Fernet:
    settings = settings or get_settings()
    return Fernet(settings.encryption_key.encode())


def encrypt_data(data: str, settings: Settings | None = None) -> str:
    """Encrypt a user's own LLM API key for storage in their settings row.

    Args:
        data (str): The plaintext API key.
        settings (Settings | None): Supplies `ENCRYPTION_KEY`. Defaults to the
            application settings.

    Returns:
        str: The Fernet token, as text.

    """
    return _fernet(settings).encrypt(data.encode()).decode()


def decrypt_data(encrypted_data: str, settings: Settings | None = None) -> str:
    """Decrypt a stored LLM API key just before a generation call.

    Args:
        encrypted_data (str): The stored Fernet token.
        settings (Settings | None): Supplies `ENCRYPTION_KEY`. Defaults to the
            application settings.

    Returns:
        str: The plaintext API key.

    Raises:
        InvalidToken: If the key was stored under a different `ENCRYPTION_KEY`.
            Routes report this as a 400 asking the user to re-enter their key.

    """
    return _fernet(settings).decrypt(encrypted_data.encode()).decode()
