import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field

log = logging.getLogger(__name__)


class UserBase(BaseModel):
    """Base user schema with common fields.

    Attributes:
        username (str): Unique username chosen by the user for login.
        email (EmailStr): Unique email address associated with the user.

    """

    username: str
    email: EmailStr


class UserCreate(UserBase):
    """User creation schema with password.

    Attributes:
        password (str): Plain text password provided during registration.

    Notes:
        1. The password is only held long enough to be hashed.
        2. The password is never returned in any response.

    """

    password: str = Field(..., min_length=8)


class UserResponse(UserBase):
    """User response schema without password.

    Attributes:
        id (int): Unique identifier assigned to the user in the database.
        is_active (bool): Whether the user account is active and can log in.
        attributes (dict[str, Any] | None): Flexible key-value attributes for the user.

    """

    id: int
    is_active: bool
    attributes: dict[str, Any] | None = None

    model_config = ConfigDict(from_attributes=True)


class Token(BaseModel):
    """Token response schema.

    Attributes:
        access_token (str): The JWT access token used for subsequent authenticated requests.
        token_type (str): The type of token, which is always "bearer".

    """

    access_token: str
    token_type: str


class UserSettingsUpdateRequest(BaseModel):
    """Schema for updating user settings.

    A field left as None is unchanged; an empty string clears it.

    Attributes:
        llm_endpoint (str | None): Custom LLM endpoint URL.
        llm_model_name (str | None): Model name override.
        api_key (str | None): Plaintext API key for the LLM service.

    """

    llm_endpoint: str | None = None
    llm_model_name: str | None = None
    api_key: str | None = None


class UserSettingsResponse(BaseModel):
    """Schema for returning user settings. The API key itself is never returned.

    Attributes:
        llm_endpoint (str | None): Custom LLM endpoint URL.
        llm_model_name (str | None): Model name override.
        api_key_is_set (bool): Whether an API key has been set.

    """

    llm_endpoint: str | None = None
    llm_model_name: str | None = None
    api_key_is_set: bool = False

    model_config = ConfigDict(from_attributes=True)
