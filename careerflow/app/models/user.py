import logging
from typing import Any

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship, validates

from careerflow.app.models import Base

log = logging.getLogger(__name__)


class User(Base):
    """
    User model for authentication. Its `id` is the stable identity every
    history collection is scoped by.

    Attributes:
        id (int): Unique identifier for the user.
        username (str): Unique username for the user.
        email (str): Unique email address for the user.
        hashed_password (str): Hashed password for the user.
        is_active (bool): Whether the user account is active.
        last_login_at (datetime): Timestamp of the last successful login.
        attributes (dict): Flexible key-value store for user-specific attributes.
        settings (UserSettings): User-specific LLM settings.
        stored_resumes (list[StoredResume]): Resumes uploaded by the user.

    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    last_login_at = Column(DateTime, nullable=True)
    attributes = Column(JSONB().with_variant(JSON, "sqlite"), nullable=True)

    settings = relationship(
        "UserSettings",
        back_populates="user",
        cascade="all, delete-orphan",
        uselist=False,
    )

    stored_resumes = relationship(
        "StoredResume",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    def __init__(
        self,
        username: str,
        email: str,
        hashed_password: str,
        is_active: bool = True,
        attributes: dict[str, Any] | None = None,
        id: int | None = None,
    ):
        """
        Initialize a User instance.

        Args:
            username (str): Unique username for the user. Must be a non-empty string.
            email (str): Unique email address for the user. Must be a non-empty string.
            hashed_password (str): Hashed password for the user. Must be a non-empty string.
            is_active (bool): Whether the user account is active.
            attributes (dict | None): Flexible key-value attributes for the user.
            id (int | None): The unique identifier of the user, for testing purposes.

        Notes:
            1. Field validation happens in the `@validates` hooks below.
            2. This operation does not involve network, disk, or database access.

        """
        _msg = f"Initializing User with username: {username}"
        log.debug(_msg)

        if id is not None:
            self.id = id
        self.username = username
        self.email = email
        self.hashed_password = hashed_password
        self.is_active = is_active
        self.attributes = attributes

    @validates("username", "email", "hashed_password")
    def validate_required_string(self, key, value):
        """
        Validate a required string field.

        Args:
            key (str): The field name being validated.
            value (str): The value to validate. Must be a non-empty string.

        Returns:
            str: The value stripped of leading/trailing whitespace.

        """
        label = key.replace("_", " ").capitalize()
        if not isinstance(value, str):
            raise ValueError(f"{label} must be a string")
        if not value.strip():
            raise ValueError(f"{label} cannot be empty")
        return value.strip()

    @validates("is_active")
    def validate_is_active(self, key, is_active):
        if not isinstance(is_active, bool):
            raise ValueError("is_active must be a boolean")
        return is_active

    @validates("attributes")
    def validate_attributes(self, key, attributes):
        if attributes is not None and not isinstance(attributes, dict):
            raise ValueError("Attributes must be a dictionary")
        return attributes
