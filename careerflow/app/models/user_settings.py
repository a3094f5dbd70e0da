import logging

from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from careerflow.app.models import Base

log = logging.getLogger(__name__)


class UserSettings(Base):
    """
    Per-user LLM overrides. Unset fields fall back to the application defaults.

    Attributes:
        id (int): Primary key.
        user_id (int): Foreign key to the user.
        llm_endpoint (str | None): Custom OpenAI-compatible endpoint URL.
        llm_model_name (str | None): The user-specified model name.
        encrypted_api_key (str | None): Fernet-encrypted API key for the LLM service.
        user (User): Relationship to the User model.

    """

    __tablename__ = "user_settings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True)
    llm_endpoint = Column(String, nullable=True)
    llm_model_name = Column(String, nullable=True)
    encrypted_api_key = Column(String, nullable=True)

    user = relationship("User", back_populates="settings")

    def __init__(
        self,
        user_id: int,
        llm_endpoint: str | None = None,
        llm_model_name: str | None = None,
        encrypted_api_key: str | None = None,
    ):
        _msg = f"Initializing UserSettings for user_id: {user_id}"
        log.debug(_msg)

        self.user_id = user_id
        self.llm_endpoint = llm_endpoint
        self.llm_model_name = llm_model_name
        self.encrypted_api_key = encrypted_api_key
