import logging
from functools import lru_cache

from pydantic import Field, PostgresDsn, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

log = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    This class defines all configuration values used by the application,
    including database connection details, security parameters, LLM provider
    defaults and the policies governing generation calls, interviews and resumes.
    Values are loaded from environment variables with fallback defaults.

    Attributes:
        database_url (str): Database connection URL. Assembled from the DB_* parts
            unless DATABASE_URL_OVERRIDE is set.
        secret_key (str): Secret key for signing JWT tokens.
        algorithm (str): Algorithm used for JWT token encoding.
        access_token_expire_minutes (int): Lifetime of access tokens in minutes.
        secure_cookies (bool): Mark the session cookie Secure (HTTPS only).
        llm_api_key (str | None): Default API key for the LLM provider.
        llm_endpoint (str | None): Default OpenAI-compatible endpoint URL.
        llm_model_name (str): Default model name.
        llm_temperature (float): Sampling temperature for all flows.
        llm_timeout_seconds (float): Bound on a single generation attempt.
        llm_max_attempts (int): Attempts per generation, including the first.
        llm_retry_base_delay_seconds (float): Base delay for jittered backoff.
        interview_max_questions (int): Hard local ceiling on interview questions.
        interview_transcript_window (int): Most recent transcript messages sent as context.
        resume_max_bytes (int): Maximum decoded size of an uploaded resume.
        resume_max_stored (int): Maximum stored resumes per user.
        post_recall_limit (int): Previous posts recalled when generating a post.
        encryption_key (str): Fernet key for encrypting user API keys.

    """

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )

    # Database settings
    db_host: str = Field(default="localhost", validation_alias="DB_HOST")
    db_port: int = Field(default=5432, validation_alias="DB_PORT")
    db_name: str = Field(default="careerflow", validation_alias="DB_NAME")
    db_user: str = Field(default="postgres", validation_alias="DB_USER")
    db_password: str = Field(default="", validation_alias="DB_PASSWORD")
    database_url_override: str | None = Field(
        default=None,
        validation_alias="DATABASE_URL_OVERRIDE",
    )

    @computed_field
    @property
    def database_url(self) -> str:
        """
        Assembled database URL.

        Returns:
            str: The override URL when configured, otherwise a PostgreSQL URL
                built from the DB_* components.

        Notes:
            1. If `database_url_override` is set, return it unchanged.
            2. Otherwise build a PostgresDsn from scheme, username, password, host, port and database name.

        """
        if self.database_url_override:
            return self.database_url_override
        return str(
            PostgresDsn.build(
                scheme="postgresql",
                username=self.db_user,
                password=self.db_password,
                host=self.db_host,
                port=self.db_port,
                path=self.db_name,
            )
        )

    # Security settings
    secret_key: str = Field(
        default="your-secret-key-change-in-production",
        validation_alias="SECRET_KEY",
    )
    algorithm: str = Field(default="HS256", validation_alias="ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=120,
        validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )
    secure_cookies: bool = Field(default=False, validation_alias="SECURE_COOKIES")

    # LLM provider defaults
    llm_api_key: str | None = Field(default=None, validation_alias="LLM_API_KEY")
    llm_endpoint: str | None = Field(default=None, validation_alias="LLM_ENDPOINT")
    llm_model_name: str = Field(default="gpt-4o", validation_alias="LLM_MODEL_NAME")
    llm_temperature: float = Field(default=0.7, validation_alias="LLM_TEMPERATURE")

    # Generation policy
    llm_timeout_seconds: float = Field(
        default=45.0,
        gt=0,
        validation_alias="LLM_TIMEOUT_SECONDS",
    )
    llm_max_attempts: int = Field(default=3, ge=1, validation_alias="LLM_MAX_ATTEMPTS")
    llm_retry_base_delay_seconds: float = Field(
        default=1.0,
        ge=0,
        validation_alias="LLM_RETRY_BASE_DELAY_SECONDS",
    )

    # Interview policy
    interview_max_questions: int = Field(
        default=10,
        ge=1,
        validation_alias="INTERVIEW_MAX_QUESTIONS",
    )
    interview_transcript_window: int = Field(
        default=12,
        ge=0,
        validation_alias="INTERVIEW_TRANSCRIPT_WINDOW",
    )

    # Resume policy
    resume_max_bytes: int = Field(
        default=5 * 1024 * 1024,
        gt=0,
        validation_alias="RESUME_MAX_BYTES",
    )
    resume_max_stored: int = Field(default=2, ge=1, validation_alias="RESUME_MAX_STORED")

    # LinkedIn post policy
    post_recall_limit: int = Field(default=5, ge=0, validation_alias="POST_RECALL_LIMIT")

    # Encryption key
    encryption_key: str = Field(validation_alias="ENCRYPTION_KEY")


@lru_cache
def get_settings() -> Settings:
    """
    Get the global settings instance.

    Returns:
        Settings: The cached settings instance, built from environment variables,
            the optional .env file and defaults.

    Raises:
        ValidationError: If required environment variables are missing or invalid.

    Notes:
        1. Reads configuration from environment variables and the .env file.
        2. Returns a cached instance to avoid repeated parsing of the .env file.
        3. This function performs disk access to read the .env file on first call.

    """
    return Settings()
