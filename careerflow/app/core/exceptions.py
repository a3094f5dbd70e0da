"""Error taxonomy shared by the flows, the interview controller and the history store.

Routes translate these exceptions into HTTP responses; nothing below the route
layer raises `HTTPException` for these conditions.
"""

import logging

log = logging.getLogger(__name__)


class CareerFlowError(Exception):
    """Base class for all application errors."""


class InputValidationError(CareerFlowError, ValueError):
    """User input was malformed or too short. Raised before any external call.

    Attributes:
        field (str | None): Name of the offending form field, when known.

    """

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class GenerationError(CareerFlowError):
    """The LLM call failed: transport, provider, or an invalid payload."""


class GenerationTimeoutError(GenerationError):
    """Every attempt exceeded the configured timeout."""


class GenerationSchemaError(GenerationError):
    """The payload did not match the declared output shape or a local guard.

    Never retried: the prompt is the problem, not the transport.
    """


class PersistenceError(CareerFlowError):
    """A history write or delete failed."""


class RecordNotFoundError(CareerFlowError):
    """A requested record does not exist or belongs to another user."""


class InterviewStateError(CareerFlowError):
    """A turn was submitted to a session that does not accept turns."""


class InterviewSequenceError(InterviewStateError):
    """A turn was submitted out of sequence or raced a concurrent submission."""
