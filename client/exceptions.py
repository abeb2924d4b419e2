"""
Exception hierarchy for the MUD client.

Every client-raised error carries an ErrorContext and a user-friendly
message so the interpreter can show something sensible without knowing the
concrete error type.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .error_types import ErrorType
from .logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class ErrorContext:
    """
    Contextual information for error handling.

    Provides structured context for error reporting and debugging.
    """

    player_name: str | None = None
    command: str | None = None
    connection_url: str | None = None
    session_state: str | None = None
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for logging."""
        return {
            "player_name": self.player_name,
            "command": self.command,
            "connection_url": self.connection_url,
            "session_state": self.session_state,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }


class MudClientError(Exception):
    """
    Base exception for all client errors.

    Provides structured error handling with context and metadata.
    """

    error_type = ErrorType.CLIENT_ERROR
    # Errors the player can cause and recover from are logged below error level
    log_level = "error"

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        details: dict[str, Any] | None = None,
        user_friendly: str | None = None,
    ):
        """
        Initialize client error.

        Args:
            message: Technical error message
            context: Error context information
            details: Additional error details
            user_friendly: User-friendly error message
        """
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()
        self.details = details or {}
        self.user_friendly = user_friendly or message
        self.timestamp = datetime.now()

        self._log_error()

    def _log_error(self) -> None:
        """Log the error with structured context."""
        log = getattr(logger, self.log_level)
        log(
            "Client error occurred",
            error_type=self.__class__.__name__,
            category=self.error_type.value,
            message=self.message,
            context=self.context.to_dict(),
            details=self.details,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary."""
        return {
            "error_type": self.__class__.__name__,
            "category": self.error_type.value,
            "message": self.message,
            "user_friendly": self.user_friendly,
            "context": self.context.to_dict(),
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class ConfigurationError(MudClientError):
    """Configuration and setup errors."""

    error_type = ErrorType.CONFIGURATION_ERROR

    def __init__(self, message: str, context: ErrorContext | None = None, config_key: str | None = None, **kwargs):
        super().__init__(message, context, **kwargs)
        self.config_key = config_key
        if config_key:
            self.details["config_key"] = config_key


class ValidationError(MudClientError):
    """Data validation errors."""

    error_type = ErrorType.VALIDATION_ERROR
    log_level = "warning"

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        field: str | None = None,
        value: Any | None = None,
        **kwargs,
    ):
        super().__init__(message, context, **kwargs)
        self.field = field
        self.value = value
        if field:
            self.details["field"] = field
        if value is not None:
            self.details["value"] = str(value)


class CharacterValidationError(ValidationError):
    """Character creation form failed local validation; nothing was sent."""

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        missing_fields: list[str] | None = None,
        invalid_fields: list[str] | None = None,
        **kwargs,
    ):
        super().__init__(message, context, **kwargs)
        self.missing_fields = missing_fields or []
        self.invalid_fields = invalid_fields or []
        self.details["missing_fields"] = self.missing_fields
        self.details["invalid_fields"] = self.invalid_fields


class AuthenticationError(MudClientError):
    """Server-rejected login, character creation or session restore."""

    error_type = ErrorType.AUTHENTICATION_FAILED
    log_level = "warning"

    def __init__(self, message: str, context: ErrorContext | None = None, auth_type: str = "unknown", **kwargs):
        super().__init__(message, context, **kwargs)
        self.auth_type = auth_type
        self.details["auth_type"] = auth_type


class SessionStateError(MudClientError):
    """A session operation was requested from a state that does not allow it."""

    error_type = ErrorType.INVALID_SESSION_STATE
    log_level = "warning"

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        operation: str = "unknown",
        current_state: str | None = None,
        **kwargs,
    ):
        super().__init__(message, context, **kwargs)
        self.operation = operation
        self.current_state = current_state
        self.details["operation"] = operation
        if current_state:
            self.details["current_state"] = current_state


class SessionRequestPendingError(SessionStateError):
    """Another login, creation or restore request is still awaiting its result."""

    error_type = ErrorType.REQUEST_PENDING


class TransportError(MudClientError):
    """Network and connection errors."""

    error_type = ErrorType.CONNECTION_ERROR

    def __init__(self, message: str, context: ErrorContext | None = None, connection_type: str = "unknown", **kwargs):
        super().__init__(message, context, **kwargs)
        self.connection_type = connection_type
        self.details["connection_type"] = connection_type


class TransportNotOpenError(TransportError):
    """send() was called while the connection was not open."""

    error_type = ErrorType.NOT_CONNECTED
    log_level = "warning"



def create_error_context(**kwargs) -> ErrorContext:
    """
    Create an error context with the given parameters.

    Args:
        **kwargs: Context parameters

    Returns:
        ErrorContext object
    """
    return ErrorContext(**kwargs)
