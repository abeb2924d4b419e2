"""
Centralized error types and user-facing notice text for the MUD client.

Keeps the wording of transport and session notices consistent between the
interpreter, the session manager and the transport manager.
"""

from enum import Enum


class ErrorType(Enum):
    """Standardized error categories attached to every client error."""

    CLIENT_ERROR = "client_error"

    # Input
    VALIDATION_ERROR = "validation_error"

    # Session
    AUTHENTICATION_FAILED = "authentication_failed"
    REQUEST_PENDING = "request_pending"
    INVALID_SESSION_STATE = "invalid_session_state"

    # Transport
    CONNECTION_ERROR = "connection_error"
    NOT_CONNECTED = "not_connected"

    # Configuration
    CONFIGURATION_ERROR = "configuration_error"


class ErrorMessages:
    """Common notice text for a consistent player experience."""

    # Session
    LOGIN_IN_PROGRESS = "A login request is already in progress. Please wait."
    ALREADY_LOGGED_IN = "You are already logged in."
    NOT_LOGGED_IN = "You are not logged in."
    SESSION_EXPIRED = "Your session has expired. Please log in again."
    PASSWORD_MISMATCH = "Passwords do not match."
    MISSING_FIELDS = "Please fill in the required fields: {fields}"
    INVALID_FIELDS = "Please correct the following fields: {fields}"

    # Transport
    NOT_CONNECTED = "You are not connected to the server."
    CONNECTION_FAILED = "Unable to connect to the server. Use 'reconnect' to try again."
    CONNECTION_LOST = "The connection to the server was lost. Use 'reconnect' to try again."
    SECURE_FALLBACK = "Secure connection failed, retrying without encryption."
    ALREADY_CONNECTED = "You are already connected."

    # Display
    LOGGED_OUT = "You have logged out. Until next time, my friend..."
