"""
Unit tests for the client exception hierarchy.
"""

from client.error_types import ErrorType
from client.exceptions import (
    AuthenticationError,
    CharacterValidationError,
    ConfigurationError,
    MudClientError,
    SessionRequestPendingError,
    TransportNotOpenError,
    create_error_context,
)


def test_user_friendly_defaults_to_message():
    error = MudClientError("boom")

    assert error.user_friendly == "boom"
    assert error.error_type is ErrorType.CLIENT_ERROR


def test_to_dict_includes_context_and_category():
    context = create_error_context(player_name="Ann", session_state="authenticated")
    error = AuthenticationError("rejected", context=context, auth_type="login", user_friendly="Bad password")

    data = error.to_dict()

    assert data["error_type"] == "AuthenticationError"
    assert data["category"] == "authentication_failed"
    assert data["user_friendly"] == "Bad password"
    assert data["context"]["player_name"] == "Ann"
    assert data["details"] == {"auth_type": "login"}


def test_configuration_error_records_key():
    error = ConfigurationError("bad file", config_key="storage.session_file")

    assert error.details["config_key"] == "storage.session_file"


def test_character_validation_error_lists_fields():
    error = CharacterValidationError("invalid", missing_fields=["name"], invalid_fields=["sex"])

    assert error.details["missing_fields"] == ["name"]
    assert error.details["invalid_fields"] == ["sex"]
    assert error.error_type is ErrorType.VALIDATION_ERROR


def test_subclass_categories():
    """Test subclasses override the category of their parent."""
    assert SessionRequestPendingError("pending").error_type is ErrorType.REQUEST_PENDING
    assert TransportNotOpenError("closed").error_type is ErrorType.NOT_CONNECTED

