"""
Unit tests for SessionManager.

The transport is an AsyncMock; storage is in memory.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from client.error_types import ErrorMessages
from client.exceptions import (
    AuthenticationError,
    CharacterValidationError,
    SessionRequestPendingError,
    SessionStateError,
    TransportError,
    TransportNotOpenError,
)
from client.models.envelope import (
    CharacterCreationResultEnvelope,
    LoginResultEnvelope,
    RestoreSessionResultEnvelope,
)
from client.realtime.envelope import OutboundKind
from client.session.manager import PendingRequest, SessionManager
from client.session.state_machine import SessionState
from client.session.storage import PLAYER_NAME_KEY, SESSION_TOKEN_KEY, MemoryStorage


@pytest.fixture
def mock_transport():
    transport = MagicMock()
    transport.send = AsyncMock()
    return transport


@pytest.fixture
def session(mock_transport, memory_storage, mock_display):
    return SessionManager(mock_transport, memory_storage, mock_display)


def _login_ok(token="tok-1", name="Ann"):
    return LoginResultEnvelope(success=True, sessionToken=token, playerName=name)


async def _logged_in(session):
    await session.login("Ann", "pw")
    await session.handle_login_result(_login_ok())


class TestLogin:
    """Test the login flow."""

    @pytest.mark.asyncio
    async def test_login_sends_request_and_waits(self, session, mock_transport):
        await session.login("Ann", "pw")

        mock_transport.send.assert_awaited_once_with(OutboundKind.LOGIN, {"playerName": "Ann", "password": "pw"})
        assert session.state is SessionState.AUTHENTICATING
        assert session.pending_request is PendingRequest.LOGIN

    @pytest.mark.asyncio
    async def test_login_success_persists_session(self, session, memory_storage):
        await _logged_in(session)

        assert session.is_authenticated
        assert memory_storage.get(SESSION_TOKEN_KEY) == "tok-1"
        assert memory_storage.get(PLAYER_NAME_KEY) == "Ann"
        assert session.pending_request is None

    @pytest.mark.asyncio
    async def test_login_failure_shows_server_message(self, session, mock_display, memory_storage):
        await session.login("Ann", "wrong")
        await session.handle_login_result(LoginResultEnvelope(success=False, message="Bad password"))

        assert session.state is SessionState.ANONYMOUS
        mock_display.show_error.assert_called_once_with("Bad password")
        assert isinstance(session.last_error, AuthenticationError)
        assert memory_storage.get(SESSION_TOKEN_KEY) is None

    @pytest.mark.asyncio
    async def test_second_request_while_pending_rejected(self, session, mock_transport):
        """Test only one session request can be outstanding."""
        await session.login("Ann", "pw")

        with pytest.raises(SessionRequestPendingError):
            await session.login("Ann", "pw")
        with pytest.raises(SessionRequestPendingError):
            await session.create_character(
                {"name": "Bo", "password": "x", "confirmPassword": "x", "sex": "male"}
            )

        assert mock_transport.send.await_count == 1

    @pytest.mark.asyncio
    async def test_login_when_authenticated_rejected(self, session):
        await _logged_in(session)

        with pytest.raises(SessionStateError) as exc_info:
            await session.login("Ann", "pw")

        assert exc_info.value.user_friendly == ErrorMessages.ALREADY_LOGGED_IN

    @pytest.mark.asyncio
    async def test_send_failure_returns_to_anonymous(self, session, mock_transport):
        mock_transport.send.side_effect = TransportNotOpenError("closed")

        with pytest.raises(TransportNotOpenError):
            await session.login("Ann", "pw")

        assert session.state is SessionState.ANONYMOUS
        assert session.pending_request is None

    @pytest.mark.asyncio
    async def test_unexpected_result_ignored(self, session):
        """Test a result with no matching request changes nothing."""
        await session.handle_login_result(_login_ok())

        assert session.state is SessionState.ANONYMOUS

    @pytest.mark.asyncio
    async def test_server_message_on_success_is_shown(self, session, mock_display):
        await session.login("Ann", "pw")
        await session.handle_login_result(
            LoginResultEnvelope(success=True, sessionToken="t", playerName="Ann", message="Welcome back")
        )

        mock_display.show_notice.assert_called_once_with("Welcome back")


class TestCharacterCreation:
    """Test character creation."""

    @pytest.mark.asyncio
    async def test_invalid_form_sends_nothing(self, session, mock_transport):
        with pytest.raises(CharacterValidationError):
            await session.create_character({"name": "Bo", "password": "x", "confirmPassword": "y", "sex": "male"})

        mock_transport.send.assert_not_awaited()
        assert session.state is SessionState.ANONYMOUS

    @pytest.mark.asyncio
    async def test_valid_form_is_sent(self, session, mock_transport):
        await session.create_character({"name": "Bo", "password": "x", "confirmPassword": "x", "sex": "male"})

        mock_transport.send.assert_awaited_once_with(
            OutboundKind.CREATE_CHARACTER, {"playerName": "Bo", "password": "x", "sex": "male"}
        )
        assert session.pending_request is PendingRequest.CREATE_CHARACTER

    @pytest.mark.asyncio
    async def test_server_rejection_keeps_anonymous(self, session, mock_display):
        await session.create_character({"name": "Bo", "password": "x", "confirmPassword": "x", "sex": "male"})
        await session.handle_character_created(
            CharacterCreationResultEnvelope(success=False, message="Name already taken")
        )

        assert session.state is SessionState.ANONYMOUS
        mock_display.show_error.assert_called_once_with("Name already taken")

    @pytest.mark.asyncio
    async def test_success_behaves_like_login(self, session, memory_storage):
        await session.create_character({"name": "Bo", "password": "x", "confirmPassword": "x", "sex": "male"})
        await session.handle_character_created(
            CharacterCreationResultEnvelope(success=True, sessionToken="new-tok", playerName="Bo")
        )

        assert session.is_authenticated
        assert memory_storage.get(SESSION_TOKEN_KEY) == "new-tok"


class TestRestore:
    """Test session restore."""

    @pytest.mark.asyncio
    async def test_restore_without_token_is_noop(self, session, mock_transport):
        assert await session.restore_session() is False

        mock_transport.send.assert_not_awaited()
        assert session.state is SessionState.ANONYMOUS

    @pytest.mark.asyncio
    async def test_restore_sends_stored_token(self, mock_transport, mock_display):
        storage = MemoryStorage({SESSION_TOKEN_KEY: "tok-9", PLAYER_NAME_KEY: "Ann"})
        session = SessionManager(mock_transport, storage, mock_display)

        assert await session.restore_session() is True

        mock_transport.send.assert_awaited_once_with(OutboundKind.RESTORE_SESSION, {"sessionToken": "tok-9"})
        assert session.pending_request is PendingRequest.RESTORE

    @pytest.mark.asyncio
    async def test_restore_success(self, mock_transport, mock_display):
        storage = MemoryStorage({SESSION_TOKEN_KEY: "tok-9", PLAYER_NAME_KEY: "Ann"})
        session = SessionManager(mock_transport, storage, mock_display)
        await session.restore_session()

        await session.handle_restore_result(RestoreSessionResultEnvelope(success=True, playerName="Ann"))

        assert session.is_authenticated
        assert storage.get(SESSION_TOKEN_KEY) == "tok-9"

    @pytest.mark.asyncio
    async def test_restore_rejection_clears_token(self, mock_transport, mock_display):
        """Test a rejected restore forgets the stored session."""
        storage = MemoryStorage({SESSION_TOKEN_KEY: "stale", PLAYER_NAME_KEY: "Ann"})
        session = SessionManager(mock_transport, storage, mock_display)
        await session.restore_session()

        await session.handle_restore_result(RestoreSessionResultEnvelope(success=False))

        assert session.state is SessionState.ANONYMOUS
        assert storage.get(SESSION_TOKEN_KEY) is None
        assert storage.get(PLAYER_NAME_KEY) is None
        mock_display.show_error.assert_called_once_with(ErrorMessages.SESSION_EXPIRED)

    @pytest.mark.asyncio
    async def test_restore_while_authenticated_is_noop(self, session, mock_transport):
        await _logged_in(session)
        mock_transport.send.reset_mock()

        assert await session.restore_session() is False
        mock_transport.send.assert_not_awaited()


class TestLogout:
    """Test logout."""

    @pytest.mark.asyncio
    async def test_logout_clears_session(self, session, mock_transport, memory_storage, mock_display):
        await _logged_in(session)

        await session.logout()

        mock_transport.send.assert_awaited_with(OutboundKind.LOGOUT)
        assert session.state is SessionState.ANONYMOUS
        assert memory_storage.get(SESSION_TOKEN_KEY) is None
        mock_display.show_notice.assert_called_with(ErrorMessages.LOGGED_OUT)

    @pytest.mark.asyncio
    async def test_logout_with_closed_transport_still_logs_out(self, session, mock_transport, memory_storage):
        await _logged_in(session)
        mock_transport.send.side_effect = TransportNotOpenError("closed")

        await session.logout()

        assert session.state is SessionState.ANONYMOUS
        assert memory_storage.get(SESSION_TOKEN_KEY) is None

    @pytest.mark.asyncio
    async def test_logout_when_anonymous_rejected(self, session):
        with pytest.raises(SessionStateError) as exc_info:
            await session.logout()

        assert exc_info.value.user_friendly == ErrorMessages.NOT_LOGGED_IN


class TestConnectionLost:
    """Test behaviour when the connection drops."""

    @pytest.mark.asyncio
    async def test_pending_request_abandoned(self, session):
        await session.login("Ann", "pw")

        await session.handle_connection_lost()

        assert session.pending_request is None
        assert session.state is SessionState.ANONYMOUS

    @pytest.mark.asyncio
    async def test_token_kept_for_next_restore(self, session, memory_storage, mock_transport):
        await _logged_in(session)

        await session.handle_connection_lost()

        assert session.state is SessionState.ANONYMOUS
        assert memory_storage.get(SESSION_TOKEN_KEY) == "tok-1"
        assert await session.restore_session() is True

    @pytest.mark.asyncio
    async def test_late_result_after_drop_ignored(self, session):
        await session.login("Ann", "pw")
        await session.handle_connection_lost()

        await session.handle_login_result(_login_ok())

        assert session.state is SessionState.ANONYMOUS

    @pytest.mark.asyncio
    async def test_drop_during_login_send_leaves_anonymous(self, session, mock_transport):
        """Test a send failure after the reader already abandoned the request does not raise a bad transition."""

        async def drop_then_fail(*args, **kwargs):
            await session.handle_connection_lost()
            raise TransportError("connection closed while sending")

        mock_transport.send.side_effect = drop_then_fail

        with pytest.raises(TransportError):
            await session.login("Ann", "pw")

        assert session.state is SessionState.ANONYMOUS
        assert session.pending_request is None

    @pytest.mark.asyncio
    async def test_drop_during_logout_send_leaves_anonymous(self, session, mock_transport, memory_storage):
        await _logged_in(session)

        async def drop_then_fail(*args, **kwargs):
            await session.handle_connection_lost()
            raise TransportError("connection closed while sending")

        mock_transport.send.side_effect = drop_then_fail

        await session.logout()

        assert session.state is SessionState.ANONYMOUS
        assert memory_storage.get(SESSION_TOKEN_KEY) is None


class TestWaitForResult:
    """Test waiting for an outstanding session request."""

    @pytest.mark.asyncio
    async def test_returns_immediately_when_idle(self, session):
        await asyncio.wait_for(session.wait_for_result(), timeout=1)

    @pytest.mark.asyncio
    async def test_released_by_result(self, session):
        await session.login("Ann", "pw")
        waiter = asyncio.create_task(session.wait_for_result())
        await asyncio.sleep(0)
        assert not waiter.done()

        await session.handle_login_result(_login_ok())

        await asyncio.wait_for(waiter, timeout=1)
        assert session.state is SessionState.AUTHENTICATED

    @pytest.mark.asyncio
    async def test_released_by_drop(self, session):
        await session.login("Ann", "pw")
        waiter = asyncio.create_task(session.wait_for_result())
        await asyncio.sleep(0)

        await session.handle_connection_lost()

        await asyncio.wait_for(waiter, timeout=1)

    @pytest.mark.asyncio
    async def test_released_by_send_failure(self, session, mock_transport):
        mock_transport.send.side_effect = TransportError("gone")

        with pytest.raises(TransportError):
            await session.login("Ann", "pw")

        await asyncio.wait_for(session.wait_for_result(), timeout=1)
        assert session.state is SessionState.ANONYMOUS
