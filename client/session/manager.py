"""
Session manager: login, character creation, session restore and logout.

At most one login, creation or restore request is outstanding at a time. A
second request is rejected locally instead of being queued.
"""

import asyncio
from enum import StrEnum
from typing import Any, Protocol

from ..display import GameDisplay
from ..error_types import ErrorMessages
from ..exceptions import (
    AuthenticationError,
    SessionRequestPendingError,
    SessionStateError,
    TransportError,
    create_error_context,
)
from ..logging_config import get_logger
from ..models.envelope import (
    CharacterCreationResultEnvelope,
    LoginResultEnvelope,
    RestoreSessionResultEnvelope,
    SessionResultEnvelope,
)
from ..realtime.envelope import OutboundKind
from .models import CharacterCreationForm, validate_character_form
from .state_machine import SessionState, SessionStateMachine
from .storage import PLAYER_NAME_KEY, SESSION_TOKEN_KEY, SessionStorage

logger = get_logger(__name__)


class PendingRequest(StrEnum):
    LOGIN = "login"
    CREATE_CHARACTER = "createNewCharacter"
    RESTORE = "restoreSession"


class EnvelopeSender(Protocol):
    async def send(self, kind: str, payload: dict[str, Any] | None = None) -> None: ...


class SessionManager:
    """Tracks who the player is and talks to the server about it."""

    def __init__(self, transport: EnvelopeSender, storage: SessionStorage, display: GameDisplay) -> None:
        self.transport = transport
        self.storage = storage
        self.display = display
        self._machine = SessionStateMachine()
        self._pending: PendingRequest | None = None
        self._request_done = asyncio.Event()
        self._request_done.set()
        self.player_name: str | None = storage.get(PLAYER_NAME_KEY)
        self.last_error: AuthenticationError | None = None

    @property
    def state(self) -> SessionState:
        return self._machine.state

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED

    @property
    def pending_request(self) -> PendingRequest | None:
        return self._pending

    async def wait_for_result(self) -> None:
        """Wait until no login, creation or restore request is outstanding."""
        await self._request_done.wait()

    @property
    def session_token(self) -> str | None:
        return self.storage.get(SESSION_TOKEN_KEY)

    # Requests

    async def login(self, player_name: str, password: str) -> None:
        """
        Send a login request.

        Raises:
            SessionRequestPendingError: Another request is awaiting its result
            SessionStateError: Already logged in
            TransportError: The request could not be sent
        """
        self._begin_request(PendingRequest.LOGIN, player_name=player_name)
        await self._send_request(OutboundKind.LOGIN, {"playerName": player_name, "password": password})

    async def create_character(self, form_data: dict[str, Any] | CharacterCreationForm) -> None:
        """
        Validate the form locally, then send it.

        Raises:
            CharacterValidationError: The form is incomplete or inconsistent; nothing is sent
            SessionRequestPendingError: Another request is awaiting its result
            SessionStateError: Already logged in
        """
        self._check_can_request(PendingRequest.CREATE_CHARACTER)
        form = form_data if isinstance(form_data, CharacterCreationForm) else validate_character_form(form_data)
        self._begin_request(PendingRequest.CREATE_CHARACTER, player_name=form.name)
        await self._send_request(OutboundKind.CREATE_CHARACTER, form.to_payload())

    async def restore_session(self) -> bool:
        """
        Ask the server to resume the stored session.

        Called each time the connection opens. Does nothing when no token is
        stored or a session is already active.

        Returns:
            True when a restore request was sent
        """
        token = self.session_token
        if not token:
            logger.debug("No stored session token, skipping restore")
            return False
        if self.state is SessionState.AUTHENTICATED:
            logger.debug("Session already authenticated, skipping restore")
            return False

        self._begin_request(PendingRequest.RESTORE, player_name=self.player_name)
        await self._send_request(OutboundKind.RESTORE_SESSION, {"sessionToken": token})
        return True

    async def logout(self) -> None:
        """
        Log out and forget the stored session.

        The logout message is best effort; a closed connection does not stop
        the local logout.

        Raises:
            SessionStateError: Not logged in
        """
        if self.state is not SessionState.AUTHENTICATED:
            raise SessionStateError(
                "Logout requested while not authenticated",
                context=self._context(),
                operation="logout",
                current_state=self.state.value,
                user_friendly=ErrorMessages.NOT_LOGGED_IN,
            )

        try:
            await self.transport.send(OutboundKind.LOGOUT)
        except TransportError as e:
            logger.info("Logout message not delivered, logging out locally", error=str(e))

        logger.info("Player logged out", player_name=self.player_name)
        self._clear_stored_session()
        # The connection may have dropped while the logout message was in flight
        if self.state is SessionState.AUTHENTICATED:
            self._machine.logged_out()
        self.display.show_notice(ErrorMessages.LOGGED_OUT)

    # Results

    async def handle_login_result(self, envelope: LoginResultEnvelope) -> None:
        self._handle_result(PendingRequest.LOGIN, envelope)

    async def handle_character_created(self, envelope: CharacterCreationResultEnvelope) -> None:
        self._handle_result(PendingRequest.CREATE_CHARACTER, envelope)

    async def handle_restore_result(self, envelope: RestoreSessionResultEnvelope) -> None:
        self._handle_result(PendingRequest.RESTORE, envelope)

    async def handle_connection_lost(self) -> None:
        """Abandon any outstanding request; the stored token survives for the next restore."""
        if self._pending is not None:
            logger.info("Abandoning session request on disconnect", request=self._pending.value)
            self._finish_request()
        if self.state is not SessionState.ANONYMOUS:
            self._machine.connection_dropped()

    # Internals

    def _check_can_request(self, request: PendingRequest) -> None:
        if self._pending is not None:
            raise SessionRequestPendingError(
                f"Cannot start {request.value} while {self._pending.value} is pending",
                context=self._context(),
                operation=request.value,
                current_state=self.state.value,
                user_friendly=ErrorMessages.LOGIN_IN_PROGRESS,
            )
        if self.state is not SessionState.ANONYMOUS:
            raise SessionStateError(
                f"Cannot start {request.value} from state {self.state.value}",
                context=self._context(),
                operation=request.value,
                current_state=self.state.value,
                user_friendly=ErrorMessages.ALREADY_LOGGED_IN,
            )

    def _begin_request(self, request: PendingRequest, player_name: str | None = None) -> None:
        self._check_can_request(request)
        self._pending = request
        self._request_done.clear()
        self._machine.request_sent()
        logger.info("Session request started", request=request.value, player_name=player_name)

    async def _send_request(self, kind: OutboundKind, payload: dict[str, Any]) -> None:
        request = self._pending
        try:
            await self.transport.send(kind, payload)
        except TransportError:
            # A drop seen by the reader may already have abandoned this request
            if self._pending is request and self.state is SessionState.AUTHENTICATING:
                self._finish_request()
                self._machine.request_rejected()
            raise

    def _handle_result(self, expected: PendingRequest, envelope: SessionResultEnvelope) -> None:
        if self._pending is not expected:
            logger.warning(
                "Ignoring unexpected session result",
                result_type=envelope.type,
                pending=self._pending.value if self._pending else None,
            )
            return

        self._finish_request()
        if envelope.success:
            self._accept(envelope)
        else:
            self._reject(expected, envelope)

    def _accept(self, envelope: SessionResultEnvelope) -> None:
        if envelope.session_token:
            self.storage.set(SESSION_TOKEN_KEY, envelope.session_token)
        if envelope.player_name:
            self.storage.set(PLAYER_NAME_KEY, envelope.player_name)
            self.player_name = envelope.player_name
        self.last_error = None
        self._machine.request_accepted()
        logger.info("Session authenticated", result_type=envelope.type, player_name=self.player_name)
        if envelope.message:
            self.display.show_notice(envelope.message)

    def _reject(self, request: PendingRequest, envelope: SessionResultEnvelope) -> None:
        if request is PendingRequest.RESTORE:
            self._clear_stored_session()
            fallback_message = ErrorMessages.SESSION_EXPIRED
        else:
            fallback_message = f"The server rejected the {request.value} request."

        self.last_error = AuthenticationError(
            f"Server rejected {request.value}",
            context=self._context(),
            auth_type=request.value,
            user_friendly=envelope.message or fallback_message,
        )
        self._machine.request_rejected()
        self.display.show_error(self.last_error.user_friendly)

    def _finish_request(self) -> None:
        self._pending = None
        self._request_done.set()

    def _clear_stored_session(self) -> None:
        self.storage.remove(SESSION_TOKEN_KEY)
        self.storage.remove(PLAYER_NAME_KEY)
        self.player_name = None

    def _context(self):
        return create_error_context(player_name=self.player_name, session_state=self.state.value)
