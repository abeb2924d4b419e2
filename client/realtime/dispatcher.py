"""
Inbound envelope dispatcher.

Validates each decoded envelope against the known message kinds and routes
it to its handler. Routing is a table keyed by envelope model, checked at
construction so that every known kind has a handler.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..display import GameDisplay
from ..error_types import ErrorMessages
from ..exceptions import ConfigurationError
from ..logging_config import get_logger
from ..models.envelope import (
    INBOUND_ENVELOPE_TYPES,
    KNOWN_ENVELOPE_KINDS,
    BaseEnvelope,
    CharacterCreationResultEnvelope,
    ChatMessageEnvelope,
    DisplayMessageEnvelope,
    FullStateSyncEnvelope,
    GameJoinedEnvelope,
    LoginResultEnvelope,
    RestoreSessionResultEnvelope,
    SessionErrorEnvelope,
    inbound_envelope_adapter,
)
from ..session.manager import SessionManager

logger = get_logger(__name__)

CHAT_TAG = "tell-message"

# Server message kinds and the presentation tag each one is shown with
MESSAGE_KIND_TAGS: dict[str, str] = {
    "error": "error-message",
    "info": "info-message",
    "combat": "combat-message",
    "npc": "npc-message",
    "emote": "emote-message",
    "tell": "tell-message",
    "tell-all": "tell-message",
    "tell-room": "tell-message",
}

EnvelopeCallback = Callable[[Any], Awaitable[None]]


class PlayerRoster:
    """Names of connected players as last reported by the server."""

    def __init__(self) -> None:
        self.names: tuple[str, ...] | None = None

    def update(self, names: list[str]) -> None:
        self.names = tuple(names)
        logger.debug("Roster updated", player_count=len(self.names))


class InboundDispatcher:
    """Routes validated inbound envelopes to the session and the display."""

    def __init__(self, session: SessionManager, display: GameDisplay, roster: PlayerRoster | None = None) -> None:
        self.session = session
        self.display = display
        self.roster = roster or PlayerRoster()
        self._handlers: dict[type[BaseEnvelope], EnvelopeCallback] = {
            LoginResultEnvelope: session.handle_login_result,
            CharacterCreationResultEnvelope: session.handle_character_created,
            RestoreSessionResultEnvelope: session.handle_restore_result,
            FullStateSyncEnvelope: self._handle_game_state,
            DisplayMessageEnvelope: self._handle_display_message,
            GameJoinedEnvelope: self._handle_game_joined,
            SessionErrorEnvelope: self._handle_session_error,
            ChatMessageEnvelope: self._handle_chat_message,
        }

        missing = [model.__name__ for model in INBOUND_ENVELOPE_TYPES if model not in self._handlers]
        if missing:
            raise ConfigurationError(
                f"No inbound handler registered for: {', '.join(missing)}",
                config_key="dispatcher.handlers",
            )

    async def dispatch(self, envelope: dict[str, Any]) -> None:
        """
        Handle one decoded envelope.

        Unknown kinds are ignored. A known kind whose payload does not
        validate is logged and dropped.
        """
        kind = envelope.get("type")
        if kind not in KNOWN_ENVELOPE_KINDS:
            logger.debug("Ignoring unknown envelope type", envelope_type=kind)
            return

        try:
            model = inbound_envelope_adapter.validate_python(envelope)
        except PydanticValidationError as e:
            logger.warning(
                "Dropping invalid envelope",
                envelope_type=kind,
                error_count=e.error_count(),
                errors=[error.get("msg") for error in e.errors()],
            )
            return

        await self._handlers[type(model)](model)

    async def _handle_game_state(self, envelope: FullStateSyncEnvelope) -> None:
        self.display.update_status(envelope.player_state)
        if envelope.connected_players is not None:
            self.roster.update(envelope.connected_players)

    async def _handle_display_message(self, envelope: DisplayMessageEnvelope) -> None:
        tag = MESSAGE_KIND_TAGS.get(envelope.message_type or "")
        self.display.show_message(envelope.content, tag)

    async def _handle_game_joined(self, envelope: GameJoinedEnvelope) -> None:
        self.display.show_welcome(envelope.player_name)

    async def _handle_session_error(self, envelope: SessionErrorEnvelope) -> None:
        # The server disconnects right after this; the transport reports the drop
        logger.warning("Server refused session", message=envelope.message)
        self.display.show_error(envelope.message or ErrorMessages.ALREADY_CONNECTED)

    async def _handle_chat_message(self, envelope: ChatMessageEnvelope) -> None:
        text = f"{envelope.sender_id}: {envelope.content}" if envelope.sender_id else envelope.content
        self.display.show_message(text, CHAT_TAG)
