"""
Connection state machine for the game server WebSocket.

States:
- closed: no socket
- connecting_secure: first attempt over wss
- connecting_insecure: plain ws attempt (first choice when not configured
  secure, otherwise the one-shot fallback)
- open: socket established

There is no automatic reconnect. Leaving closed again requires an explicit
connect from the player.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from statemachine import State, StateMachine

from ..logging_config import get_logger

logger = get_logger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states."""

    CLOSED = "closed"
    CONNECTING_SECURE = "connecting_secure"
    CONNECTING_INSECURE = "connecting_insecure"
    OPEN = "open"


class ConnectionStateMachine(StateMachine):
    """
    State machine for one client connection lifecycle.

    Transitions:
    - closed -> connecting_secure: begin_secure
    - closed -> connecting_insecure: begin_insecure
    - connecting_secure -> connecting_insecure: fall_back
    - connecting_* -> open: connection_opened
    - connecting_* -> closed: connection_failed
    - open -> closed: connection_lost
    - any non-closed -> closed: shut_down

    fall_back is only reachable from connecting_secure, which is only
    reachable from closed, so a lifecycle can fall back at most once.
    Firing an event the current state does not allow raises
    TransitionNotAllowed.
    """

    closed = State("Closed", value=ConnectionState.CLOSED, initial=True)
    connecting_secure = State("Connecting (secure)", value=ConnectionState.CONNECTING_SECURE)
    connecting_insecure = State("Connecting (insecure)", value=ConnectionState.CONNECTING_INSECURE)
    open = State("Open", value=ConnectionState.OPEN)

    begin_secure = closed.to(connecting_secure)
    begin_insecure = closed.to(connecting_insecure)
    fall_back = connecting_secure.to(connecting_insecure)
    connection_opened = connecting_secure.to(open) | connecting_insecure.to(open)
    connection_failed = connecting_secure.to(closed) | connecting_insecure.to(closed)
    connection_lost = open.to(closed)
    shut_down = connecting_secure.to(closed) | connecting_insecure.to(closed) | open.to(closed)

    def __init__(self, connection_id: str = "game"):
        """
        Initialize connection state machine.

        Args:
            connection_id: Label used in log lines
        """
        # Set attributes before super().__init__() because activation runs callbacks
        self.connection_id = connection_id
        self.fallbacks_this_lifecycle = 0
        self.total_connections = 0
        self.total_failures = 0
        self.last_connected_time: datetime | None = None
        self.last_error: Exception | None = None

        super().__init__()

    @property
    def state(self) -> ConnectionState:
        return self.current_state_value

    @property
    def is_connecting(self) -> bool:
        return self.state in (ConnectionState.CONNECTING_SECURE, ConnectionState.CONNECTING_INSECURE)

    def after_transition(self, event: Any = None, source: State | None = None, target: State | None = None) -> None:
        logger.info(
            "Connection state transition",
            connection_id=self.connection_id,
            trigger_event=str(event) if event else "unknown",
            from_state=getattr(source, "id", None),
            to_state=getattr(target, "id", None),
        )

    # Hooks

    def on_begin_secure(self) -> None:
        self.fallbacks_this_lifecycle = 0

    def on_begin_insecure(self) -> None:
        self.fallbacks_this_lifecycle = 0

    def on_fall_back(self, error: Exception | None = None) -> None:
        """Record the failed secure attempt before trying plain ws."""
        self.fallbacks_this_lifecycle += 1
        self.last_error = error
        logger.warning(
            "Secure connection failed, falling back to insecure transport",
            connection_id=self.connection_id,
            error=str(error) if error else "unknown",
        )

    def on_connection_opened(self, url: str | None = None) -> None:
        self.last_connected_time = datetime.now(UTC)
        self.total_connections += 1
        logger.info(
            "Connection established",
            connection_id=self.connection_id,
            url=url,
            total_connections=self.total_connections,
        )

    def on_connection_failed(self, error: Exception | None = None) -> None:
        self.last_error = error
        self.total_failures += 1
        logger.error(
            "Connection attempt failed",
            connection_id=self.connection_id,
            error=str(error) if error else "unknown",
            total_failures=self.total_failures,
        )

    def on_connection_lost(self, reason: str | None = None) -> None:
        logger.warning("Connection lost", connection_id=self.connection_id, reason=reason)

    def get_stats(self) -> dict[str, Any]:
        """Connection statistics for debugging."""
        return {
            "connection_id": self.connection_id,
            "current_state": self.state.value,
            "fallbacks_this_lifecycle": self.fallbacks_this_lifecycle,
            "total_connections": self.total_connections,
            "total_failures": self.total_failures,
            "last_connected_time": self.last_connected_time.isoformat() if self.last_connected_time else None,
            "last_error": str(self.last_error) if self.last_error else None,
        }
