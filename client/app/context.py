"""
Client context: builds and owns every client component.

There is exactly one connection and one session per context. Nothing in the
client reaches for module-level state; components receive their
collaborators here.

USAGE:
    context = ClientContext()
    await context.start()
    await context.interpreter.submit("look")
    await context.shutdown()
"""

from collections.abc import Awaitable, Callable
from typing import Any

from ..commands.interpreter import CommandInterpreter
from ..config import AppConfig, get_config
from ..display import ConsoleDisplay, GameDisplay
from ..logging_config import get_logger, setup_logging
from ..realtime.dispatcher import InboundDispatcher, PlayerRoster
from ..realtime.transport import TransportManager
from ..session.manager import SessionManager
from ..session.storage import JsonFileStorage, SessionStorage

logger = get_logger(__name__)


class ClientContext:
    """Explicitly constructed owner of the client components."""

    def __init__(
        self,
        config: AppConfig | None = None,
        display: GameDisplay | None = None,
        storage: SessionStorage | None = None,
        connector: Callable[..., Awaitable[Any]] | None = None,
        configure_logging: bool = False,
    ) -> None:
        self.config = config or get_config()
        if configure_logging:
            setup_logging(self.config.to_legacy_dict())

        self.display = display or ConsoleDisplay()
        self.storage = storage or JsonFileStorage(self.config.storage.session_file)
        self.roster = PlayerRoster()

        self.transport = TransportManager(self.config.connection, connector=connector)
        self.session = SessionManager(self.transport, self.storage, self.display)
        self.dispatcher = InboundDispatcher(self.session, self.display, self.roster)
        self.interpreter = CommandInterpreter(self.transport, self.session, self.display, roster=self.roster)

        self.transport.on_envelope = self.dispatcher.dispatch
        self.transport.on_open = self._on_open
        self.transport.on_close = self.session.handle_connection_lost
        self.transport.on_notice = self.display.show_error
        self._started = False

    @property
    def is_started(self) -> bool:
        return self._started

    async def start(self) -> bool:
        """
        Open the connection.

        Returns:
            True when the connection reached open
        """
        logger.info(
            "Starting client",
            host=self.config.connection.host,
            port=self.config.connection.port,
            secure=self.config.connection.secure,
        )
        self._started = True
        return await self.transport.connect()

    async def shutdown(self) -> None:
        """Close the connection. Safe to call more than once."""
        if not self._started:
            return
        logger.info("Shutting down client")
        await self.transport.close()
        self._started = False

    async def _on_open(self) -> None:
        await self.session.restore_session()
