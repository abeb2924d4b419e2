"""
Command interpreter for the input line.

Turns a submitted line into exactly one outcome: a client-local action, a
hint for unparseable input, a "not connected" notice, or a playerAction sent
to the server.
"""

from enum import StrEnum

from ..display import GameDisplay
from ..error_types import ErrorMessages
from ..exceptions import SessionStateError, TransportError
from ..logging_config import get_logger
from ..models.command import Command, LocalAction, ParseFailure, ParseFailureReason
from ..realtime.dispatcher import PlayerRoster
from ..realtime.envelope import OutboundKind, build_action_payload
from ..realtime.transport import TransportManager
from ..session.manager import SessionManager
from .command_input import clean_command_input, tokenize
from .hints import HintPool
from .history import CommandHistory, NavigationDirection
from .parser import CommandParser

logger = get_logger(__name__)


class InputKey(StrEnum):
    """Keys the input line reacts to."""

    ENTER = "Enter"
    UP = "ArrowUp"
    DOWN = "ArrowDown"


class CommandInterpreter:
    """Glue between the input line, the parser, history and the transport."""

    def __init__(
        self,
        transport: TransportManager,
        session: SessionManager,
        display: GameDisplay,
        history: CommandHistory | None = None,
        parser: CommandParser | None = None,
        hints: HintPool | None = None,
        roster: PlayerRoster | None = None,
    ) -> None:
        self.transport = transport
        self.session = session
        self.display = display
        self.history = history or CommandHistory()
        self.parser = parser or CommandParser()
        self.hints = hints or HintPool()
        self.roster = roster or PlayerRoster()

    async def handle_key(self, key: str, current: str) -> str:
        """
        React to a key press on the input line.

        Returns:
            What the input line should contain afterwards
        """
        if key == InputKey.ENTER:
            await self.submit(current)
            return ""
        if key == InputKey.UP:
            return self.history.navigate(NavigationDirection.OLDER)
        if key == InputKey.DOWN:
            return self.history.navigate(NavigationDirection.NEWER)
        return current

    async def submit(self, line: str) -> Command | ParseFailure:
        """Process one submitted line and return what it parsed to."""
        tokens = tokenize(line)
        if tokens:
            self.history.record(clean_command_input(line))

        result = self.parser.parse(tokens, self.roster.names)

        if isinstance(result, ParseFailure):
            if result.reason is ParseFailureReason.UNRECOGNIZED_FORM:
                self.display.show_error(self.hints.pick())
            return result

        if result.is_local:
            await self._run_local(result)
            return result

        if not self.transport.is_open:
            self.display.show_error(ErrorMessages.NOT_CONNECTED)
            return result

        try:
            await self.transport.send(OutboundKind.PLAYER_ACTION, build_action_payload(result))
        except TransportError as e:
            self.display.show_error(e.user_friendly)
        return result

    async def _run_local(self, command: Command) -> None:
        logger.debug("Running local command", action=command.action)
        if command.action == LocalAction.CLEAR_SCREEN:
            self.display.clear()
        elif command.action == LocalAction.LOGOUT:
            try:
                await self.session.logout()
            except SessionStateError as e:
                self.display.show_error(e.user_friendly)
        elif command.action == LocalAction.RECONNECT:
            await self.transport.reconnect()
