"""
WebSocket transport for the game server.

Owns the single connection, its state machine and the reader task that feeds
inbound envelopes to the dispatcher one at a time, in arrival order.
"""

import asyncio
import contextlib
from collections.abc import Awaitable, Callable
from typing import Any

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from ..config.models import ConnectionConfig
from ..error_types import ErrorMessages
from ..exceptions import TransportError, TransportNotOpenError, create_error_context
from ..logging_config import get_logger
from .connection_state_machine import ConnectionState, ConnectionStateMachine
from .envelope import build_envelope, decode_frame, encode_envelope

logger = get_logger(__name__)

EnvelopeHandler = Callable[[dict[str, Any]], Awaitable[None]]
OpenHook = Callable[[], Awaitable[None]]
CloseHook = Callable[[], Awaitable[None]]
NoticeHook = Callable[[str], None]

# Errors websockets.connect raises for a failed attempt
CONNECT_ERRORS: tuple[type[BaseException], ...] = (OSError, TimeoutError, WebSocketException)


class TransportManager:
    """
    Single WebSocket connection with one secure-to-insecure fallback.

    Hooks are plain attributes so the context can wire them after every
    collaborator exists:
    - on_envelope: awaited for each decoded inbound envelope
    - on_open: awaited once each time the connection reaches open
    - on_close: awaited when an open connection drops or is closed
    - on_notice: called with player-facing warnings
    """

    def __init__(
        self,
        config: ConnectionConfig,
        connector: Callable[..., Awaitable[Any]] | None = None,
    ) -> None:
        self.config = config
        self._connector = connector or websockets.connect
        self._machine = ConnectionStateMachine()
        self._socket: Any = None
        self._reader_task: asyncio.Task | None = None
        # Bumped by every connect() and close(); a stale attempt sees a different value
        self._lifecycle = 0
        self.current_url: str | None = None

        self.on_envelope: EnvelopeHandler | None = None
        self.on_open: OpenHook | None = None
        self.on_close: CloseHook | None = None
        self.on_notice: NoticeHook | None = None

    @property
    def state(self) -> ConnectionState:
        return self._machine.state

    @property
    def is_open(self) -> bool:
        return self.state is ConnectionState.OPEN

    @property
    def fallbacks_this_lifecycle(self) -> int:
        return self._machine.fallbacks_this_lifecycle

    def get_stats(self) -> dict[str, Any]:
        return {**self._machine.get_stats(), "url": self.current_url}

    async def connect(self) -> bool:
        """
        Start a connection lifecycle.

        A secure configuration tries wss first and falls back to ws once.
        There is no further retry.

        Returns:
            True when the connection reached open
        """
        if self.state is not ConnectionState.CLOSED:
            logger.debug("Connect ignored, lifecycle already active", state=self.state.value)
            return self.is_open

        self._lifecycle += 1
        lifecycle = self._lifecycle
        if self.config.secure:
            self._machine.begin_secure()
        else:
            self._machine.begin_insecure()

        while True:
            secure = self.state is ConnectionState.CONNECTING_SECURE
            url = self.config.url(secure=secure)
            self.current_url = url
            logger.info("Connecting to game server", url=url, secure=secure)
            try:
                socket = await self._connector(url, open_timeout=self.config.open_timeout)
            except CONNECT_ERRORS as e:
                if self._superseded(lifecycle):
                    logger.info("Connection attempt abandoned", url=url, error=str(e))
                    return False
                await self._release_socket()
                if secure:
                    self._machine.fall_back(error=e)
                    self._notify(ErrorMessages.SECURE_FALLBACK)
                    continue
                self._machine.connection_failed(error=e)
                self._notify(ErrorMessages.CONNECTION_FAILED)
                return False

            if self._superseded(lifecycle):
                logger.info("Connection attempt abandoned after close", url=url)
                await self._close_socket(socket)
                return False

            self._socket = socket
            self._machine.connection_opened(url=url)
            break

        await self._run_open_hook()
        if lifecycle != self._lifecycle:
            # Closed while the open hook ran; close() already released the socket
            return False
        self._reader_task = asyncio.create_task(self._read_loop(socket), name="mudclient-reader")
        return True

    async def reconnect(self) -> bool:
        """Drop any current socket and start a fresh lifecycle."""
        logger.info("Reconnect requested", state=self.state.value)
        await self.close()
        return await self.connect()

    async def close(self) -> None:
        """Close the connection on purpose. No notice is shown, but on_close still fires."""
        if self.state is ConnectionState.CLOSED:
            return
        self._lifecycle += 1
        was_open = self.is_open
        await self._release_socket()
        self._machine.shut_down()
        if was_open and self.on_close is not None:
            await self.on_close()

    async def send(self, kind: str, payload: dict[str, Any] | None = None) -> None:
        """
        Send one envelope.

        Raises:
            TransportNotOpenError: If the connection is not open
            TransportError: If the socket closed while sending
        """
        if not self.is_open or self._socket is None:
            raise TransportNotOpenError(
                f"Cannot send '{kind}' while connection is {self.state.value}",
                context=create_error_context(connection_url=self.current_url, metadata={"kind": str(kind)}),
                connection_type="websocket",
                user_friendly=ErrorMessages.NOT_CONNECTED,
            )

        message = encode_envelope(build_envelope(kind, payload))
        try:
            await self._socket.send(message)
        except ConnectionClosed as e:
            # The reader task observes the same closure and moves the machine to closed
            raise TransportError(
                f"Connection closed while sending '{kind}'",
                context=create_error_context(connection_url=self.current_url),
                connection_type="websocket",
                user_friendly=ErrorMessages.CONNECTION_LOST,
            ) from e
        logger.debug("Envelope sent", kind=str(kind))

    async def _run_open_hook(self) -> None:
        if self.on_open is None:
            return
        try:
            await self.on_open()
        except TransportError as e:
            logger.warning("Open hook could not complete", error=str(e))

    async def _read_loop(self, socket: Any) -> None:
        reason = None
        try:
            async for frame in socket:
                await self._deliver(frame)
        except ConnectionClosed as e:
            reason = str(e)
        finally:
            if self._socket is socket:
                await self._handle_connection_lost(reason)

    async def _deliver(self, frame: str | bytes) -> None:
        envelope = decode_frame(frame)
        if envelope is None or self.on_envelope is None:
            return
        try:
            await self.on_envelope(envelope)
        except Exception as e:  # pylint: disable=broad-exception-caught
            # One bad envelope must not stop the reader
            logger.error(
                "Error dispatching inbound envelope",
                envelope_type=envelope.get("type"),
                error=str(e),
                exc_info=True,
            )

    async def _handle_connection_lost(self, reason: str | None) -> None:
        self._socket = None
        self._reader_task = None
        self._machine.connection_lost(reason=reason)
        self._notify(ErrorMessages.CONNECTION_LOST)
        if self.on_close is not None:
            await self.on_close()

    async def _release_socket(self) -> None:
        """Close the current socket and cancel its reader before anything new starts."""
        socket, self._socket = self._socket, None
        task, self._reader_task = self._reader_task, None

        if task is not None and task is not asyncio.current_task():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        if socket is not None:
            await self._close_socket(socket)

    def _superseded(self, lifecycle: int) -> bool:
        return lifecycle != self._lifecycle or not self._machine.is_connecting

    async def _close_socket(self, socket: Any) -> None:
        try:
            await socket.close()
        except (OSError, WebSocketException) as e:
            logger.debug("Error closing superseded socket", error=str(e))

    def _notify(self, message: str) -> None:
        if self.on_notice is not None:
            self.on_notice(message)
