"""
Command history for the input line.

Keeps the last few submitted lines, most recent first, and a cursor for
Up/Down browsing. History lives in memory only and is gone after a restart.
"""

from enum import Enum

from ..logging_config import get_logger

logger = get_logger(__name__)

HISTORY_CAPACITY = 10
NOT_BROWSING = -1


class NavigationDirection(Enum):
    """Which way to move through history."""

    OLDER = "older"
    NEWER = "newer"


class CommandHistory:
    """
    Bounded, navigable list of prior input lines.

    The cursor is -1 while the player is typing a fresh line and 0 for the
    most recent entry. Navigation never wraps around.
    """

    def __init__(self, capacity: int = HISTORY_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self.capacity = capacity
        self._entries: list[str] = []
        self._cursor = NOT_BROWSING

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def entries(self) -> tuple[str, ...]:
        """Recorded lines, most recent first."""
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def record(self, line: str) -> None:
        """
        Push a submitted line to the front and stop browsing.

        Blank lines are ignored. The oldest entry is dropped once capacity is
        exceeded.
        """
        if not line or not line.strip():
            return
        self._entries.insert(0, line)
        if len(self._entries) > self.capacity:
            dropped = self._entries.pop()
            logger.debug("History entry evicted", dropped=dropped)
        self._cursor = NOT_BROWSING

    def navigate(self, direction: NavigationDirection) -> str:
        """
        Move the cursor one step and return the line to show.

        Returns:
            The entry under the cursor, or "" when back at the fresh line
        """
        if direction is NavigationDirection.OLDER and self._cursor < len(self._entries) - 1:
            self._cursor += 1
        elif direction is NavigationDirection.NEWER and self._cursor > NOT_BROWSING:
            self._cursor -= 1

        if self._cursor == NOT_BROWSING:
            return ""
        return self._entries[self._cursor]
