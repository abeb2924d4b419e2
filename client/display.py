"""
Terminal rendering for the message log, notices and the status panel.

Presentation tags are the names the game uses for message styling; the
console maps each tag to a click style.
"""

from typing import Protocol

import click

from .models.envelope import PlayerState

ERROR_TAG = "error-message"
INFO_TAG = "info-message"

TAG_STYLES: dict[str, dict[str, object]] = {
    "error-message": {"fg": "red", "bold": True},
    "info-message": {"fg": "cyan"},
    "combat-message": {"fg": "bright_red"},
    "npc-message": {"fg": "yellow"},
    "emote-message": {"fg": "magenta"},
    "tell-message": {"fg": "green"},
    "welcome-message": {"fg": "bright_white", "bold": True},
    "status-panel": {"fg": "bright_blue"},
}


class GameDisplay(Protocol):
    """Everything the core needs from a user interface."""

    def show_message(self, text: str, tag: str | None = None) -> None: ...

    def show_notice(self, text: str) -> None: ...

    def show_error(self, text: str) -> None: ...

    def show_welcome(self, player_name: str) -> None: ...

    def update_status(self, player_state: PlayerState) -> None: ...

    def clear(self) -> None: ...


class StatusPanel:
    """
    Rendered status lines for the current player state.

    Rendering is a pure function of the last state applied, so applying the
    same state twice gives the same lines.
    """

    def __init__(self) -> None:
        self.lines: tuple[str, ...] = ()

    @staticmethod
    def render(player_state: PlayerState) -> tuple[str, ...]:
        coords = player_state.coordinates
        return (
            f"HEALTH: {round(player_state.health)}/{player_state.max_health}",
            f"LEVEL: {player_state.level}",
            f"XP: {player_state.xp}",
            f"X: {coords.x} Y: {coords.y} Z: {coords.z}",
        )

    def apply(self, player_state: PlayerState) -> bool:
        """Store the rendering; returns True when the lines changed."""
        lines = self.render(player_state)
        changed = lines != self.lines
        self.lines = lines
        return changed


class ConsoleDisplay:
    """GameDisplay that writes styled lines with click."""

    def __init__(self, color: bool | None = None) -> None:
        self.color = color
        self.status = StatusPanel()

    def _echo(self, text: str, tag: str | None) -> None:
        style = TAG_STYLES.get(tag or "")
        if style:
            text = click.style(text, **style)
        click.echo(text, color=self.color)

    def show_message(self, text: str, tag: str | None = None) -> None:
        self._echo(text, tag)

    def show_notice(self, text: str) -> None:
        self._echo(text, INFO_TAG)

    def show_error(self, text: str) -> None:
        self._echo(text, ERROR_TAG)

    def show_welcome(self, player_name: str) -> None:
        self._echo(f"Welcome, {player_name}!", "welcome-message")

    def update_status(self, player_state: PlayerState) -> None:
        # Only redraw when something actually changed
        if self.status.apply(player_state):
            self._echo(" | ".join(self.status.lines), "status-panel")

    def clear(self) -> None:
        click.clear()
