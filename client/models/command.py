"""
Command models for the MUD client.

Defines the closed vocabulary of server-bound actions, the canonical verbs the
alias table resolves to, and the Command / ParseFailure values produced by
the parser.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class Direction(StrEnum):
    """Valid directions for movement."""

    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"
    UP = "up"
    DOWN = "down"


class Verb(StrEnum):
    """
    Canonical verbs the alias table resolves input tokens to.

    Some verbs map onto a single action; the families (GET, DROP, PUT, LOOT,
    LOOK, TELL) are narrowed to a concrete ActionId by the parser.
    """

    MOVE = "move"
    GO = "go"
    ATTACK = "attack"
    DROP = "drop"
    GET = "get"
    PUT = "put"
    LOOT = "loot"
    INVENTORY = "inventory"
    LOOK = "look"
    TELL = "tell"
    MEDITATE = "meditate"
    SIT = "sit"
    SLEEP = "sleep"
    STAND = "stand"
    STOP = "stop"
    WAKE = "wake"
    AUTOLOOT = "autoloot"
    SCORE = "score"
    FLEE = "flee"
    SAVE = "save"
    # Handled by the client itself, never sent as a player action
    QUIT = "quit"
    CLEAR = "clear"
    RECONNECT = "reconnect"


class ActionId(StrEnum):
    """
    Server-bound gameplay actions.

    Each value is the name of the server-side handler that performs it.
    """

    MOVE = "move"
    ATTACK = "attack"
    DROP_SINGLE = "dropSingleItem"
    DROP_ALL = "dropAllItems"
    DROP_ALL_SPECIFIC = "dropAllSpecifiedItems"
    GET_SINGLE = "getSingleItem"
    GET_ALL = "getAllItems"
    GET_ALL_SPECIFIC = "getAllSpecificItems"
    GET_ALL_FROM_CONTAINER = "getAllItemsFromContainer"
    GET_ALL_SPECIFIC_FROM_CONTAINER = "getAllSpecificItemsFromContainer"
    PUT_SINGLE = "putSingleItem"
    PUT_ALL = "putAllItems"
    PUT_ALL_SPECIFIC = "putAllSpecificItems"
    SHOW_INVENTORY = "showInventory"
    DESCRIBE_LOCATION = "describeLocation"
    LOOK_AT_ITEM = "lookAtInventoryItem"
    LOOK_AT = "lookAt"
    LOOK_IN = "lookInContainer"
    LOOT_SINGLE = "lootSpecifiedNpc"
    LOOT_ALL = "lootAllNpcs"
    TOGGLE_AUTOLOOT = "autoLootToggle"
    MEDITATE = "meditate"
    SIT = "sit"
    SLEEP = "sleep"
    STAND = "stand"
    STOP = "stop"
    WAKE = "wake"
    TELL_ALL = "tellAll"
    TELL_ROOM = "tellRoom"
    TELL_PLAYER = "tellPlayer"
    SHOW_SCORE = "score"
    FLEE = "flee"
    SAVE_PLAYER = "savePlayerData"


class LocalAction(StrEnum):
    """Actions the client performs itself instead of sending them."""

    LOGOUT = "logout"
    CLEAR_SCREEN = "clear"
    RECONNECT = "reconnect"


_ACTION_VALUES = frozenset(action.value for action in ActionId)
_LOCAL_ACTION_VALUES = frozenset(action.value for action in LocalAction)


class ParseFailureReason(StrEnum):
    """Why a line of input could not be turned into a command."""

    EMPTY = "empty"
    UNRECOGNIZED_FORM = "unrecognized_form"


class Command(BaseModel):
    """
    A resolved command: an action identifier plus ordered arguments.

    ``action`` is an ActionId or LocalAction member, or the literal verb for
    free-text input no grammar rule covers.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    action: str = Field(..., min_length=1, description="Server handler name or passthrough verb")
    args: list[str] = Field(default_factory=list, description="Ordered command arguments")

    @property
    def is_local(self) -> bool:
        """True when the client handles this command without the server."""
        return self.action in _LOCAL_ACTION_VALUES

    @property
    def is_passthrough(self) -> bool:
        """True when the action is free text rather than a known action."""
        return not self.is_local and self.action not in _ACTION_VALUES


class ParseFailure(BaseModel):
    """Input that could not be resolved to exactly one command."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    reason: ParseFailureReason
    tokens: list[str] = Field(default_factory=list)
