"""
Pydantic schemas for inbound server envelopes.

Every message the server sends is a JSON object tagged by its ``type``
field. The known kinds form a discriminated union; anything else is ignored
by the dispatcher.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class BaseEnvelope(BaseModel):
    """Base class for all inbound envelopes."""

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        str_strip_whitespace=False,
    )

    type: str = Field(..., description="Envelope kind")


class SessionResultEnvelope(BaseEnvelope):
    """Shared shape of the login, creation and restore results."""

    success: bool = Field(..., description="Whether the server accepted the request")
    message: str | None = Field(None, description="Server message, shown verbatim")
    session_token: str | None = Field(None, alias="sessionToken", description="Opaque session token")
    player_name: str | None = Field(None, alias="playerName", description="Authenticated player name")


class LoginResultEnvelope(SessionResultEnvelope):
    """Result of a login request."""

    type: Literal["loginResult"] = "loginResult"


class CharacterCreationResultEnvelope(SessionResultEnvelope):
    """Result of a character creation request."""

    type: Literal["createNewCharacterResult"] = "createNewCharacterResult"


class RestoreSessionResultEnvelope(SessionResultEnvelope):
    """Result of a session restore request."""

    type: Literal["restoreSessionResult"] = "restoreSessionResult"


class PlayerCoordinates(BaseModel):
    """Player position in the world grid."""

    model_config = ConfigDict(extra="allow")

    x: int | float = 0
    y: int | float = 0
    z: int | float = 0


class PlayerState(BaseModel):
    """Player status values shown in the status panel."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    health: float = 0
    max_health: int | float = Field(0, alias="maxHealth")
    level: int = 0
    xp: int = 0
    coordinates: PlayerCoordinates = Field(default_factory=PlayerCoordinates)


class FullStateSyncEnvelope(BaseEnvelope):
    """Full player state; applying the same state twice changes nothing."""

    type: Literal["gameState"] = "gameState"
    player_state: PlayerState = Field(default_factory=PlayerState, alias="playerState")
    connected_players: list[str] | None = Field(None, alias="connectedPlayers")


class DisplayMessageEnvelope(BaseEnvelope):
    """A line of game text for the message log."""

    type: Literal["serverMessage"] = "serverMessage"
    content: str = Field(..., description="Text to display")
    message_type: str | None = Field(None, alias="messageType", description="Presentation sub-tag")


class GameJoinedEnvelope(BaseEnvelope):
    """Sent once the player has entered the game world."""

    type: Literal["gameJoined"] = "gameJoined"
    player_name: str = Field(..., alias="playerName")


class SessionErrorEnvelope(BaseEnvelope):
    """The server refused this connection, typically because the session is already connected elsewhere."""

    type: Literal["sessionError"] = "sessionError"
    message: str | None = Field(None, description="Reason, shown verbatim")


class ChatMessageEnvelope(BaseEnvelope):
    """A chat line relayed from another player."""

    type: Literal["receiveMessage"] = "receiveMessage"
    sender_id: str | None = Field(None, alias="senderId", description="Sender identifier")
    content: str = Field(..., description="Message text")


InboundEnvelope = Annotated[
    LoginResultEnvelope
    | CharacterCreationResultEnvelope
    | RestoreSessionResultEnvelope
    | FullStateSyncEnvelope
    | DisplayMessageEnvelope
    | GameJoinedEnvelope
    | SessionErrorEnvelope
    | ChatMessageEnvelope,
    Field(discriminator="type"),
]

INBOUND_ENVELOPE_TYPES: tuple[type[BaseEnvelope], ...] = (
    LoginResultEnvelope,
    CharacterCreationResultEnvelope,
    RestoreSessionResultEnvelope,
    FullStateSyncEnvelope,
    DisplayMessageEnvelope,
    GameJoinedEnvelope,
    SessionErrorEnvelope,
    ChatMessageEnvelope,
)

KNOWN_ENVELOPE_KINDS: frozenset[str] = frozenset(
    model.model_fields["type"].default for model in INBOUND_ENVELOPE_TYPES
)

inbound_envelope_adapter: TypeAdapter[InboundEnvelope] = TypeAdapter(InboundEnvelope)
