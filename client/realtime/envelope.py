"""
Envelope helpers for client -> server messages.

Every outbound message is a flat JSON object whose ``type`` names the kind:

    {"type": "login", "playerName": "...", "password": "..."}
    {"type": "playerAction", "action": "getAllItemsFromContainer", "args": ["bag"]}
"""

from __future__ import annotations

import json
from enum import StrEnum
from typing import Any

from ..logging_config import get_logger
from ..models.command import Command

logger = get_logger(__name__)


class OutboundKind(StrEnum):
    """Kinds of message the client sends."""

    LOGIN = "login"
    CREATE_CHARACTER = "createNewCharacter"
    RESTORE_SESSION = "restoreSession"
    LOGOUT = "logout"
    PLAYER_ACTION = "playerAction"


def build_envelope(kind: str, payload: dict[str, Any] | None = None) -> dict[str, Any]:
    """
    Create an outbound envelope.

    Args:
        kind: Message kind, stored under "type"
        payload: Fields merged alongside the kind

    Raises:
        ValueError: If the payload tries to set its own "type"
    """
    payload = payload or {}
    if "type" in payload:
        raise ValueError("Envelope payload must not contain a 'type' field")
    return {"type": str(kind), **payload}


def build_action_payload(command: Command) -> dict[str, Any]:
    """Payload for a gameplay action."""
    return {"action": str(command.action), "args": list(command.args)}


def encode_envelope(envelope: dict[str, Any]) -> str:
    """Serialize an envelope for the wire."""
    return json.dumps(envelope, separators=(",", ":"))


def decode_frame(frame: str | bytes) -> dict[str, Any] | None:
    """
    Decode one inbound frame.

    Returns:
        The envelope dict, or None when the frame is not a JSON object
    """
    try:
        data = json.loads(frame)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning("Dropping undecodable frame", error=str(e), frame_length=len(frame))
        return None
    if not isinstance(data, dict):
        logger.warning("Dropping non-object frame", frame_type=type(data).__name__)
        return None
    return data
