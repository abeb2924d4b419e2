"""
Durable key/value storage for the session token and player name.

Values survive a client restart when the JSON file store is used. The
in-memory store backs tests and throwaway sessions.
"""

import json
from pathlib import Path
from typing import Protocol

from ..exceptions import ConfigurationError, create_error_context
from ..logging_config import get_logger

logger = get_logger(__name__)

SESSION_TOKEN_KEY = "sessionToken"
PLAYER_NAME_KEY = "playerName"


class SessionStorage(Protocol):
    """Minimal string key/value store."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStorage:
    """Process-local storage."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)


class JsonFileStorage:
    """
    Storage backed by a small JSON object on disk.

    The whole file is rewritten on every change. A missing file reads as
    empty; an unreadable one is logged and treated as empty so a corrupt
    file never blocks login.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Session file unreadable, ignoring it", path=str(self.path), error=str(e))
            return {}
        if not isinstance(data, dict):
            logger.warning("Session file is not a JSON object, ignoring it", path=str(self.path))
            return {}
        return {str(k): str(v) for k, v in data.items() if v is not None}

    def _save(self, values: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(values, indent=2), encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(
                f"Cannot write session file {self.path}: {e}",
                context=create_error_context(metadata={"path": str(self.path)}),
                config_key="storage.session_file",
            ) from e

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        values = self._load()
        values[key] = value
        self._save(values)

    def remove(self, key: str) -> None:
        values = self._load()
        if key in values:
            del values[key]
            self._save(values)
