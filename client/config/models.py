"""
Pydantic-based configuration models for the MUD client.

Every setting can be supplied through environment variables (or a .env
file) using the prefix documented on each model.
"""

from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from ..logging_config import get_logger

logger = get_logger(__name__)


class ConnectionConfig(BaseSettings):
    """Game server connection configuration."""

    host: str = Field(default="localhost", description="Game server host name")
    port: int = Field(default=6400, description="Game server port")
    path: str = Field(default="/", description="WebSocket endpoint path")
    secure: bool = Field(
        default=False,
        description="Try a secure (wss) connection first and fall back to ws once on failure",
    )
    open_timeout: float = Field(default=10.0, gt=0, description="Seconds to wait for the opening handshake")

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port is in valid range."""
        if not 1 <= v <= 65535:
            logger.error("Invalid server port", port=v, valid_range="1-65535")
            raise ValueError("Port must be between 1 and 65535")
        return v

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Ensure the endpoint path is absolute."""
        if not v.startswith("/"):
            return f"/{v}"
        return v

    def url(self, secure: bool) -> str:
        """Build the WebSocket URL for the requested scheme."""
        scheme = "wss" if secure else "ws"
        return f"{scheme}://{self.host}:{self.port}{self.path}"

    model_config = {"env_prefix": "MUDCLIENT_SERVER_", "case_sensitive": False, "extra": "ignore"}


class StorageConfig(BaseSettings):
    """Durable session storage configuration."""

    session_file: Path = Field(
        default=Path.home() / ".mudclient" / "session.json",
        description="File holding the persisted session token and player name",
    )

    model_config = {"env_prefix": "MUDCLIENT_STORAGE_", "case_sensitive": False, "extra": "ignore"}


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    environment: str | None = Field(default=None, description="Logging environment (auto-detected when unset)")
    level: str = Field(default="INFO", description="Log level")
    log_base: str = Field(default="logs", description="Base directory for log files")
    disable_logging: bool = Field(default=False, description="Skip file handlers entirely")
    rotation_max_size: str = Field(default="10MB", description="Log rotation max size")
    rotation_backup_count: int = Field(default=5, ge=0, description="Number of backup log files")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Log level must be one of {sorted(valid_levels)}")
        return upper

    def to_legacy_dict(self) -> dict[str, Any]:
        """Convert to the dictionary shape setup_logging() expects."""
        return {
            "environment": self.environment,
            "level": self.level,
            "log_base": self.log_base,
            "disable_logging": self.disable_logging,
            "rotation": {
                "max_size": self.rotation_max_size,
                "backup_count": self.rotation_backup_count,
            },
        }

    model_config = {"env_prefix": "MUDCLIENT_LOGGING_", "case_sensitive": False, "extra": "ignore"}


class AppConfig(BaseSettings):
    """
    Top-level client configuration.

    Composes the per-concern settings models so each keeps its own
    environment variable prefix.
    """

    connection: ConnectionConfig = Field(default_factory=ConnectionConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def to_legacy_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary for setup_logging()."""
        return {
            "connection": self.connection.model_dump(),
            "storage": {"session_file": str(self.storage.session_file)},
            "logging": self.logging.to_legacy_dict(),
        }

    model_config = {
        "env_prefix": "MUDCLIENT_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }
