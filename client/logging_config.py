"""
Structlog-based logging configuration for the MUD client.

All client modules obtain their logger through get_logger() so that event
fields are passed as keyword arguments and end up in the category log files
configured here.

CORRECT USAGE:
    from ..logging_config import get_logger
    logger = get_logger(__name__)
    logger.info("Connection opened", url=url)
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.stdlib import BoundLogger, LoggerFactory

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Log file name -> logger name prefixes routed into it
LOG_CATEGORIES = {
    "client": ["client"],
    "commands": ["client.commands"],
    "session": ["client.session"],
    "transport": ["client.realtime", "websockets"],
}


def _resolve_log_base(log_base: str) -> Path:
    """
    Resolve log_base path to absolute path relative to project root.

    Args:
        log_base: Relative or absolute path to log directory

    Returns:
        Absolute path to log directory
    """
    log_path = Path(log_base)
    if log_path.is_absolute():
        return log_path

    current_dir = Path.cwd()
    for parent in [current_dir] + list(current_dir.parents):
        if (parent / "pyproject.toml").exists():
            return parent / log_path

    return current_dir / log_path


def _parse_max_bytes(max_size: str | int) -> int:
    """Convert a size such as "10MB" or "512KB" into bytes."""
    if not isinstance(max_size, str):
        return max_size
    if max_size.endswith("MB"):
        return int(max_size[:-2]) * 1024 * 1024
    if max_size.endswith("KB"):
        return int(max_size[:-2]) * 1024
    if max_size.endswith("B"):
        return int(max_size[:-1])
    return int(max_size)


def detect_environment() -> str:
    """
    Detect the current environment based on various indicators.

    Returns:
        Environment name: "unit_test", "local", or whatever MUDCLIENT_ENV names
    """
    if "pytest" in sys.modules or "pytest" in sys.argv[0]:
        return "unit_test"

    env = os.getenv("MUDCLIENT_ENV")
    if env:
        return env

    return "local"


def _event_only_renderer(_logger: Any, _name: str, event_dict: dict[str, Any]) -> str:
    """
    Render the event message followed by its key-value fields.

    Keeps file logs free of ANSI sequences.
    """
    event = event_dict.pop("event", None)
    for key in ("logger", "level", "timestamp"):
        event_dict.pop(key, None)
    message = "" if event is None else str(event)
    if event_dict:
        fields = " ".join(f"{key}={value!r}" for key, value in sorted(event_dict.items()))
        message = f"{message} {fields}" if message else fields
    return message


def configure_structlog(
    environment: str | None = None,
    log_level: str = "INFO",
    log_config: dict[str, Any] | None = None,
) -> None:
    """
    Configure Structlog based on environment.

    Args:
        environment: Environment name (auto-detected if None)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_config: Logging configuration dictionary
    """
    if environment is None:
        environment = detect_environment()

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        _event_only_renderer,
    ]

    if log_config and not log_config.get("disable_logging", False):
        _setup_file_logging(environment, log_config, log_level)

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=BoundLogger,
        # Later file handler setup must apply to loggers created at import time
        cache_logger_on_first_use=False,
    )


def _make_handler(path: Path, level: int, max_bytes: int, backup_count: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    return handler


def _setup_file_logging(environment: str, log_config: dict[str, Any], log_level: str) -> None:
    """Set up file logging handlers for the client log categories."""
    log_base = _resolve_log_base(log_config.get("log_base", "logs"))
    env_log_dir = log_base / environment
    env_log_dir.mkdir(parents=True, exist_ok=True)

    level = getattr(logging, str(log_level).upper(), logging.INFO)
    rotation_config = log_config.get("rotation", {})
    max_bytes = _parse_max_bytes(rotation_config.get("max_size", "10MB"))
    backup_count = rotation_config.get("backup_count", 5)

    root_logger = logging.getLogger()

    for log_file, prefixes in LOG_CATEGORIES.items():
        handler = _make_handler(env_log_dir / f"{log_file}.log", logging.DEBUG, max_bytes, backup_count)
        for prefix in prefixes:
            category_logger = logging.getLogger(prefix)
            category_logger.addHandler(handler)
            category_logger.setLevel(level)
            # Propagate so the root handlers also see every record
            category_logger.propagate = True

    root_logger.addHandler(_make_handler(env_log_dir / "console.log", level, max_bytes, backup_count))
    root_logger.addHandler(_make_handler(env_log_dir / "errors.log", logging.WARNING, max_bytes, backup_count))
    root_logger.setLevel(logging.DEBUG)


def get_logger(name: str) -> BoundLogger:
    """
    Get a Structlog logger with the specified name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured Structlog logger instance
    """
    return structlog.get_logger(name)


def setup_logging(config: dict[str, Any]) -> None:
    """
    Set up logging configuration based on client config.

    Args:
        config: Client configuration dictionary (see AppConfig.to_legacy_dict)
    """
    logging_config = config.get("logging", {})
    environment = logging_config.get("environment") or detect_environment()
    log_level = logging_config.get("level", "INFO")

    if logging_config.get("disable_logging", False):
        configure_structlog(environment, log_level, {"disable_logging": True})
        return

    configure_structlog(environment, log_level, logging_config)

    logger = get_logger("client.logging")
    logger.info(
        "Logging system initialized",
        environment=environment,
        log_level=log_level,
        log_base=logging_config.get("log_base", "logs"),
    )
