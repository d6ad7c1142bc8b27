"""
Client Logging.

structlog on top of the standard library: every module logs through
get_logger(), records carry an explicit `source`, and config/settings/
logging.yaml decides where they go.

Sinks:
    console   - stderr, so command output on stdout stays clean
    file      - rotating JSONL (logs/notu.jsonl by default), one record per line

Record fields:
    timestamp, level, logger, event, func_name, lineno, source,
    plus whatever context the caller passes

Credentials never reach a sink: the `_redact_secrets` processor masks
token and password fields wherever they appear in a record.

Usage:
    from notu.core.logging import get_logger, log_with_source, setup_logging

    setup_logging()                                   # logging.yaml as-is
    setup_logging(level="DEBUG", format_type="console")

    logger = get_logger(__name__)
    log_with_source(logger, "sync", "info", "Partition loaded", count=12)
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

from notu.core.config import find_project_root, get_app_config
from notu.core.config_schema import FileHandlerSchema, LoggingSchema

VALID_SOURCES = frozenset({
    "cli",
    "client",
    "session",
    "sync",
    "storage",
    "internal",
    "unknown",
})
"""Where a record comes from. Always passed by the caller, never derived from the logger name."""

SECRET_FIELDS = frozenset({
    "access_token",
    "refresh_token",
    "accessToken",
    "refreshToken",
    "password",
    "authorization",
})

REDACTED = "***"

# Chatty at DEBUG and they would echo request headers
_QUIET_LIBRARIES = ("httpx", "httpcore")


def _load_logging_config() -> LoggingSchema:
    """The validated logging.yaml section of the application config."""
    return get_app_config().logging


def _resolve_log_path(configured_path: str) -> Path:
    path = Path(configured_path).expanduser()
    if path.is_absolute():
        return path
    return find_project_root() / path


def _redact_secrets(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    for key, value in event_dict.items():
        if key in SECRET_FIELDS:
            event_dict[key] = REDACTED
        elif isinstance(value, dict):
            event_dict[key] = {
                k: REDACTED if k in SECRET_FIELDS else v for k, v in value.items()
            }
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
        _redact_secrets,
    ]


def _formatter(renderer: Processor, pre_chain: list[Processor]) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=pre_chain)


def _file_handler(config: FileHandlerSchema, formatter: logging.Formatter) -> RotatingFileHandler:
    log_path = _resolve_log_path(config.path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=str(log_path),
        maxBytes=config.max_bytes,
        backupCount=config.backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    level: str | None = None,
    format_type: str | None = None,
    enable_console: bool | None = None,
    enable_file_logging: bool | None = None,
) -> None:
    """
    Configure logging for one process.

    Arguments left as None take their value from logging.yaml. Calling it
    again replaces the root handlers instead of stacking new ones.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        format_type: 'console' (coloured, human) or 'json'
        enable_console: Log to stderr
        enable_file_logging: Log to the rotating JSONL file
    """
    config = _load_logging_config()
    level = (level or config.level).upper()
    format_type = format_type or config.format
    if enable_console is None:
        enable_console = config.handlers.console.enabled
    if enable_file_logging is None:
        enable_file_logging = config.handlers.file.enabled

    pre_chain = _shared_processors()
    structlog.configure(
        processors=pre_chain + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    json_formatter = _formatter(structlog.processors.JSONRenderer(), pre_chain)

    root = logging.getLogger()
    root.setLevel(getattr(logging, level))
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    if enable_console:
        console = logging.StreamHandler(sys.stderr)
        if format_type == "console":
            console.setFormatter(_formatter(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()), pre_chain))
        else:
            console.setFormatter(json_formatter)
        root.addHandler(console)

    if enable_file_logging:
        root.addHandler(_file_handler(config.handlers.file, json_formatter))

    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> Any:
    """structlog logger for `name` (pass __name__)."""
    return structlog.get_logger(name)


def log_with_source(logger: Any, source: str, level: str, message: str, **kwargs: Any) -> None:
    """
    Log with an explicit source field.

    Args:
        logger: Logger from get_logger()
        source: One of VALID_SOURCES
        level: debug, info, warning, error or critical
        message: Event text
        **kwargs: Extra context fields

    Raises:
        AttributeError: Unknown level

    Example:
        log_with_source(logger, "session", "info", "Credentials refreshed")
    """
    getattr(logger, level.lower())(message, source=source, **kwargs)
