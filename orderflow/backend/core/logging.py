"""
Structured logging for the order flow engine.

Every process (API server, Telegram bot, admin CLI) calls setup_logging()
once at startup. Levels, format and handlers come from
config/settings/logging.yaml; keyword arguments override the file.

JSON records carry: timestamp, level, logger, event, func_name, lineno,
source and, inside an HTTP request, request_id. Order lifecycle code adds
order_id, status and shop_id through extra fields.

    logger = get_logger(__name__)
    logger.info("Order status changed", extra={"order_id": order.id})
    log_with_source(logger, "telegram", "info", "Order forwarded", chat_id=chat_id)

All records go to one rotating file (logs/system.jsonl by default); filter
by the source field to separate the API from the bot.
"""

import logging
import sys
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.typing import Processor

from orderflow.backend.core.config import find_project_root, load_yaml_config

VALID_SOURCES = frozenset({
    "web",
    "cli",
    "admin",
    "telegram",
    "api",
    "seed",
    "internal",
    "unknown",
})
"""Values accepted for the source field. Callers always set it explicitly."""

# Third-party loggers that flood INFO with per-request or per-query lines.
QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "aiogram.event": logging.WARNING,
    "httpx": logging.WARNING,
}

_logging_config: dict[str, Any] | None = None


@dataclass(frozen=True)
class _Options:
    level: int
    format_type: str
    console: bool
    file: bool
    file_settings: dict[str, Any]


def _load_logging_config() -> dict[str, Any]:
    """Read logging.yaml once; FileNotFoundError if it is missing."""
    global _logging_config
    if _logging_config is None:
        _logging_config = load_yaml_config("logging.yaml")
    return _logging_config


def _resolve_log_path(configured_path: str) -> Path:
    return find_project_root() / configured_path


def _override(value: Any, fallback: Any) -> Any:
    return fallback if value is None else value


def _resolve_options(
    level: str | None,
    format_type: str | None,
    enable_console: bool | None,
    enable_file_logging: bool | None,
) -> _Options:
    config = _load_logging_config()
    handlers = config["handlers"]
    level_name = _override(level, config["level"])
    return _Options(
        level=getattr(logging, level_name.upper()),
        format_type=_override(format_type, config["format"]),
        console=_override(enable_console, handlers["console"]["enabled"]),
        file=_override(enable_file_logging, handlers["file"]["enabled"]),
        file_settings=handlers["file"],
    )


def _pre_chain() -> list[Processor]:
    """Processors applied to structlog and stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
    ]


def _formatter(renderer: Processor, pre_chain: list[Processor]) -> logging.Formatter:
    return structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=pre_chain)


def _build_handlers(options: _Options, pre_chain: list[Processor]) -> list[logging.Handler]:
    json_formatter = _formatter(structlog.processors.JSONRenderer(), pre_chain)
    handlers: list[logging.Handler] = []

    if options.console:
        console = logging.StreamHandler(sys.stdout)
        if options.format_type == "console":
            console.setFormatter(_formatter(structlog.dev.ConsoleRenderer(colors=True), pre_chain))
        else:
            console.setFormatter(json_formatter)
        handlers.append(console)

    if options.file:
        settings = options.file_settings
        path = _resolve_log_path(settings["path"])
        path.parent.mkdir(parents=True, exist_ok=True)
        rotating = RotatingFileHandler(
            filename=str(path),
            maxBytes=settings["max_bytes"],
            backupCount=settings["backup_count"],
            encoding="utf-8",
        )
        # The file is always JSONL, whatever the console shows.
        rotating.setFormatter(json_formatter)
        handlers.append(rotating)

    return handlers


def setup_logging(
    level: str | None = None,
    format_type: str | None = None,
    enable_console: bool | None = None,
    enable_file_logging: bool | None = None,
) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL.
        format_type: 'json' or 'console'.
        enable_console: Write records to stdout.
        enable_file_logging: Write records to the rotating JSONL file.

    Any argument left as None falls back to logging.yaml. Calling this
    again replaces the previous handlers.
    """
    options = _resolve_options(level, format_type, enable_console, enable_file_logging)
    pre_chain = _pre_chain()

    structlog.configure(
        processors=pre_chain + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.setLevel(options.level)
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in _build_handlers(options, pre_chain):
        root.addHandler(handler)

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)


def get_logger(name: str) -> Any:
    return structlog.get_logger(name)


def log_with_source(logger: Any, source: str, level: str, message: str, **kwargs: Any) -> None:
    """
    Emit one record tagged with an explicit source.

    Outside an HTTP request nothing binds the source for you, so the bot,
    the seeder and the CLI go through here. An unknown level raises
    AttributeError.
    """
    getattr(logger, level.lower())(message, source=source, **kwargs)
