"""Structured logging configuration using structlog.

Development runs get colored console output, production runs get JSON.
Run-scoped context (run id, user id) is bound through contextvars so every
event emitted while a reconciliation run is active carries it.
"""

import logging
import sys
from pathlib import Path
from typing import Any

import structlog
from structlog.types import Processor

from reconcile_runner.config import Settings, get_settings


def _upper_level(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    event_dict["level"] = ("warning" if method_name == "warn" else method_name).upper()
    return event_dict


def _add_deployment(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    settings = get_settings()
    event_dict["app"] = settings.app_name
    event_dict["environment"] = settings.environment.value
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def get_console_processors() -> list[Processor]:
    return [
        structlog.stdlib.add_log_level,
        *_shared_processors(),
        structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        ),
    ]


def get_json_processors() -> list[Processor]:
    """Log aggregation wants one JSON object per line with an upper-case ``level``."""
    return [
        _upper_level,
        _add_deployment,
        *_shared_processors(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]


def configure_logging(settings: Settings | None = None) -> None:
    """Install the structlog pipeline on top of stdlib logging (stderr, optional file).

    ``recon`` calls this before dispatching any command, the ``ui`` one included,
    so stdout stays free for command output.
    """
    if settings is None:
        settings = get_settings()

    log_level = getattr(logging, settings.log_level.value)

    if settings.log_format == "json":
        processors = get_json_processors()
    else:
        processors = get_console_processors()

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
    )

    if settings.log_file:
        _setup_file_handler(settings.log_file, log_level)

    # httpx logs every polled request at INFO
    for logger_name in ("httpcore", "httpx", "asyncio", "nicegui"):
        logging.getLogger(logger_name).setLevel(max(log_level, logging.WARNING))


def _setup_file_handler(log_file: Path, level: int) -> None:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(level)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logging.getLogger().addHandler(file_handler)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.stdlib.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Binds ``run_id`` and friends for the duration of one reconciliation run.

    Only the keys bound here are removed on exit; whatever the caller bound
    before stays in place.
    """

    def __init__(self, **kwargs: Any) -> None:
        self.kwargs = kwargs

    def __enter__(self) -> "LogContext":
        bind_context(**self.kwargs)
        return self

    def __exit__(self, *args: Any) -> None:
        unbind_context(*self.kwargs.keys())
