"""Structured logging for the rules engine.

Engine modules log through structlog. Computations log at ``debug``; state
changes such as a level-up commit or a de-level log at ``info``. Entries
written while a character is being changed carry its id through
:func:`character_context`.

Example:
    >>> configure_logging()  # level and format come from Settings
    >>> with character_context("c1", new_level=5):
    ...     get_logger(__name__).info("Level up committed")
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import Processor

from daggerheart_engine.core.config import get_settings


if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger


APP_LOGGER_NAME = "daggerheart_engine"

_STDLIB_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _level_number(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)


def _stamp_engine(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Tag every entry with the engine name unless the caller set ``app``."""
    event_dict.setdefault("app", APP_LOGGER_NAME)
    return event_dict


def configure_logging(
    *,
    level: str | None = None,
    json_format: bool | None = None,
    log_file: str | None = None,
) -> None:
    """Configure structlog and the root logger.

    Args:
        level: Log level name. Defaults to ``Settings.log_level``.
        json_format: Render JSON lines instead of console output. Defaults
            to JSON outside debug mode.
        log_file: Also write stdlib log records to this file.
    """
    if level is None or json_format is None:
        settings = get_settings()
        level = level if level is not None else settings.log_level
        json_format = json_format if json_format is not None else settings.is_production
    threshold = _level_number(level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _stamp_engine,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if json_format:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(exception_formatter=structlog.dev.plain_traceback)
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format=_STDLIB_FORMAT, level=threshold, stream=sys.stdout, force=True)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(threshold)
        file_handler.setFormatter(logging.Formatter(_STDLIB_FORMAT))
        logging.getLogger().addHandler(file_handler)


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structlog logger, usually for ``__name__``."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind key-value pairs to every later entry in this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Remove all bound context."""
    structlog.contextvars.clear_contextvars()


@contextmanager
def character_context(character_id: str, **kwargs: Any) -> Iterator[None]:
    """Tag entries logged inside the block with a character id.

    Anything bound before the block is restored when it exits.

    Args:
        character_id: Id of the character being changed.
        **kwargs: Extra context, such as ``new_level``. Avoid ``level``,
            which holds the log level.
    """
    with structlog.contextvars.bound_contextvars(character_id=character_id, **kwargs):
        yield


__all__ = [
    "APP_LOGGER_NAME",
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "character_context",
]
