"""
Structured logging for vtl-export.

Every module logs through structlog with a dotted event name and keyword
fields, e.g. ``export.types_listed count=12``. Output goes to stderr so that
stdout carries only the CLI report.

Processor chain:
    ::

        merge_contextvars          api_id bound by the orchestrator, logger by get_logger
        add_log_level
        TimeStamper(iso, utc)      optional
        _tag_tool                  tool=vtl-export
        ├── JSON:    format_exc_info → JSONRenderer
        └── console: ConsoleRenderer(colors)

Examples:
    >>> from vtl_export.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=False)
    >>> logger = get_logger(__name__)
    >>> logger.info("export.start", page_size=25)

    Scoping run-wide fields:

    >>> async with LogContext(api_id="abc123"):
    ...     logger.info("export.resolvers_listed", type_name="Query", count=3)
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

TOOL_NAME = "vtl-export"

# Third-party loggers that are chatty at DEBUG/INFO.
_NOISY_LOGGERS = ("botocore", "boto3", "urllib3")


def _tag_tool(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("tool", TOOL_NAME)
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    add_timestamp: bool = True,
) -> None:
    """Configure structlog (and stdlib logging for botocore).

    Args:
        level: DEBUG, INFO, WARNING or ERROR.
        json_format: JSON lines when True, colored console when False. None
            picks JSON unless stderr is a terminal.
        add_timestamp: Prefix each event with an ISO-8601 UTC timestamp.
    """
    numeric_level = getattr(logging, level.upper())
    if json_format is None:
        json_format = not sys.stderr.isatty()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
    ]
    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))
    processors.append(_tag_tool)

    if json_format:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)
    # boto request/response dumps only at DEBUG
    noisy_level = numeric_level if numeric_level <= logging.DEBUG else max(numeric_level, logging.WARNING)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)


def get_logger(name: str | None = None) -> Any:
    """Return a lazy structlog logger; ``name`` is emitted as the ``logger`` field."""
    if name is None:
        return structlog.get_logger()
    return structlog.get_logger(logger=name)


class LogContext:
    """Bind fields for the duration of a block, then restore the previous values.

    Usable with ``with`` and ``async with``. Since structlog context lives in
    contextvars, each asyncio task sees the fields bound by its creator.

    Example:
        async with LogContext(api_id="abc123"):
            await orchestrator.run()
    """

    def __init__(self, **kwargs: Any):
        self._fields = kwargs
        self._tokens: dict[str, Any] = {}

    def __enter__(self) -> LogContext:
        self._tokens = structlog.contextvars.bind_contextvars(**self._fields)
        return self

    def __exit__(self, *args) -> None:
        structlog.contextvars.reset_contextvars(**self._tokens)

    async def __aenter__(self) -> LogContext:
        return self.__enter__()

    async def __aexit__(self, *args) -> None:
        self.__exit__(*args)


__all__ = [
    "TOOL_NAME",
    "configure_logging",
    "get_logger",
    "LogContext",
]
