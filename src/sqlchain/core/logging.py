"""
structlog setup for sqlchain.

Three kinds of events are emitted: ``statement_executed`` (DEBUG, one per
statement the adapters run), ``database_opened``/``database_closed`` (INFO),
and ``chain_failed`` (ERROR, carrying the failing error's ``to_dict()``).
Nothing is configured on import; until :func:`configure_logging` is called
structlog's defaults apply.

Architecture:
    ::

        configure_logging(level, json_format, service, add_timestamp, stream)
            │
            ▼
        merge_contextvars ─► TimeStamper ─► add_log_level ─► service
            ─► JSONRenderer | ConsoleRenderer ─► PrintLogger(stream)

Examples:
    >>> configure_logging(level="DEBUG", json_format=True, stream=sys.stderr)
    >>> log = get_logger(__name__)
    >>> with LogContext(chain="import_artists"):
    ...     log.info("database_opened", path="chinook.db")

Tags:
    logging, structlog, json-logging, sqlchain

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

_service = "sqlchain"


def _add_service(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", _service)
    return event_dict


def _renderer(json_format: bool) -> Processor:
    if json_format:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=True)


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "sqlchain",
    add_timestamp: bool = True,
    stream: TextIO | None = None,
) -> None:
    """Route sqlchain's structured logs to ``stream``.

    Args:
        level: Minimum level name (DEBUG shows every statement)
        json_format: JSON lines when True, colored console output when False;
            None picks JSON unless ``stream`` is a terminal
        service: Value of the ``service`` key on every event
        add_timestamp: Prefix events with an ISO ``timestamp``
        stream: Output file object (default stdout)
    """
    global _service
    _service = service
    out = stream or sys.stdout

    processors: list[Processor] = [structlog.contextvars.merge_contextvars]
    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
    processors += [
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service,
        _renderer(not out.isatty() if json_format is None else json_format),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper())),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=out),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Lazy structlog logger; configuration is resolved on first use."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Attach ``kwargs`` to every event logged from this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Bind keys for the duration of a ``with`` (or ``async with``) block.

    Example:
        async with LogContext(database="chinook.db"):
            await chain.arun()
    """

    def __init__(self, **kwargs: Any):
        self._values = kwargs

    def __enter__(self) -> LogContext:
        bind_context(**self._values)
        return self

    def __exit__(self, *exc_info: Any) -> None:
        unbind_context(*self._values)

    async def __aenter__(self) -> LogContext:
        return self.__enter__()

    async def __aexit__(self, *exc_info: Any) -> None:
        self.__exit__(*exc_info)


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
]
