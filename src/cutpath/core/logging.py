"""
Structured logging configuration for cutpath.

Uses structlog (https://www.structlog.org/) to provide structured, context-rich
logging. Supports both JSON output (batch runs) and colored console output
(development).

Usage::

    from cutpath.core.logging import configure_logging, get_logger

    configure_logging(json_output=False)  # Call once at startup
    logger = get_logger(__name__)
    logger.debug("annular_pocket", paths=3, passes=12)

The engine itself never calls ``configure_logging``; that is left to the
application embedding it (or to ``cutpath.cli``).

The polygon engine in ``cutpath.geometry`` logs every offset through the
stdlib at DEBUG, so it gets its own level. Events logged inside
``operation_context`` carry the name of the operation being computed.
"""

import logging
import sys
from contextlib import contextmanager
from typing import Iterator, Optional

import structlog

GEOMETRY_LOGGER = "cutpath.geometry"


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[str] = None,
    geometry_level: str = "WARNING",
) -> None:
    """
    Configure structured logging for the entire application.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_output: If True, output JSON lines (for log aggregation).
                     If False, output colored console-friendly lines (dev mode).
        log_file: Optional path to write logs to a file in addition to stderr.
        geometry_level: Minimum level for the polygon engine loggers.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    # Standard library logging configuration (for third-party libs and the
    # geometry modules, which log through the stdlib)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        format="%(message)s",
        level=log_level,
        handlers=handlers,
        force=True,
    )
    logging.getLogger(GEOMETRY_LOGGER).setLevel(
        getattr(logging, geometry_level.upper(), logging.WARNING)
    )

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    for handler in logging.root.handlers:
        handler.setFormatter(formatter)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structlog logger for the given module name.

    Args:
        name: Module name, typically ``__name__``.

    Returns:
        A bound structlog logger instance.
    """
    return structlog.get_logger(name)


@contextmanager
def operation_context(operation: str, **context) -> Iterator[None]:
    """
    Bind ``operation`` (and any extra key/values) to every structlog event
    logged inside the block.
    """
    with structlog.contextvars.bound_contextvars(operation=operation, **context):
        yield
