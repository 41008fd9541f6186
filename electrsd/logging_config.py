"""Structured logging for electrsd and the test suites embedding it."""

import logging
import sys

import structlog

HANDLER_NAME = "electrsd-console"


def setup_structured_logging(log_level: str = "INFO") -> None:
    """
    Render structlog events on stderr through the stdlib root logger.

    Never called by the library itself. Calling it again swaps the level and
    replaces only the handler it installed, so handlers owned by the host
    (pytest's capture handlers for instance) keep receiving records.
    """
    level = logging.getLevelNamesMapping()[log_level.upper()]

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if handler.get_name() == HANDLER_NAME:
            root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.set_name(HANDLER_NAME)
    root_logger.addHandler(console_handler)
    root_logger.setLevel(level)

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.dev.set_exc_info,
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)


def is_debug_enabled() -> bool:
    """Whether DEBUG records get through, tests use it to decide `view_stderr`."""
    return logging.getLogger().isEnabledFor(logging.DEBUG)
