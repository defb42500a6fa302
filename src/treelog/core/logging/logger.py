"""
Diagnostic logging for treelog itself.

treelog cannot log its own failures through the hierarchy it manages: a
broken pipeline would report into itself. Internal diagnostics therefore go
to a separate side channel built on structlog, one line per event on the
process error stream.

The channel is assembled with ``structlog.wrap_logger`` instead of
``structlog.configure`` so that an application which configures structlog
for its own use keeps its configuration untouched. Rendered lines are
written through the stdlib logger ``treelog.diagnostics``, which does not
propagate to the application's root handlers.

Key Features:
    - One ``key=value`` line per event on ``sys.stderr``
    - ISO timestamps and level names on every line
    - Level filtering from settings (``TREELOG_DIAGNOSTICS_LEVEL``)
    - ``TREELOG_DEBUG=true`` enables the dispatch trace emitted at debug level

Functions:
    get_logger(name): Get a diagnostic logger for a treelog module

Example:
    >>> from treelog.core.logging.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.error("output failed", stage="output", logger_name="app")
    timestamp='2025-01-01T10:00:00.000000Z' level='error' event='output failed' ...
"""

import logging
import sys

import structlog
from structlog.typing import FilteringBoundLogger

from treelog.core.config.settings import settings

DIAGNOSTICS_LOGGER = "treelog.diagnostics"


class CurrentStderrHandler(logging.StreamHandler):
    """StreamHandler that resolves ``sys.stderr`` at emit time, so stderr
    redirected after import (test capture, daemon re-wiring) is still reached."""

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value) -> None:
        pass


def _stdlib_logger() -> logging.Logger:
    """The stdlib logger every diagnostic line is written through."""
    base_logger = logging.getLogger(DIAGNOSTICS_LOGGER)
    base_logger.setLevel(logging.DEBUG)
    # Diagnostics must not reach the application's root handlers
    base_logger.propagate = False
    if not base_logger.handlers:
        handler = CurrentStderrHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        base_logger.addHandler(handler)
    return base_logger


def _min_level() -> int:
    if settings.DEBUG:
        return logging.DEBUG
    return logging.getLevelName(settings.DIAGNOSTICS_LEVEL)


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a diagnostic logger bound to a module name.

    Args:
        name (str): Module name, typically ``__name__`` of the caller

    Returns:
        FilteringBoundLogger: Logger whose events render to a single line on
        stderr and are filtered at the configured diagnostics level.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.debug("dispatch hop", logger_name="a.b", effective_level=20)
    """
    processors = [
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.KeyValueRenderer(
            key_order=["timestamp", "level", "event", "module"],
            drop_missing=True,
        ),
    ]
    bound = structlog.wrap_logger(
        _stdlib_logger(),
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_min_level()),
        context_class=dict,
        cache_logger_on_first_use=False,
    )
    return bound.bind(module=name)
