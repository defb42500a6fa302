"""
Public entry points re-exported by the ``treelog`` package.
"""

from typing import Any, Dict, Optional

from treelog.configuration.api import configure_logger
from treelog.core import levels
from treelog.loggers.base import Logger
from treelog.loggers.registry import registry
from treelog.queueing import manager as async_manager
from treelog.utils.caller_info import get_caller_info


def logger(name: Optional[str] = None, config: Optional[Dict[str, Any]] = None) -> Logger:
    """
    Get or create a logger.

    Args:
        name: Dotted logger name; defaults to the calling module's name
        config: Optional table with ``level``, ``pipelines``, ``propagate``

    Returns:
        The logger node; the same object for the same name until a reset

    Raises:
        ConfigurationError: On an invalid name or configuration
        ReservedName: If the name is reserved
    """
    if name is None:
        _, _, name = get_caller_info(2)
    node = registry.get_or_create(name)
    if config:
        configure_logger(node, config)
    return node


def root() -> Logger:
    return registry.root()


def reset_cache() -> None:
    """Forget all non-root loggers; the next lookup creates fresh nodes."""
    registry.clear_cache()


def get_levels() -> Dict[str, int]:
    return levels.get_all_levels()


def set_levels(custom_levels: Dict[str, int]) -> None:
    """Replace all custom levels."""
    levels.set_custom_levels(custom_levels)


def flush(timeout: Optional[float] = None) -> bool:
    """
    Wait until every queued record has been dispatched.

    Returns immediately with True when async dispatch is off.
    """
    return async_manager.flush(timeout)


def get_async_stats() -> Dict[str, Any]:
    return async_manager.get_stats()
