"""
Logger registry.

Process-wide cache of logger nodes keyed by canonical name. Nodes are created
on first reference, parents first, and live until ``reset()``.

Naming Rules:
    - Names are dot-separated paths: ``app``, ``app.db``, ``app.db.pool``
    - Surrounding whitespace is stripped; empty names and empty segments
      (``"app..db"``, ``".app"``) are rejected
    - ``_root`` and any name starting with ``_`` are reserved

The root is only created or changed through ``configure_root``; its first
creation uses the defaults (level from ``settings.DEFAULT_LEVEL``, one text
pipeline writing to stderr at WARNING).
"""

import threading
from typing import Any, Dict, List, Optional

from treelog.core import levels
from treelog.core.config.settings import settings
from treelog.core.exceptions.custom_exceptions import ConfigurationError, ReservedName
from treelog.core.logging.logger import get_logger
from treelog.loggers.base import ROOT_NAME, Logger
from treelog.pipelines.base import Pipeline

logger = get_logger(__name__)


def canonical_name(name: Any) -> str:
    """
    Validate and canonicalize a user logger name.

    Raises:
        ConfigurationError: If the name is not a string or has empty segments
        ReservedName: If the name is ``_root`` or starts with ``_``
    """
    if not isinstance(name, str):
        raise ConfigurationError(
            f"Logger name must be a string, got {type(name).__name__}",
            error_code="INVALID_LOGGER_NAME",
        )
    cleaned = name.strip()
    if not cleaned:
        raise ConfigurationError("Logger name cannot be empty", error_code="INVALID_LOGGER_NAME")
    if cleaned == ROOT_NAME or cleaned.startswith("_"):
        raise ReservedName(
            f"Logger name '{cleaned}' is reserved; names may not start with '_'",
            error_code="RESERVED_LOGGER_NAME",
            details={"name": cleaned},
        )
    if any(not segment for segment in cleaned.split(".")):
        raise ConfigurationError(
            f"Logger name '{cleaned}' has an empty segment",
            error_code="INVALID_LOGGER_NAME",
            details={"name": cleaned},
        )
    return cleaned


def parent_name_of(name: str) -> str:
    """``a.b.c`` -> ``a.b``; a single segment -> the root name."""
    if "." not in name:
        return ROOT_NAME
    return name.rsplit(".", 1)[0]


def default_root_pipeline() -> Pipeline:
    return Pipeline(level=levels.WARNING, presenter="text", outputs=["console"])


class LoggerRegistry:
    """Cache of logger nodes, guarded by a re-entrant lock."""

    def __init__(self):
        self._lock = threading.RLock()
        self._loggers: Dict[str, Logger] = {}
        self._root: Optional[Logger] = None

    def root(self) -> Logger:
        """Return the root, creating it with the defaults on first use."""
        with self._lock:
            if self._root is None:
                self._root = Logger(
                    ROOT_NAME,
                    parent=None,
                    level=levels.value_of(settings.DEFAULT_LEVEL),
                    pipelines=[default_root_pipeline()],
                    propagate=False,
                )
                logger.debug("root logger created", level=self._root.level)
            return self._root

    def configure_root(self, config: Dict[str, Any]) -> Logger:
        """
        Create or partially update the root.

        ``propagate`` is accepted and ignored: the root never propagates.

        Raises:
            ConfigurationError: On unknown keys, invalid values or NOTSET level
        """
        with self._lock:
            root = self.root()
            partial = {key: value for key, value in config.items() if key != "propagate"}
            root.apply(partial)
            root.propagate = False
            root.parent = None
            return root

    def get_or_create(self, name: str) -> Logger:
        """Return the node for ``name``, creating it and its ancestors if needed."""
        cleaned = canonical_name(name)
        with self._lock:
            return self._get_or_create(cleaned)

    def _get_or_create(self, name: str) -> Logger:
        existing = self._loggers.get(name)
        if existing is not None:
            return existing
        parent_name = parent_name_of(name)
        parent = self.root() if parent_name == ROOT_NAME else self._get_or_create(parent_name)
        node = Logger(name, parent=parent)
        self._loggers[name] = node
        logger.debug("logger created", logger_name=name, parent_name=parent.name)
        return node

    def get(self, name: str) -> Optional[Logger]:
        """Return an existing node or None; ``_root`` returns the root if created."""
        with self._lock:
            if name == ROOT_NAME:
                return self._root
            return self._loggers.get(name)

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._loggers)

    def clear_cache(self) -> None:
        """Forget every non-root node; the root and its configuration stay."""
        with self._lock:
            self._loggers.clear()

    def reset(self) -> None:
        """Forget every node, root included."""
        with self._lock:
            self._loggers.clear()
            self._root = None


registry = LoggerRegistry()


def get_or_create(name: str) -> Logger:
    return registry.get_or_create(name)


def root() -> Logger:
    return registry.root()


def configure_root(config: Dict[str, Any]) -> Logger:
    return registry.configure_root(config)


def reset() -> None:
    registry.reset()
