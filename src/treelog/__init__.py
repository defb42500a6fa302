"""
treelog - Hierarchical Logging with Pipelines

treelog organizes named loggers in a dot-separated tree. Each logger owns a
list of pipelines (transformers, a presenter and outputs); a log event is
offered to the logger it was made on and then to each ancestor in turn, with
an independent level filter at every node, until the root or a logger that
does not propagate.

Key Features:
    - Effective levels inherited along the tree
    - Pipelines with per-pipeline thresholds and isolated failures
    - Custom levels that become logging methods (``log.verbose(...)``)
    - Optional background dispatch with a bounded queue
    - Root level from command line flags or a live environment variable

Modules:
    core: Levels, settings, exceptions and the diagnostic logger
    loggers: Logger nodes and the registry
    pipelines: Pipeline model, processor and builtin components
    dispatch: Log records and the propagation driver
    queueing: Bounded queue and async writer
    configuration: Configuration tables and their application
    cli: ``treelog`` developer command

Example:
    >>> import sys, treelog
    >>> treelog.config(
    ...     level="info",
    ...     pipelines=[{"presenter": "text", "outputs": [{"type": "console", "stream": sys.stdout}]}],
    ... )
    >>> log = treelog.logger("app.db")
    >>> log.info("connected to %s", "primary")
"""

__version__ = "0.1.0"
__description__ = "Hierarchical logging library with pipelines and async dispatch."

from treelog.api import (
    flush,
    get_async_stats,
    get_levels,
    logger,
    reset_cache,
    root,
    set_levels,
)
from treelog.configuration.api import configure as config
from treelog.configuration.api import get_config, reset_config
from treelog.core.exceptions.custom_exceptions import (
    ConfigurationError,
    DuplicateLevel,
    OutputError,
    PipelineStageError,
    ReservedName,
    TreelogError,
    UnknownLevel,
    WorkerUnhealthy,
)
from treelog.core.levels import CRITICAL, DEBUG, ERROR, INFO, NONE, NOTSET, WARNING
from treelog.loggers.base import Logger
from treelog.pipelines import Component, Pipeline, register_component

__all__ = [
    "NOTSET",
    "DEBUG",
    "INFO",
    "WARNING",
    "ERROR",
    "CRITICAL",
    "NONE",
    "logger",
    "root",
    "config",
    "get_config",
    "reset_config",
    "reset_cache",
    "get_levels",
    "set_levels",
    "flush",
    "get_async_stats",
    "Logger",
    "Pipeline",
    "Component",
    "register_component",
    "TreelogError",
    "ConfigurationError",
    "UnknownLevel",
    "DuplicateLevel",
    "ReservedName",
    "PipelineStageError",
    "OutputError",
    "WorkerUnhealthy",
]
