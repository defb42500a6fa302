"""
Custom exception hierarchy for treelog.

Every error raised by treelog derives from ``TreelogError`` and carries a
human-readable message, a machine-readable error code and a details
dictionary, so callers can branch on the code and log the context.

Exception Hierarchy:
    TreelogError (base)
    ├── ConfigurationError: Invalid configuration tables or arguments
    ├── UnknownLevel: A level name or number that is not registered
    ├── DuplicateLevel: A custom level colliding with a registered one
    ├── ReservedName: A logger name using the root's reserved syntax
    ├── PipelineStageError: A transformer or presenter failed
    ├── OutputError: A single output failed
    └── WorkerUnhealthy: The async worker cannot accept work

Propagation Policy:
    Configuration-time errors (``ConfigurationError``, ``UnknownLevel``,
    ``DuplicateLevel``, ``ReservedName``) are raised to the caller and stop
    the offending call.

    Dispatch-time errors (``PipelineStageError``, ``OutputError``,
    ``WorkerUnhealthy``) are never raised out of a log call. They are built
    so the failure has a uniform shape and then reported on the diagnostic
    channel (see ``treelog.core.logging.logger``).

Example:
    >>> try:
    ...     treelog.logger("_private")
    ... except ReservedName as e:
    ...     print(e.error_code, e.details["name"])
    RESERVED_LOGGER_NAME _private
"""

from typing import Any, Dict, Optional


class TreelogError(Exception):
    """
    Base exception class for all treelog errors.

    Attributes:
        message (str): Human-readable error description
        error_code (str): Machine-readable error identifier
        details (Dict[str, Any]): Additional contextual information

    The error_code defaults to the class name when not given.

    Example:
        >>> raise TreelogError(
        ...     "Root logger has no explicit level",
        ...     error_code="ROOT_LEVEL_UNSET",
        ...     details={"level": 0},
        ... )
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


class ConfigurationError(TreelogError):
    """
    Raised when a configuration table or setter argument is invalid.

    Common scenarios:
        - Unknown keys in a root or logger configuration table
        - Wrong value types (e.g. ``propagate="yes"``)
        - An empty logger name or a name with empty dotted segments
        - Setting the root logger's level to NOTSET
        - A component that is neither callable nor a registered name

    Example:
        >>> raise ConfigurationError(
        ...     "Unknown configuration key 'outputs'",
        ...     error_code="CONFIG_UNKNOWN_KEY",
        ...     details={"key": "outputs"},
        ... )
    """

    pass


class UnknownLevel(TreelogError):
    """
    Raised when a level name or number cannot be resolved.

    Level names are matched case-insensitively against builtin and custom
    levels; numbers must be a registered value.

    Example:
        >>> raise UnknownLevel(
        ...     "Unknown level 'LOUD'",
        ...     error_code="LEVEL_UNKNOWN",
        ...     details={"level": "LOUD"},
        ... )
    """

    pass


class DuplicateLevel(TreelogError):
    """
    Raised when a custom level collides with an existing level.

    A custom level may not reuse the value of a builtin level, the NOTSET
    sentinel or another custom level, and may not reuse a registered name.
    """

    pass


class ReservedName(TreelogError):
    """
    Raised when a user-supplied logger name violates the reserved-name rule.

    The root logger is named ``_root``; user names may neither be ``_root``
    nor start with an underscore.
    """

    pass


class PipelineStageError(TreelogError):
    """
    A transformer or presenter failed while processing a record.

    Pipeline-fatal: the remaining stages and all outputs of that pipeline are
    skipped. Never raised to the application; reported on the diagnostic
    channel only.

    Attributes (in details):
        stage: ``"transformer"`` or ``"presenter"``
        logger_name: Name of the logger owning the pipeline
        index: Position of the failing transformer (transformers only)
    """

    pass


class OutputError(TreelogError):
    """
    A single output failed while writing a presented record.

    Per-output only: the remaining outputs of the same pipeline still run.
    Never raised to the application.
    """

    pass


class WorkerUnhealthy(TreelogError):
    """
    The async worker is not running or is shutting down.

    Triggers synchronous fallback for the submitted record and is reported on
    the diagnostic channel; never raised to the application.
    """

    pass
