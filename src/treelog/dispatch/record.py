"""
Log record creation.

A ``LogRecord`` is produced once per log call and never mutated afterwards.
Every later change (the per-hop owner fields set by the propagation driver,
transformer edits, the presented message) produces a new record through
``LogRecord.evolve``, so sibling pipelines and ancestor hops never observe
each other's changes.

Two logger names travel on every record:
    source_logger_name: The logger the call was made on, fixed for life
    logger_name: The logger whose pipeline is processing the record now

Argument shapes accepted by the logging methods:
    logger.info("plain message")
    logger.info("user %s logged in from %s", user, ip)
    logger.info({"user": user}, "login from %s", ip)
    logger.info("login", user=user)               # keyword context
    logger.info({"msg": "login", "user": user})   # context-only
"""

import time
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

from treelog.core import levels


@dataclass(frozen=True)
class LogRecord:
    """
    Immutable log event.

    Attributes:
        level_no (int): Numeric level of the event
        level_name (str): Display name of the level
        message_fmt (str): Raw ``%``-style format string
        args (Tuple[Any, ...]): Positional formatting arguments
        context (Optional[Dict[str, Any]]): Structured context, if any
        message (str): Formatted message; replaced by the presenter output
        timestamp (float): Seconds since the epoch
        source_logger_name (str): Logger the event was logged on
        logger_name (str): Logger currently processing the record
        logger_level (int): Own level of the current logger (may be NOTSET)
        logger_propagate (bool): Propagate flag of the current logger
        pipeline_level (int): Level threshold of the current pipeline
        presented_message (Optional[str]): Presenter output, once presented
        filename (str): Source file of the log call
        lineno (int): Source line of the log call
        extra (Dict[str, Any]): Free-form fields added by transformers
    """

    level_no: int
    level_name: str
    message_fmt: str
    args: Tuple[Any, ...] = ()
    context: Optional[Dict[str, Any]] = None
    message: str = ""
    timestamp: float = field(default_factory=time.time)
    source_logger_name: str = ""
    logger_name: str = ""
    logger_level: int = levels.NOTSET
    logger_propagate: bool = True
    pipeline_level: int = levels.NOTSET
    presented_message: Optional[str] = None
    filename: str = "unknown"
    lineno: int = 0
    extra: Dict[str, Any] = field(default_factory=dict)

    def evolve(self, **changes: Any) -> "LogRecord":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def copy(self) -> "LogRecord":
        """Return a copy with its own ``extra`` and ``context`` maps."""
        return replace(
            self,
            extra=dict(self.extra),
            context=dict(self.context) if self.context is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the record to a plain dictionary.

        ``extra`` fields are merged at the top level, without overriding the
        record's own fields.
        """
        data = {
            "level_no": self.level_no,
            "level_name": self.level_name,
            "message_fmt": self.message_fmt,
            "args": list(self.args),
            "context": self.context,
            "message": self.message,
            "timestamp": self.timestamp,
            "source_logger_name": self.source_logger_name,
            "logger_name": self.logger_name,
            "logger_level": self.logger_level,
            "logger_propagate": self.logger_propagate,
            "pipeline_level": self.pipeline_level,
            "presented_message": self.presented_message,
            "filename": self.filename,
            "lineno": self.lineno,
        }
        for key, value in self.extra.items():
            data.setdefault(key, value)
        return data


def _describe(error: Exception) -> str:
    try:
        return str(error)
    except Exception:
        return type(error).__name__


def _safe_str(value: Any) -> str:
    """``str(value)``, or a FORMAT ERROR marker when conversion itself fails."""
    try:
        return str(value)
    except Exception as e:
        return f"<{type(value).__name__}> [FORMAT ERROR: {_describe(e)}]"


def parse_log_args(
    args: Tuple[Any, ...], kwargs: Dict[str, Any]
) -> Tuple[str, Tuple[Any, ...], Optional[Dict[str, Any]]]:
    """
    Split the arguments of a logging call into format, args and context.

    Returns:
        Tuple of (message_fmt, format_args, context)
    """
    context: Optional[Dict[str, Any]] = None
    message_fmt = ""
    format_args: Tuple[Any, ...] = ()

    if args and isinstance(args[0], dict):
        context = dict(args[0])
        if len(args) >= 2 and isinstance(args[1], str):
            message_fmt = args[1]
            format_args = tuple(args[2:])
        else:
            message_fmt = _safe_str(context.get("msg", ""))
    elif args:
        if isinstance(args[0], str):
            message_fmt = args[0]
            format_args = tuple(args[1:])
        else:
            message_fmt = _safe_str(args[0])

    if kwargs:
        context = {**(context or {}), **kwargs}

    return message_fmt, format_args, context


def format_message(message_fmt: str, args: Tuple[Any, ...]) -> str:
    """
    Apply ``%``-style formatting, never raising.

    A format failure yields ``"<fmt> [FORMAT ERROR: <reason>]"``.
    """
    if not message_fmt:
        return ""
    if not args:
        return message_fmt
    try:
        return message_fmt % args
    except Exception as e:
        return f"{message_fmt} [FORMAT ERROR: {_describe(e)}]"


def create_log_record(
    logger_name: str,
    level_no: int,
    message_fmt: str,
    args: Tuple[Any, ...] = (),
    context: Optional[Dict[str, Any]] = None,
    filename: str = "unknown",
    lineno: int = 0,
) -> LogRecord:
    """Build the record for one log call on ``logger_name``."""
    return LogRecord(
        level_no=level_no,
        level_name=levels.name_of(level_no),
        message_fmt=message_fmt,
        args=tuple(args),
        context=context,
        message=format_message(message_fmt, tuple(args)),
        source_logger_name=logger_name,
        logger_name=logger_name,
        filename=filename,
        lineno=lineno,
    )
