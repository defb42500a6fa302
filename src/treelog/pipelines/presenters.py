"""
Builtin presenters.

A presenter turns a record into the string the outputs write. Presenters are
pure: they return a string and never touch a stream or a terminal.

Registered Names:
    message: The formatted message, unchanged
    text:    ``2025-01-01 10:00:00 INFO [app.db] connected``
    json:    One JSON object per record
    color:   The text layout with ANSI styles, rendered by rich

Configuration:
    text / color:
        timezone: ``"local"`` (default) or ``"utc"``
        datefmt: strftime format, default ``"%Y-%m-%d %H:%M:%S"``
    color:
        level_styles: Mapping of level name to rich style
    json:
        pretty: Indent the output (default False)
        timezone: As above, used for ``timestamp_iso``
"""

import io
import json
from datetime import datetime, timezone
from typing import Any, Dict

from rich.console import Console
from rich.text import Text

from treelog.dispatch.record import LogRecord
from treelog.pipelines.base import PRESENTER, register_component

DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"

DEFAULT_LEVEL_STYLES = {
    "DEBUG": "blue",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold magenta",
}


def _to_datetime(timestamp: float, tz: str) -> datetime:
    if tz == "utc":
        return datetime.fromtimestamp(timestamp, tz=timezone.utc)
    return datetime.fromtimestamp(timestamp).astimezone()


def format_timestamp(timestamp: float, tz: str = "local", datefmt: str = DEFAULT_DATEFMT) -> str:
    return _to_datetime(timestamp, tz).strftime(datefmt)


def _body(record: LogRecord) -> str:
    if record.message_fmt or not record.context:
        return record.message
    # Context-only call
    parts = [f"{key}={value}" for key, value in record.context.items()]
    return "{" + ", ".join(parts) + "}"


@register_component(PRESENTER, "message")
def message_presenter(record: LogRecord, config: Dict[str, Any]) -> str:
    return record.message


@register_component(PRESENTER, "text")
def text_presenter(record: LogRecord, config: Dict[str, Any]) -> str:
    """
    Plain text layout: timestamp, level, owning logger, message.
    """
    timestamp = format_timestamp(
        record.timestamp,
        config.get("timezone", "local"),
        config.get("datefmt", DEFAULT_DATEFMT),
    )
    return "%s %s [%s] %s" % (
        timestamp,
        record.level_name or "UNKNOWN_LEVEL",
        record.logger_name or "UNKNOWN_LOGGER",
        _body(record),
    )


def _non_serializable(value: Any) -> str:
    return f"[non-serializable: {type(value).__name__}]"


@register_component(PRESENTER, "json")
def json_presenter(record: LogRecord, config: Dict[str, Any]) -> str:
    """
    JSON object with the record fields; ``extra`` fields are merged at the
    top level without overriding the standard keys.
    """
    tz = config.get("timezone", "local")
    payload: Dict[str, Any] = {
        "timestamp": record.timestamp,
        "timestamp_iso": _to_datetime(record.timestamp, tz).isoformat(),
        "timezone": tz,
        "level": record.level_name or "UNKNOWN_LEVEL",
        "level_no": record.level_no,
        "logger": record.logger_name or "UNKNOWN_LOGGER",
        "source_logger": record.source_logger_name,
        "message": record.message,
        "message_fmt": record.message_fmt,
        "args": list(record.args),
        "filename": record.filename,
        "lineno": record.lineno,
    }
    if record.context:
        payload["context"] = record.context
    for key, value in record.extra.items():
        payload.setdefault(key, value)
    return json.dumps(
        payload,
        indent=2 if config.get("pretty") else None,
        default=_non_serializable,
    )


@register_component(PRESENTER, "color")
def color_presenter(record: LogRecord, config: Dict[str, Any]) -> str:
    """
    Text layout styled per level, returned as a string with ANSI codes.

    The rich console writes into a buffer rather than a terminal; the
    returned string is what the outputs receive.
    """
    styles = {**DEFAULT_LEVEL_STYLES, **config.get("level_styles", {})}
    timestamp = format_timestamp(
        record.timestamp,
        config.get("timezone", "local"),
        config.get("datefmt", DEFAULT_DATEFMT),
    )
    level_name = record.level_name or "UNKNOWN_LEVEL"

    line = Text()
    line.append(timestamp, style="dim")
    line.append(" ")
    line.append(level_name, style=styles.get(level_name, "white"))
    line.append(" [")
    line.append(record.logger_name or "UNKNOWN_LOGGER", style="cyan")
    line.append("] ")
    line.append(_body(record))

    buffer = io.StringIO()
    console = Console(
        file=buffer,
        force_terminal=True,
        color_system="standard",
        soft_wrap=True,
        highlight=False,
    )
    console.print(line, end="")
    return buffer.getvalue()
