"""
Process-wide async facade.

There is at most one ``AsyncWriter`` per process. This module owns it and
exposes the operations the dispatch engine and the configuration layer use.

Functions:
    configure(**options): Apply async options, starting or stopping the writer
    enable(flag): Turn async dispatch on or off
    is_enabled(): Whether records are currently queued
    submit(record, origin, dispatch_fn): Queue one record
    flush(timeout): Wait for queued records to be dispatched
    get_stats(): Queue and worker statistics
    reset(): Stop the writer and restore defaults
"""

import threading
from typing import Any, Callable, Dict, Optional

from treelog.core.config.settings import settings
from treelog.core.exceptions.custom_exceptions import ConfigurationError
from treelog.core.logging.logger import get_logger
from treelog.queueing.queue import OVERFLOW_STRATEGIES
from treelog.queueing.worker import STATUS_STOPPED, AsyncWriter

logger = get_logger(__name__)

ASYNC_OPTIONS = ("enabled", "batch_size", "flush_interval", "max_queue_size", "overflow_strategy")

_lock = threading.RLock()
_writer: Optional[AsyncWriter] = None
_enabled = False
_options: Dict[str, Any] = {}


def default_options() -> Dict[str, Any]:
    return {
        "enabled": False,
        "batch_size": settings.ASYNC_BATCH_SIZE,
        "flush_interval": settings.ASYNC_FLUSH_INTERVAL,
        "max_queue_size": settings.ASYNC_MAX_QUEUE_SIZE,
        "overflow_strategy": settings.ASYNC_OVERFLOW_STRATEGY,
    }


def _validate(options: Dict[str, Any]) -> None:
    unknown = set(options) - set(ASYNC_OPTIONS)
    if unknown:
        raise ConfigurationError(
            f"Unknown async options: {sorted(unknown)}",
            error_code="CONFIG_UNKNOWN_KEY",
            details={"keys": sorted(unknown)},
        )
    for key in ("batch_size", "max_queue_size"):
        value = options.get(key)
        if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value < 1):
            raise ConfigurationError(
                f"async {key} must be a positive integer, got {value!r}",
                error_code="CONFIG_INVALID_VALUE",
            )
    interval = options.get("flush_interval")
    if interval is not None and (
        isinstance(interval, bool) or not isinstance(interval, (int, float)) or interval <= 0
    ):
        raise ConfigurationError(
            f"async flush_interval must be a positive number, got {interval!r}",
            error_code="CONFIG_INVALID_VALUE",
        )
    strategy = options.get("overflow_strategy")
    if strategy is not None and strategy not in OVERFLOW_STRATEGIES:
        raise ConfigurationError(
            f"Unknown overflow strategy '{strategy}'. "
            f"Valid strategies are: {', '.join(OVERFLOW_STRATEGIES)}",
            error_code="CONFIG_INVALID_VALUE",
        )


def current_options() -> Dict[str, Any]:
    with _lock:
        merged = default_options()
        merged.update(_options)
        merged["enabled"] = _enabled
        return merged


def configure(**options: Any) -> Dict[str, Any]:
    """
    Apply a partial set of async options.

    Changing writer parameters while enabled replaces the writer: the old
    one is flushed and stopped first, so no queued record is lost.

    Returns:
        The resulting options
    """
    global _writer, _enabled
    _validate(options)
    with _lock:
        params = {k: v for k, v in options.items() if k != "enabled" and v is not None}
        changed = any(_options.get(k, default_options()[k]) != v for k, v in params.items())
        _options.update(params)
        want_enabled = options.get("enabled", _enabled)
        if want_enabled is None:
            want_enabled = _enabled

        if _writer is not None and (changed or not want_enabled):
            _stop_writer()
        if want_enabled and _writer is None:
            opts = current_options()
            _writer = AsyncWriter(
                batch_size=opts["batch_size"],
                flush_interval=opts["flush_interval"],
                max_queue_size=opts["max_queue_size"],
                overflow_strategy=opts["overflow_strategy"],
            )
            _writer.start()
        _enabled = bool(want_enabled)
        return current_options()


def _stop_writer() -> None:
    global _writer, _enabled
    writer = _writer
    # Stop queuing before the flush so new records go through synchronously
    _enabled = False
    _writer = None
    if writer is not None:
        writer.stop()


def enable(flag: bool = True) -> None:
    configure(enabled=flag)


def is_enabled() -> bool:
    return _enabled and _writer is not None


def submit(record: Any, origin: Any, dispatch_fn: Callable[[Any, Any], None]) -> bool:
    writer = _writer
    if writer is None:
        dispatch_fn(origin, record)
        return False
    return writer.submit(record, origin, dispatch_fn)


def flush(timeout: Optional[float] = None) -> bool:
    """Wait for the async queue to drain. True when nothing is pending."""
    writer = _writer
    if writer is None:
        return True
    return writer.flush(timeout)


def get_stats() -> Dict[str, Any]:
    writer = _writer
    if writer is not None:
        stats = writer.get_stats()
    else:
        opts = current_options()
        stats = {
            "queue_size": 0,
            "max_queue_size": opts["max_queue_size"],
            "overflow_strategy": opts["overflow_strategy"],
            "queue_overflows": 0,
            "messages_processed": 0,
            "messages_dropped": 0,
            "backend_errors": 0,
            "worker_status": STATUS_STOPPED,
            "worker_restarts": 0,
            "batch_size": opts["batch_size"],
            "flush_interval": opts["flush_interval"],
            "last_flush_time": None,
        }
    stats["enabled"] = is_enabled()
    return stats


def reset() -> None:
    """Stop the writer (flushing it) and restore the default options."""
    with _lock:
        _stop_writer()
        _options.clear()
