"""
Live level changes.

When enabled, the root level follows an environment variable: every
``check_interval`` log calls the variable is read again and, when its value
changed, applied with ``configure_root``. Values may be level names or
numbers. An invalid value is reported on the diagnostic channel and ignored.

Example:
    >>> treelog.config(live_level={"env_var": "APP_LOG_LEVEL", "check_interval": 50})
    # later, from a debugger or a signal handler:
    >>> os.environ["APP_LOG_LEVEL"] = "debug"
"""

import os
import threading
from typing import Any, Dict, Optional

from treelog.core.config.settings import settings
from treelog.core.exceptions.custom_exceptions import TreelogError
from treelog.core.logging.logger import get_logger
from treelog.loggers.base import add_pre_log_hook, remove_pre_log_hook
from treelog.loggers.registry import configure_root

logger = get_logger(__name__)


class LiveLevelMonitor:
    """Re-reads ``env_var`` every ``check_interval`` calls of ``check()``."""

    def __init__(self, env_var: str, check_interval: Optional[int] = None):
        self.env_var = env_var
        self.check_interval = check_interval or settings.LIVE_LEVEL_CHECK_INTERVAL
        self.last_value: Optional[str] = None
        self._counter = 0
        self._lock = threading.Lock()

    def apply_current(self) -> bool:
        """
        Read the variable now and apply it if it changed.

        Returns:
            True if the root level was changed
        """
        value = os.environ.get(self.env_var)
        with self._lock:
            if value is None or value == self.last_value:
                return False
            self.last_value = value
        level: Any = int(value) if value.strip().isdigit() else value.strip()
        try:
            configure_root({"level": level})
        except TreelogError as e:
            logger.error(
                f"Ignoring invalid level in ${self.env_var}: {e}",
                error_code=e.error_code,
                stage="live_level",
                value=value,
            )
            return False
        logger.info("root level changed from environment", env_var=self.env_var, value=value)
        return True

    def check(self) -> None:
        with self._lock:
            self._counter += 1
            due = self._counter >= self.check_interval
            if due:
                self._counter = 0
        if due:
            self.apply_current()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": True,
            "env_var": self.env_var,
            "check_interval": self.check_interval,
        }


_monitor: Optional[LiveLevelMonitor] = None


def configure(env_var: Optional[str], check_interval: Optional[int] = None, enabled: bool = True) -> None:
    """Install, replace or remove the live level monitor."""
    global _monitor
    reset()
    if not enabled or not env_var:
        return
    _monitor = LiveLevelMonitor(env_var, check_interval)
    _monitor.apply_current()
    add_pre_log_hook(_monitor.check)


def get_config() -> Dict[str, Any]:
    if _monitor is None:
        return {"enabled": False, "env_var": None, "check_interval": settings.LIVE_LEVEL_CHECK_INTERVAL}
    return _monitor.to_dict()


def reset() -> None:
    global _monitor
    if _monitor is not None:
        remove_pre_log_hook(_monitor.check)
    _monitor = None
