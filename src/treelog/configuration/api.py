"""
Configuration API.

``configure`` validates a root configuration table and applies it:

    1. custom_levels           (so the rest of the table may use them)
    2. command_line_verbosity  (may supply the root level)
    3. live_level              (may supply the root level)
    4. level / pipelines       (root node, partial update)
    5. async                   (start, reconfigure or stop the writer)

A detected command line level wins over ``level``, and an environment value
from ``live_level`` wins over both. If any step fails, custom levels are
restored to their previous state and the error is raised.

Example:
    >>> import treelog, sys
    >>> treelog.config(
    ...     level="info",
    ...     pipelines=[{"presenter": "json", "outputs": [{"type": "console", "stream": sys.stdout}]}],
    ...     custom_levels={"verbose": 15},
    ...     **{"async": {"enabled": True, "batch_size": 100}},
    ... )
"""

from typing import Any, Dict, Optional

from treelog.configuration import command_line, live_level
from treelog.configuration.models import LoggerConfig, RootConfig, validate_config
from treelog.core import levels
from treelog.core.logging.logger import get_logger
from treelog.loggers.base import Logger
from treelog.loggers.registry import configure_root, registry
from treelog.queueing import manager as async_manager

logger = get_logger(__name__)


def configure(config: Optional[Dict[str, Any]] = None, **kwargs: Any) -> Dict[str, Any]:
    """
    Configure the root logger and the process-wide options.

    Args:
        config: Configuration table; keyword arguments are merged over it

    Returns:
        The resulting configuration, as ``get_config()`` reports it

    Raises:
        ConfigurationError: On invalid tables or values
        UnknownLevel: If a level cannot be resolved
        DuplicateLevel: If custom levels collide
    """
    data = dict(config or {})
    data.update(kwargs)
    model = validate_config(RootConfig, data, "root")
    fields = model.model_fields_set

    previous_levels = levels.get_custom_levels()
    try:
        if model.custom_levels is not None:
            levels.set_custom_levels(model.custom_levels)

        root_partial: Dict[str, Any] = {}
        if "level" in fields and model.level is not None:
            root_partial["level"] = model.level
        if "pipelines" in fields:
            root_partial["pipelines"] = model.pipelines or []

        if model.command_line_verbosity is not None:
            detected = command_line.configure(
                model.command_line_verbosity.mapping,
                model.command_line_verbosity.auto_detect,
            )
            if detected is not None:
                root_partial["level"] = detected

        configure_root(root_partial)

        if model.live_level is not None:
            live_level.configure(
                model.live_level.env_var,
                model.live_level.check_interval,
                model.live_level.enabled,
            )

        if model.async_ is not None:
            async_manager.configure(**model.async_.model_dump(exclude_none=True))
    except Exception:
        levels.set_custom_levels(previous_levels)
        raise

    logger.debug("root configured", keys=sorted(data))
    return get_config()


def configure_logger(node: Logger, config: Dict[str, Any]) -> Logger:
    """Validate a logger configuration table and apply it to ``node``."""
    model = validate_config(LoggerConfig, config, f"logger '{node.name}'")
    partial = {key: getattr(model, key) for key in model.model_fields_set}
    if partial.get("level", "") is None:
        del partial["level"]
    if partial.get("propagate", "") is None:
        del partial["propagate"]
    return node.apply(partial)


def get_config() -> Dict[str, Any]:
    """Canonical root configuration plus the process-wide sections."""
    current = registry.root().get_config()
    current["custom_levels"] = levels.get_custom_levels()
    current["async"] = async_manager.current_options()
    current["live_level"] = live_level.get_config()
    current["command_line_verbosity"] = command_line.get_config()
    return current


def reset_config() -> None:
    """
    Restore the initial state: stop the async writer (flushing it), forget
    every logger and the root, drop custom levels and live level monitoring.
    """
    async_manager.reset()
    live_level.reset()
    command_line.reset()
    registry.reset()
    levels.reset_custom_levels()
