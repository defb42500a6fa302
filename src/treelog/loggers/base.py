"""
Logger node.

A ``Logger`` is one node of the hierarchy: a name, its own level (possibly
NOTSET), its pipelines, a propagate flag and a back-reference to its parent.
Nodes know nothing about their children; the tree is implied by the dotted
names and walked only upwards.

Configuration changes go through ``Logger.apply``: the whole partial update is
validated first and then written into the node's fields in place. A logger
object is therefore a stable identity: every reference held anywhere in the
application sees the new configuration immediately.

Logging Methods:
    debug, info, warning (warn), error, critical, log(level, ...), plus one
    method per registered custom level (``logger.verbose(...)``).

Example:
    >>> import treelog
    >>> db = treelog.logger("app.db")
    >>> db.set_level("debug")
    >>> db.add_pipeline({"presenter": "text", "outputs": ["console"]})
    >>> db.debug("connected to %s", "primary")
"""

from typing import Any, Callable, Dict, List, Optional

from treelog.core import levels
from treelog.core.exceptions.custom_exceptions import ConfigurationError, TreelogError
from treelog.dispatch.engine import dispatch_log_event
from treelog.dispatch.record import create_log_record, parse_log_args
from treelog.pipelines.base import Pipeline
from treelog.utils.caller_info import get_caller_info

ROOT_NAME = "_root"

NODE_FIELDS = ("level", "pipelines", "propagate")

# Callables run before every log call (live level refresh)
_pre_log_hooks: List[Callable[[], None]] = []


def add_pre_log_hook(hook: Callable[[], None]) -> None:
    if hook not in _pre_log_hooks:
        _pre_log_hooks.append(hook)


def remove_pre_log_hook(hook: Callable[[], None]) -> None:
    if hook in _pre_log_hooks:
        _pre_log_hooks.remove(hook)


class Logger:
    """
    A node of the logger hierarchy.

    Attributes:
        name (str): Dotted name; ``_root`` for the root node
        level (int): Own level, NOTSET to inherit from the parent
        pipelines (List[Pipeline]): Pipelines run for accepted records
        propagate (bool): Offer records to the parent after this node
        parent (Optional[Logger]): Parent node, None for the root

    Loggers are created by the registry (``treelog.logger(name)``), not
    directly.
    """

    def __init__(
        self,
        name: str,
        parent: Optional["Logger"] = None,
        level: int = levels.NOTSET,
        pipelines: Optional[List[Pipeline]] = None,
        propagate: bool = True,
    ):
        self.name = name
        self.parent = parent
        self.level = level
        self.pipelines: List[Pipeline] = list(pipelines or [])
        self.propagate = propagate

    @property
    def is_root(self) -> bool:
        return self.name == ROOT_NAME

    def __repr__(self) -> str:
        return (
            f"<Logger {self.name} level={levels.name_of(self.level)} "
            f"pipelines={len(self.pipelines)} propagate={self.propagate}>"
        )

    # Effective level

    def effective_level(self) -> int:
        """
        Level used to filter this logger: its own level, or the nearest
        explicit level among its ancestors.
        """
        node: Optional[Logger] = self
        while node is not None:
            if node.level != levels.NOTSET:
                return node.level
            if node.is_root:
                raise TreelogError(
                    "Root logger has no explicit level",
                    error_code="ROOT_LEVEL_UNSET",
                )
            node = node.parent
        raise TreelogError(
            f"Logger '{self.name}' is detached from the root",
            error_code="LOGGER_DETACHED",
        )

    def is_enabled_for(self, level: levels.LevelLike) -> bool:
        return levels.value_of(level) >= self.effective_level()

    # Configuration

    def apply(self, partial: Dict[str, Any]) -> "Logger":
        """
        Apply a partial configuration in place.

        Fields missing from ``partial`` are left unchanged. For the root,
        ``propagate`` is always False and the level may not be NOTSET.

        Raises:
            ConfigurationError: On unknown keys or invalid values
            UnknownLevel: If the level cannot be resolved
        """
        unknown = set(partial) - set(NODE_FIELDS)
        if unknown:
            if "outputs" in unknown:
                raise ConfigurationError(
                    "'outputs' is no longer supported on loggers; use 'pipelines'",
                    error_code="CONFIG_UNKNOWN_KEY",
                    details={"keys": sorted(unknown)},
                )
            raise ConfigurationError(
                f"Unknown logger configuration keys: {sorted(unknown)}. "
                f"Valid keys are: {', '.join(NODE_FIELDS)}",
                error_code="CONFIG_UNKNOWN_KEY",
                details={"keys": sorted(unknown)},
            )

        staged: Dict[str, Any] = {}
        if "level" in partial:
            level = levels.value_of(partial["level"])
            if self.is_root and level == levels.NOTSET:
                raise ConfigurationError(
                    "Root logger must have an explicit level",
                    error_code="ROOT_LEVEL_UNSET",
                )
            staged["level"] = level
        if "pipelines" in partial:
            pipelines = partial["pipelines"]
            if pipelines is None:
                pipelines = []
            if not isinstance(pipelines, (list, tuple)):
                raise ConfigurationError(
                    f"'pipelines' must be a list, got {type(pipelines).__name__}",
                    error_code="CONFIG_INVALID_TYPE",
                )
            staged["pipelines"] = [Pipeline.from_config(p) for p in pipelines]
        if "propagate" in partial:
            propagate = partial["propagate"]
            if not isinstance(propagate, bool):
                raise ConfigurationError(
                    f"'propagate' must be a boolean, got {type(propagate).__name__}",
                    error_code="CONFIG_INVALID_TYPE",
                )
            staged["propagate"] = False if self.is_root else propagate

        for key, value in staged.items():
            setattr(self, key, value)
        return self

    def set_level(self, level: levels.LevelLike) -> None:
        self.apply({"level": level})

    def set_propagate(self, propagate: bool) -> None:
        self.apply({"propagate": propagate})

    def set_pipelines(self, pipelines: List[Any]) -> None:
        self.apply({"pipelines": pipelines})

    def add_pipeline(self, pipeline: Any) -> Pipeline:
        """Append one pipeline; accepts a ``Pipeline`` or a table."""
        normalized = Pipeline.from_config(pipeline)
        self.apply({"pipelines": self.pipelines + [normalized]})
        return normalized

    def get_config(self, full_tree: bool = False) -> Dict[str, Any]:
        """
        Canonical configuration of this logger.

        With ``full_tree=True`` returns a mapping from every name on the
        chain up to the root to that logger's configuration.
        """
        if not full_tree:
            return {
                "name": self.name,
                "level": self.level,
                "pipelines": [p.to_dict() for p in self.pipelines],
                "propagate": self.propagate,
                "parent_name": self.parent.name if self.parent else None,
            }
        configs: Dict[str, Dict[str, Any]] = {}
        node: Optional[Logger] = self
        while node is not None:
            configs[node.name] = node.get_config()
            node = node.parent
        return configs

    # Logging

    def _log(self, level_no: int, args: tuple, kwargs: Dict[str, Any], depth: int = 3) -> None:
        for hook in list(_pre_log_hooks):
            hook()
        if level_no < self.effective_level():
            return
        message_fmt, format_args, context = parse_log_args(args, kwargs)
        filename, lineno, _ = get_caller_info(depth)
        record = create_log_record(
            self.name,
            level_no,
            message_fmt,
            format_args,
            context,
            filename=filename,
            lineno=lineno,
        )
        dispatch_log_event(self, record)

    def log(self, level: levels.LevelLike, *args: Any, **kwargs: Any) -> None:
        """
        Log at an arbitrary level.

        Raises:
            UnknownLevel: If ``level`` is not registered
        """
        self._log(levels.value_of(level), args, kwargs)

    def debug(self, *args: Any, **kwargs: Any) -> None:
        self._log(levels.DEBUG, args, kwargs)

    def info(self, *args: Any, **kwargs: Any) -> None:
        self._log(levels.INFO, args, kwargs)

    def warning(self, *args: Any, **kwargs: Any) -> None:
        self._log(levels.WARNING, args, kwargs)

    def warn(self, *args: Any, **kwargs: Any) -> None:
        self._log(levels.WARNING, args, kwargs)

    def error(self, *args: Any, **kwargs: Any) -> None:
        self._log(levels.ERROR, args, kwargs)

    def critical(self, *args: Any, **kwargs: Any) -> None:
        self._log(levels.CRITICAL, args, kwargs)

    def __getattr__(self, name: str) -> Callable[..., None]:
        # Only reached for attributes not found normally: custom levels
        if not name.startswith("_") and levels.is_custom_level(name):
            level_no = levels.get_custom_level_value(name)

            def log_custom(*args: Any, **kwargs: Any) -> None:
                self._log(level_no, args, kwargs)

            log_custom.__name__ = name
            return log_custom
        raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")
