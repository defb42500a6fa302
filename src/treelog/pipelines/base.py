"""
Pipeline model and component normalization.

A pipeline is the unit of work a logger runs for a record: an optional level
threshold, an ordered list of transformers, one presenter and an ordered list
of outputs. Transformers, presenters and outputs are supplied by callers in
several shapes; they are all normalized into one ``Component(func, config)``
pair when the pipeline is built, never at call time.

Component Contracts:
    transformer: (record, config) -> record
    presenter:   (record, config) -> str
    output:      (record, config) -> None

Accepted Shapes:
    - A callable:                         my_output
    - A (callable, config) pair:          (my_output, {"prefix": ">"})
    - A dict with "func":                 {"func": my_output, "prefix": ">"}
    - A registered builtin name:          "console"
    - A (name, config) pair:              ("json", {"pretty": True})
    - A dict with "type":                 {"type": "console", "stream": buf}
    - An already normalized Component

Classes:
    Component: Normalized (callable, config) pair
    ComponentRegistry: Name registry for builtin and user components
    Pipeline: Normalized pipeline owned by one logger

Example:
    >>> pipeline = Pipeline(
    ...     level="info",
    ...     transformers=["noop"],
    ...     presenter=("text", {"timezone": "utc"}),
    ...     outputs=[{"type": "console", "stream": sys.stdout}],
    ... )
    >>> pipeline.level
    20
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from treelog.core import levels
from treelog.core.exceptions.custom_exceptions import ConfigurationError

TRANSFORMER = "transformer"
PRESENTER = "presenter"
OUTPUT = "output"

COMPONENT_KINDS = (TRANSFORMER, PRESENTER, OUTPUT)


@dataclass(frozen=True)
class Component:
    """
    A normalized pipeline component.

    Attributes:
        func (Callable): The component callable, always invoked as
            ``func(record, config)``
        config (Dict[str, Any]): Configuration passed on every invocation
        name (str): Registered name, or the callable's name
    """

    func: Callable[..., Any]
    config: Dict[str, Any] = field(default_factory=dict)
    name: str = ""

    def __call__(self, record: Any) -> Any:
        return self.func(record, self.config)

    def to_dict(self) -> Dict[str, Any]:
        return {"func": self.func, "name": self.name, "config": dict(self.config)}


class ComponentRegistry:
    """
    Name registry for pipeline components.

    The builtin presenters, transformers and outputs register themselves at
    import time; applications may register their own so configuration tables
    can refer to them by name.

    Usage:
        >>> ComponentRegistry.register("output", "memory", memory_output)
        >>> Pipeline(outputs=["memory"])

    Thread Safety:
        Registration should happen at import time, before concurrent access.
    """

    _components: Dict[str, Dict[str, Callable[..., Any]]] = {
        kind: {} for kind in COMPONENT_KINDS
    }

    @classmethod
    def register(cls, kind: str, name: str, func: Callable[..., Any]) -> None:
        """
        Register a component callable under a name.

        Duplicate names overwrite the previous registration.
        """
        if kind not in cls._components:
            raise ConfigurationError(f"Unknown component kind: {kind}")
        cls._components[kind][name] = func

    @classmethod
    def get(cls, kind: str, name: str) -> Callable[..., Any]:
        """
        Look up a registered component.

        Raises:
            ConfigurationError: If the name is not registered for the kind
        """
        try:
            return cls._components[kind][name]
        except KeyError:
            raise ConfigurationError(
                f"Unknown {kind}: {name}",
                error_code="COMPONENT_UNKNOWN",
                details={"kind": kind, "name": name, "known": cls.list(kind)},
            ) from None

    @classmethod
    def list(cls, kind: str) -> List[str]:
        """Names registered for a kind."""
        return sorted(cls._components.get(kind, {}))


def register_component(kind: str, name: str) -> Callable:
    """Decorator form of ``ComponentRegistry.register``."""

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        ComponentRegistry.register(kind, name, func)
        return func

    return decorator


def _callable_name(func: Callable[..., Any]) -> str:
    return getattr(func, "__name__", None) or type(func).__name__


def normalize_component(spec: Any, kind: str) -> Component:
    """
    Normalize one component specification into a ``Component``.

    Raises:
        ConfigurationError: If the shape is not recognised or a name is not
            registered
    """
    if isinstance(spec, Component):
        return spec
    if isinstance(spec, str):
        return Component(ComponentRegistry.get(kind, spec), {}, spec)
    if isinstance(spec, (tuple, list)) and len(spec) == 2 and isinstance(spec[1], dict):
        target, config = spec
        if isinstance(target, str):
            return Component(ComponentRegistry.get(kind, target), dict(config), target)
        if callable(target):
            return Component(target, dict(config), _callable_name(target))
    if isinstance(spec, dict):
        options = dict(spec)
        nested = options.pop("config", None)
        if "func" in options:
            func = options.pop("func")
            if not callable(func):
                raise ConfigurationError(
                    f"{kind} 'func' must be callable, got {type(func).__name__}",
                    error_code="COMPONENT_NOT_CALLABLE",
                )
            name = _callable_name(func)
        elif "type" in options:
            name = options.pop("type")
            func = ComponentRegistry.get(kind, name)
        else:
            raise ConfigurationError(
                f"{kind} table needs a 'func' or 'type' key",
                error_code="COMPONENT_INVALID",
                details={"keys": sorted(spec)},
            )
        if nested:
            options.update(nested)
        return Component(func, options, name)
    if callable(spec):
        return Component(spec, {}, _callable_name(spec))
    raise ConfigurationError(
        f"Invalid {kind}: expected a callable, a name or a table, "
        f"got {type(spec).__name__}",
        error_code="COMPONENT_INVALID",
    )


def normalize_components(specs: Optional[Sequence[Any]], kind: str) -> List[Component]:
    if specs is None:
        return []
    if isinstance(specs, (str, dict, Component)) or callable(specs):
        specs = [specs]
    return [normalize_component(spec, kind) for spec in specs]


def _normalize_pipeline_level(level: Union[str, int, None]) -> int:
    if level is None:
        return levels.NOTSET
    return levels.value_of(level)


@dataclass
class Pipeline:
    """
    A pipeline owned by exactly one logger.

    Attributes:
        level (int): Pipeline threshold; NOTSET means always eligible
        transformers (List[Component]): Applied in order
        presenter (Component): Turns the record into the output string;
            defaults to the ``message`` presenter
        outputs (List[Component]): Invoked in order with the presented record

    Normalization happens in ``__post_init__`` so every ``Pipeline`` in a
    logger holds canonical ``Component`` objects.
    """

    level: Any = levels.NOTSET
    transformers: List[Any] = field(default_factory=list)
    presenter: Any = None
    outputs: List[Any] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.level = _normalize_pipeline_level(self.level)
        self.transformers = normalize_components(self.transformers, TRANSFORMER)
        if self.presenter is None:
            self.presenter = "message"
        self.presenter = normalize_component(self.presenter, PRESENTER)
        self.outputs = normalize_components(self.outputs, OUTPUT)

    @classmethod
    def from_config(cls, config: Union["Pipeline", Dict[str, Any]]) -> "Pipeline":
        """
        Build a pipeline from a configuration table.

        Raises:
            ConfigurationError: On unknown keys or invalid components
        """
        if isinstance(config, Pipeline):
            return config
        if not isinstance(config, dict):
            raise ConfigurationError(
                f"Pipeline must be a table, got {type(config).__name__}",
                error_code="PIPELINE_INVALID",
            )
        unknown = set(config) - {"level", "transformers", "presenter", "outputs"}
        if unknown:
            raise ConfigurationError(
                f"Unknown pipeline keys: {sorted(unknown)}",
                error_code="PIPELINE_UNKNOWN_KEY",
                details={"keys": sorted(unknown)},
            )
        return cls(
            level=config.get("level"),
            transformers=config.get("transformers") or [],
            presenter=config.get("presenter"),
            outputs=config.get("outputs") or [],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Canonical configuration of the pipeline."""
        return {
            "level": self.level,
            "transformers": [t.to_dict() for t in self.transformers],
            "presenter": self.presenter.to_dict(),
            "outputs": [o.to_dict() for o in self.outputs],
        }
