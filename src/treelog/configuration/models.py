"""
Configuration models.

Pydantic models describing the tables accepted by ``treelog.config(...)`` and
``treelog.logger(name, config)``. Every model forbids unknown keys. Level
values are only checked for shape here; they are resolved against the level
registry when applied, after any ``custom_levels`` of the same call are
registered.
"""

from typing import Any, Dict, List, Literal, Optional, Type, TypeVar, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PositiveFloat,
    PositiveInt,
    StrictBool,
    StrictInt,
    StrictStr,
    ValidationError,
    model_validator,
)

from treelog.core.exceptions.custom_exceptions import ConfigurationError

LevelValue = Union[StrictInt, StrictStr]

ModelT = TypeVar("ModelT", bound=BaseModel)


class NodeConfig(BaseModel):
    """Fields shared by the root and every other logger."""

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    level: Optional[LevelValue] = None
    pipelines: Optional[List[Any]] = None
    propagate: Optional[StrictBool] = None

    @model_validator(mode="before")
    @classmethod
    def reject_outputs(cls, data: Any) -> Any:
        if isinstance(data, dict) and "outputs" in data:
            raise ValueError(
                "'outputs' is no longer supported on loggers; "
                "wrap outputs in a pipeline: pipelines=[{'outputs': [...]}]"
            )
        return data


class LoggerConfig(NodeConfig):
    """Configuration for ``treelog.logger(name, config)``."""


class AsyncConfig(BaseModel):
    """Async dispatch options; omitted fields keep their current value."""

    model_config = ConfigDict(extra="forbid")

    enabled: Optional[StrictBool] = None
    batch_size: Optional[PositiveInt] = None
    flush_interval: Optional[PositiveFloat] = None
    max_queue_size: Optional[PositiveInt] = None
    overflow_strategy: Optional[Literal["drop_oldest", "drop_newest"]] = None


class LiveLevelConfig(BaseModel):
    """Root level refreshed from an environment variable."""

    model_config = ConfigDict(extra="forbid")

    env_var: Optional[StrictStr] = None
    check_interval: Optional[PositiveInt] = None
    enabled: StrictBool = True

    @model_validator(mode="after")
    def require_env_var(self) -> "LiveLevelConfig":
        if self.enabled and not self.env_var:
            raise ValueError("live_level.env_var is required when live_level is enabled")
        return self


class CommandLineVerbosityConfig(BaseModel):
    """Root level derived from command line flags such as ``-vv``."""

    model_config = ConfigDict(extra="forbid")

    mapping: Optional[Dict[StrictStr, StrictStr]] = None
    auto_detect: StrictBool = True


class RootConfig(NodeConfig):
    """Configuration for ``treelog.config(...)``."""

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True, populate_by_name=True)

    custom_levels: Optional[Dict[StrictStr, StrictInt]] = None
    async_: Optional[AsyncConfig] = Field(default=None, alias="async")
    live_level: Optional[LiveLevelConfig] = None
    command_line_verbosity: Optional[CommandLineVerbosityConfig] = None


def validate_config(model: Type[ModelT], data: Any, what: str) -> ModelT:
    """
    Validate ``data`` against ``model``.

    Raises:
        ConfigurationError: With the pydantic error list in ``details``
    """
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"{what} configuration must be a table, got {type(data).__name__}",
            error_code="CONFIG_INVALID_TYPE",
        )
    try:
        return model.model_validate(data)
    except ValidationError as e:
        errors = e.errors(include_url=False, include_context=False, include_input=False)
        summary = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or what}: {err['msg']}" for err in errors
        )
        raise ConfigurationError(
            f"Invalid {what} configuration: {summary}",
            error_code="CONFIG_VALIDATION_FAILED",
            details={"errors": errors},
        ) from e
