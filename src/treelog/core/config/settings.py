"""
Environment-driven settings for treelog.

This module provides the process-wide defaults that treelog falls back to
when a configuration table does not say otherwise. Settings are loaded with
Pydantic settings, so every field can be overridden by an environment
variable carrying the ``TREELOG_`` prefix (or from a ``.env`` file).

Classes:
    Settings: Library defaults with validation

Environment Variables:
    TREELOG_DEBUG: Enable the internal dispatch trace on stderr
    TREELOG_DIAGNOSTICS_LEVEL: Minimum level of the diagnostic channel
    TREELOG_DEFAULT_LEVEL: Level given to a freshly created root logger
    TREELOG_ASYNC_BATCH_SIZE: Records drained per worker batch
    TREELOG_ASYNC_FLUSH_INTERVAL: Seconds before a partial batch is drained
    TREELOG_ASYNC_MAX_QUEUE_SIZE: Capacity of the async queue
    TREELOG_ASYNC_OVERFLOW_STRATEGY: ``drop_oldest`` or ``drop_newest``
    TREELOG_FLUSH_TIMEOUT: Default timeout for ``flush()`` and shutdown
    TREELOG_LIVE_LEVEL_CHECK_INTERVAL: Log calls between live-level checks

Example:
    >>> from treelog.core.config.settings import Settings
    >>> settings = Settings(ASYNC_BATCH_SIZE=10)
    >>> settings.ASYNC_BATCH_SIZE
    10
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_VALID_LEVEL_NAMES = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
_VALID_OVERFLOW_STRATEGIES = ["drop_oldest", "drop_newest"]


class Settings(BaseSettings):
    """
    Library settings with environment variable support.

    Attributes:
        DEBUG: Emit the step-by-step dispatch trace on the diagnostic channel
        DIAGNOSTICS_LEVEL: Minimum level for diagnostic lines
        DEFAULT_LEVEL: Level name used when the root logger is first created

        ASYNC_BATCH_SIZE: Number of records the worker drains at once
        ASYNC_FLUSH_INTERVAL: Seconds after which a partial batch is drained
        ASYNC_MAX_QUEUE_SIZE: Maximum number of queued records
        ASYNC_OVERFLOW_STRATEGY: Policy applied when the queue is full
        FLUSH_TIMEOUT: Seconds ``flush()`` waits when no timeout is given

        LIVE_LEVEL_CHECK_INTERVAL: Default number of log calls between
            environment checks for the live level feature
    """

    # Diagnostics
    DEBUG: bool = False
    DIAGNOSTICS_LEVEL: str = "WARNING"
    DEFAULT_LEVEL: str = "WARNING"

    # Async writer defaults
    ASYNC_BATCH_SIZE: int = 50
    ASYNC_FLUSH_INTERVAL: float = 1.0
    ASYNC_MAX_QUEUE_SIZE: int = 10000
    ASYNC_OVERFLOW_STRATEGY: str = "drop_oldest"
    FLUSH_TIMEOUT: float = 5.0

    # Live level
    LIVE_LEVEL_CHECK_INTERVAL: int = 100

    @field_validator("DIAGNOSTICS_LEVEL", "DEFAULT_LEVEL")
    @classmethod
    def validate_level_name(cls, v: str) -> str:
        """
        Validate that a level setting names a builtin level.

        Custom levels are registered at runtime and cannot be referenced
        from the environment defaults.

        Raises:
            ValueError: If the level is not a builtin level name
        """
        if v.upper() not in _VALID_LEVEL_NAMES:
            raise ValueError(f"level must be one of: {_VALID_LEVEL_NAMES}")
        return v.upper()

    @field_validator("ASYNC_OVERFLOW_STRATEGY")
    @classmethod
    def validate_overflow_strategy(cls, v: str) -> str:
        """Validate the overflow strategy name."""
        if v.lower() not in _VALID_OVERFLOW_STRATEGIES:
            raise ValueError(
                f"ASYNC_OVERFLOW_STRATEGY must be one of: {_VALID_OVERFLOW_STRATEGIES}"
            )
        return v.lower()

    @field_validator("ASYNC_BATCH_SIZE", "ASYNC_MAX_QUEUE_SIZE")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Sizes must be at least one."""
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    model_config = SettingsConfigDict(
        env_prefix="TREELOG_",
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


def get_settings() -> Settings:
    """Get a freshly loaded settings instance"""
    return Settings()


settings = Settings()
