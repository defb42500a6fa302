"""
Level registry for treelog.

Levels are plain integers ordered by severity. The builtin set mirrors the
standard library values, adds ``NOTSET`` as the "defer to the parent" sentinel
and ``NONE`` as a level above everything (used to silence a logger).

Custom levels are named integers registered at runtime. Their names are
lowercase identifiers, because each custom level also becomes a logging
method on every logger (``logger.verbose("...")``); their display name is the
uppercase form.

Functions:
    register_custom(name, value): Add one custom level
    set_custom_levels(mapping): Replace all custom levels atomically
    value_of(name_or_number): Resolve a level to its integer value
    name_of(value): Resolve an integer to its display name
    get_all_levels(): Builtin and custom levels by display name

Example:
    >>> from treelog.core import levels
    >>> levels.register_custom("verbose", 15)
    >>> levels.value_of("VERBOSE")
    15
    >>> levels.name_of(15)
    'VERBOSE'
"""

import re
import threading
from typing import Dict, Mapping, Union

from treelog.core.exceptions.custom_exceptions import (
    ConfigurationError,
    DuplicateLevel,
    UnknownLevel,
)

NOTSET = 0
DEBUG = 10
INFO = 20
WARNING = 30
ERROR = 40
CRITICAL = 50
NONE = 100

UNKNOWN_LEVEL_NAME = "UNKNOWN_LEVEL"

BUILTIN_LEVELS: Dict[str, int] = {
    "NOTSET": NOTSET,
    "DEBUG": DEBUG,
    "INFO": INFO,
    "WARNING": WARNING,
    "ERROR": ERROR,
    "CRITICAL": CRITICAL,
    "NONE": NONE,
}

# Aliases accepted by value_of(); never returned by name_of()
_ALIASES: Dict[str, int] = {"WARN": WARNING, "FATAL": CRITICAL}

_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_]*$")

_lock = threading.RLock()
_custom_levels: Dict[str, int] = {}

LevelLike = Union[str, int]


def _validate_custom_name(name: str) -> None:
    if not isinstance(name, str) or not name:
        raise ConfigurationError(
            "Custom level name must be a non-empty string",
            error_code="LEVEL_INVALID_NAME",
            details={"name": name},
        )
    if name.startswith("_"):
        raise ConfigurationError(
            f"Level names starting with '_' are reserved: {name}",
            error_code="LEVEL_INVALID_NAME",
            details={"name": name},
        )
    if not _NAME_PATTERN.match(name):
        raise ConfigurationError(
            f"Level name must be a lowercase identifier: {name}",
            error_code="LEVEL_INVALID_NAME",
            details={"name": name},
        )


def _validate_custom_value(value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(
            f"Level value must be an integer, got {type(value).__name__}",
            error_code="LEVEL_INVALID_VALUE",
            details={"value": value},
        )
    if value < 0:
        raise ConfigurationError(
            f"Level value must be positive: {value}",
            error_code="LEVEL_INVALID_VALUE",
            details={"value": value},
        )


def _check_collisions(name: str, value: int, existing: Mapping[str, int]) -> None:
    upper = name.upper()
    if upper in BUILTIN_LEVELS or upper in _ALIASES or name in existing:
        raise DuplicateLevel(
            f"Level name '{name}' is already registered",
            error_code="LEVEL_DUPLICATE_NAME",
            details={"name": name},
        )
    for builtin_name, builtin_value in BUILTIN_LEVELS.items():
        if value == builtin_value:
            raise DuplicateLevel(
                f"Level value {value} conflicts with builtin level {builtin_name}",
                error_code="LEVEL_DUPLICATE_VALUE",
                details={"name": name, "value": value, "conflict": builtin_name},
            )
    for custom_name, custom_value in existing.items():
        if value == custom_value:
            raise DuplicateLevel(
                f"Level value {value} conflicts with custom level "
                f"{custom_name.upper()}",
                error_code="LEVEL_DUPLICATE_VALUE",
                details={"name": name, "value": value, "conflict": custom_name},
            )


def register_custom(name: str, value: int) -> None:
    """
    Register a single custom level.

    Args:
        name: Lowercase identifier, also used as the logger method name
        value: Integer severity distinct from every registered level

    Raises:
        ConfigurationError: If the name or value is malformed
        DuplicateLevel: If the name or value is already taken
    """
    _validate_custom_name(name)
    _validate_custom_value(value)
    with _lock:
        _check_collisions(name, value, _custom_levels)
        _custom_levels[name] = value


def set_custom_levels(mapping: Mapping[str, int]) -> None:
    """
    Replace every custom level with the given mapping.

    The whole mapping is validated before anything changes, so a bad entry
    leaves the previous custom levels in place.
    """
    if not isinstance(mapping, Mapping):
        raise ConfigurationError(
            "Custom levels must be a mapping of name to value",
            error_code="LEVEL_INVALID_MAPPING",
        )
    staged: Dict[str, int] = {}
    for name, value in mapping.items():
        _validate_custom_name(name)
        _validate_custom_value(value)
        _check_collisions(name, value, staged)
        staged[name] = value
    with _lock:
        _custom_levels.clear()
        _custom_levels.update(staged)


def reset_custom_levels() -> None:
    """Drop every custom level (test isolation)."""
    with _lock:
        _custom_levels.clear()


def get_custom_levels() -> Dict[str, int]:
    """Copy of the custom levels keyed by their lowercase name."""
    with _lock:
        return dict(_custom_levels)


def get_all_levels() -> Dict[str, int]:
    """Builtin and custom levels keyed by display (uppercase) name."""
    all_levels = dict(BUILTIN_LEVELS)
    with _lock:
        for name, value in _custom_levels.items():
            all_levels[name.upper()] = value
    return all_levels


def is_custom_level(name: str) -> bool:
    if not isinstance(name, str):
        return False
    with _lock:
        return name.lower() in _custom_levels


def get_custom_level_value(name: str) -> int:
    """
    Value of a custom level by name.

    Raises:
        UnknownLevel: If no custom level has that name
    """
    with _lock:
        try:
            return _custom_levels[name.lower()]
        except KeyError:
            raise UnknownLevel(
                f"Unknown custom level '{name}'",
                error_code="LEVEL_UNKNOWN",
                details={"level": name},
            ) from None


def value_of(level: LevelLike) -> int:
    """
    Resolve a level name or number to its canonical integer.

    Names are matched case-insensitively against builtin levels, the
    ``WARN``/``FATAL`` aliases and custom levels. Numbers must be a
    registered value. Numeric strings (``"20"``) are accepted as numbers.

    Raises:
        UnknownLevel: If the level cannot be resolved
    """
    if isinstance(level, bool):
        raise UnknownLevel(
            f"Unknown level {level!r}",
            error_code="LEVEL_UNKNOWN",
            details={"level": level},
        )
    if isinstance(level, int):
        if level in BUILTIN_LEVELS.values():
            return level
        with _lock:
            if level in _custom_levels.values():
                return level
        raise UnknownLevel(
            f"Unknown level value {level}",
            error_code="LEVEL_UNKNOWN",
            details={"level": level},
        )
    if isinstance(level, str):
        key = level.strip()
        if key.lstrip("-").isdigit():
            return value_of(int(key))
        upper = key.upper()
        if upper in BUILTIN_LEVELS:
            return BUILTIN_LEVELS[upper]
        if upper in _ALIASES:
            return _ALIASES[upper]
        with _lock:
            if key.lower() in _custom_levels:
                return _custom_levels[key.lower()]
    raise UnknownLevel(
        f"Unknown level {level!r}",
        error_code="LEVEL_UNKNOWN",
        details={"level": level},
    )


def name_of(value: int) -> str:
    """
    Display name of a level value, ``"UNKNOWN_LEVEL"`` when unregistered.

    Used on best-effort formatting paths, so it never raises.
    """
    for name, builtin_value in BUILTIN_LEVELS.items():
        if builtin_value == value:
            return name
    with _lock:
        for name, custom_value in _custom_levels.items():
            if custom_value == value:
                return name.upper()
    return UNKNOWN_LEVEL_NAME
