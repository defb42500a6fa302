"""
Command line verbosity.

Maps flags found on the command line to a root level, so applications get
``-v``/``-vv``/``--quiet`` handling without writing it themselves.

Recognised Forms:
    --flag          Looked up in the mapping (``--verbose``)
    --flag=LEVEL    LEVEL is used directly when it names a level
    -vvv            Looked up in the mapping as ``vvv``
    -q              Any other single-dash flag, looked up in the mapping

When several flags match, the last one wins.
"""

import sys
from typing import Any, Dict, List, Optional

from treelog.core import levels
from treelog.core.exceptions.custom_exceptions import ConfigurationError, UnknownLevel

DEFAULT_MAPPING: Dict[str, str] = {
    "v": "warning",
    "vv": "info",
    "vvv": "debug",
    "verbose": "info",
    "quiet": "error",
    "silent": "critical",
}

_config: Optional[Dict[str, Any]] = None


def validate_mapping(mapping: Dict[str, str]) -> None:
    for flag, level_name in mapping.items():
        try:
            levels.value_of(level_name)
        except UnknownLevel as e:
            raise ConfigurationError(
                f"Unknown level '{level_name}' for command line flag '{flag}'",
                error_code="CONFIG_INVALID_VALUE",
                details={"flag": flag, "level": level_name},
            ) from e


def _level_or_none(name: str) -> Optional[int]:
    try:
        return levels.value_of(name)
    except UnknownLevel:
        return None


def detect_verbosity_from_cli(
    mapping: Optional[Dict[str, str]] = None, argv: Optional[List[str]] = None
) -> Optional[int]:
    """
    Scan arguments for verbosity flags.

    Args:
        mapping: Flag (without dashes) to level name; defaults to DEFAULT_MAPPING
        argv: Arguments to scan; defaults to ``sys.argv[1:]``

    Returns:
        The level of the last matching flag, or None
    """
    mapping = DEFAULT_MAPPING if mapping is None else mapping
    args = sys.argv[1:] if argv is None else argv
    detected: Optional[int] = None

    for arg in args:
        if not isinstance(arg, str) or arg in ("-", "--"):
            continue
        if arg.startswith("--"):
            flag = arg[2:]
            if "=" in flag:
                _, value = flag.split("=", 1)
                level = _level_or_none(value) if value else None
            else:
                level = _level_or_none(mapping[flag]) if flag in mapping else None
        elif arg.startswith("-"):
            flag = arg[1:]
            level = _level_or_none(mapping[flag]) if flag in mapping else None
        else:
            continue
        if level is not None:
            detected = level

    return detected


def configure(mapping: Optional[Dict[str, str]] = None, auto_detect: bool = True) -> Optional[int]:
    """
    Store the verbosity configuration and detect the level if requested.

    Returns:
        The detected level, or None when nothing matched or auto_detect is off
    """
    global _config
    effective = dict(DEFAULT_MAPPING if mapping is None else mapping)
    validate_mapping(effective)
    _config = {"mapping": effective, "auto_detect": auto_detect}
    if not auto_detect:
        return None
    return detect_verbosity_from_cli(effective)


def get_config() -> Optional[Dict[str, Any]]:
    if _config is None:
        return None
    return {"mapping": dict(_config["mapping"]), "auto_detect": _config["auto_detect"]}


def reset() -> None:
    global _config
    _config = None
