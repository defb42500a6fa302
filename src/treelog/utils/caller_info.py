"""
Caller introspection.

Finds the file, line and module of the code that made a logging call, so
records carry ``filename``/``lineno`` and ``treelog.logger()`` without a name
can default to the caller's module.
"""

import os
import sys
from typing import Optional, Tuple

ANONYMOUS = "anonymous"


def module_name_for(module: Optional[str], filename: Optional[str]) -> str:
    """
    Derive a logger name from a module's ``__name__`` and file.

    ``__main__`` becomes the script's file stem; a leading underscore is
    stripped since user logger names may not start with one.
    """
    name = module or ""
    if name == "__main__":
        if not filename:
            return ANONYMOUS
        name = os.path.splitext(os.path.basename(filename))[0]
    name = name.lstrip("_")
    if not name or any(not part for part in name.split(".")):
        return ANONYMOUS
    return name


def get_caller_info(depth: int = 2) -> Tuple[str, int, str]:
    """
    Inspect the frame ``depth`` levels above this function.

    Args:
        depth: 1 is the direct caller of ``get_caller_info``

    Returns:
        Tuple of (filename, lineno, module_name); ("unknown", 0, "anonymous")
        when the stack is not that deep
    """
    try:
        frame = sys._getframe(depth)
    except ValueError:
        return "unknown", 0, ANONYMOUS
    filename = frame.f_code.co_filename
    module = frame.f_globals.get("__name__")
    return filename, frame.f_lineno, module_name_for(module, filename)
