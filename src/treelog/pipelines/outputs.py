"""
Builtin outputs.

Outputs receive the presented record (``record.message`` holds the presenter
output) and the output's configuration. Exceptions are left to the pipeline
processor, which reports them and moves on to the next output.
"""

import sys
from typing import Any, Dict

from treelog.dispatch.record import LogRecord
from treelog.pipelines.base import OUTPUT, register_component


@register_component(OUTPUT, "console")
def console_output(record: LogRecord, config: Dict[str, Any]) -> None:
    """
    Write the presented message and a newline to a stream.

    Config:
        stream: File-like object, default ``sys.stderr`` (looked up per call)
    """
    stream = config.get("stream") or sys.stderr
    stream.write(record.message)
    stream.write("\n")
    stream.flush()
