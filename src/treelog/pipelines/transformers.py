"""
Builtin transformers.

A transformer receives the pipeline's working record and returns the record
to hand to the next stage. Records are immutable; use ``record.evolve(...)``
to change fields or add entries to ``extra``.
"""

from typing import Any, Dict

from treelog.dispatch.record import LogRecord
from treelog.pipelines.base import TRANSFORMER, register_component


@register_component(TRANSFORMER, "noop")
def noop_transformer(record: LogRecord, config: Dict[str, Any]) -> LogRecord:
    return record


@register_component(TRANSFORMER, "static_fields")
def static_fields_transformer(record: LogRecord, config: Dict[str, Any]) -> LogRecord:
    """Add the configured ``fields`` mapping to the record's ``extra``."""
    fields = config.get("fields", {})
    if not fields:
        return record
    return record.evolve(extra={**record.extra, **fields})
