"""
Propagation driver.

Walks a record from the logger it was logged on up to the root:

    - At each node, every pipeline runs when the record's level is at or
      above that node's effective level.
    - The walk stops after the root, or after a node whose ``propagate`` is
      False.

Each hop sees a record stamped with that node's name, own level and
propagate flag; the pipelines of a hop only ever receive copies, so nothing a
pipeline does is visible to the next hop.

The origin's own filter is applied by the logger before the record exists,
so ``dispatch`` itself never has to decide whether to start.

Functions:
    dispatch(origin, record): Synchronous walk on the calling thread
    dispatch_log_event(origin, record): Route to the async writer when enabled
"""

from typing import Any

from treelog.core.exceptions.custom_exceptions import TreelogError
from treelog.core.logging.logger import get_logger
from treelog.dispatch.record import LogRecord
from treelog.pipelines.processor import run_pipeline
from treelog.queueing import manager as async_manager

logger = get_logger(__name__)


def dispatch(origin: Any, record: LogRecord) -> None:
    """
    Offer ``record`` to ``origin`` and its ancestors.

    Never raises; failures are reported on the diagnostic channel.
    """
    node = origin
    try:
        while node is not None:
            effective = node.effective_level()
            if record.level_no >= effective:
                hop = record.evolve(
                    logger_name=node.name,
                    logger_level=node.level,
                    logger_propagate=node.propagate,
                )
                for pipeline in list(node.pipelines):
                    run_pipeline(hop, pipeline, node)
            else:
                logger.debug(
                    "node filtered",
                    logger_name=node.name,
                    effective_level=effective,
                    record_level=record.level_no,
                )

            if node.is_root or not node.propagate:
                break
            node = node.parent
    except TreelogError as e:
        logger.error(
            str(e),
            error_code=e.error_code,
            stage="dispatch",
            logger_name=getattr(node, "name", None),
        )
    except Exception as e:
        logger.error(
            "Dispatch failed",
            error_code="DISPATCH_FAILED",
            stage="dispatch",
            logger_name=getattr(node, "name", None),
            error=repr(e),
        )


def dispatch_log_event(origin: Any, record: LogRecord) -> None:
    """Dispatch through the async writer when it is enabled, else inline."""
    try:
        if async_manager.is_enabled():
            async_manager.submit(record, origin, dispatch)
            return
    except Exception as e:
        logger.error(
            "Async submission failed, dispatching synchronously",
            error_code="ASYNC_SUBMIT_FAILED",
            stage="async",
            logger_name=record.source_logger_name,
            error=repr(e),
        )
    dispatch(origin, record)
