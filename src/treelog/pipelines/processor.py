"""
Pipeline processor.

Runs one pipeline of one logger for one record:

    1. Pipeline level filter (in addition to the logger's effective level,
       which the propagation driver has already checked)
    2. Working copy of the record scoped to this pipeline
    3. Transformers, in order
    4. Presenter; its result becomes ``message`` and ``presented_message``
    5. Outputs, in order, each isolated from the others

Error Isolation:
    - A transformer or presenter failure is pipeline-fatal: later stages and
      all outputs of this pipeline are skipped.
    - An output failure only affects that output; later outputs still run.
    - Nothing ever propagates out of ``run_pipeline``; failures are reported
      as one line each on the diagnostic channel.
"""

from typing import Any, Optional

from treelog.core import levels
from treelog.core.exceptions.custom_exceptions import OutputError, PipelineStageError
from treelog.core.logging.logger import get_logger
from treelog.dispatch.record import LogRecord
from treelog.pipelines.base import Component, Pipeline

logger = get_logger(__name__)


def _report(error: Exception) -> None:
    details = getattr(error, "details", {})
    logger.error(str(error), error_code=getattr(error, "error_code", None), **details)


def pipeline_accepts(pipeline: Pipeline, record: LogRecord) -> bool:
    """True when the pipeline's own threshold lets the record through."""
    if pipeline.level == levels.NOTSET:
        return True
    return record.level_no >= pipeline.level


def _apply_transformer(
    record: LogRecord, transformer: Component, index: int, owner_name: str
) -> LogRecord:
    try:
        result = transformer(record)
    except Exception as e:
        raise PipelineStageError(
            f"Transformer '{transformer.name}' failed: {e!r}",
            error_code="TRANSFORMER_FAILED",
            details={
                "stage": "transformer",
                "index": index,
                "logger_name": owner_name,
                "error": repr(e),
            },
        ) from e
    if result is None:
        return record
    if not isinstance(result, LogRecord):
        raise PipelineStageError(
            f"Transformer '{transformer.name}' returned "
            f"{type(result).__name__}, expected a LogRecord",
            error_code="TRANSFORMER_BAD_RESULT",
            details={"stage": "transformer", "index": index, "logger_name": owner_name},
        )
    return result


def _apply_presenter(record: LogRecord, presenter: Component, owner_name: str) -> str:
    try:
        presented = presenter(record)
    except Exception as e:
        raise PipelineStageError(
            f"Presenter '{presenter.name}' failed: {e!r}",
            error_code="PRESENTER_FAILED",
            details={"stage": "presenter", "logger_name": owner_name, "error": repr(e)},
        ) from e
    if not isinstance(presented, str):
        raise PipelineStageError(
            f"Presenter '{presenter.name}' returned "
            f"{type(presented).__name__}, expected str",
            error_code="PRESENTER_BAD_RESULT",
            details={"stage": "presenter", "logger_name": owner_name},
        )
    return presented


def run_pipeline(
    record: LogRecord, pipeline: Pipeline, owning_node: Any
) -> Optional[LogRecord]:
    """
    Process a record through one pipeline.

    Args:
        record: The record as seen at the owning node's hop
        pipeline: The pipeline to run
        owning_node: Logger owning the pipeline

    Returns:
        The final working record when the outputs were invoked; None when the
        pipeline filtered the record out or a transformer/presenter failed.
    """
    owner_name = owning_node.name
    if not pipeline_accepts(pipeline, record):
        logger.debug(
            "pipeline filtered",
            logger_name=owner_name,
            pipeline_level=pipeline.level,
            record_level=record.level_no,
        )
        return None

    working = record.copy().evolve(
        logger_name=owner_name,
        logger_level=owning_node.level,
        logger_propagate=owning_node.propagate,
        pipeline_level=pipeline.level,
    )

    try:
        for index, transformer in enumerate(pipeline.transformers):
            working = _apply_transformer(working, transformer, index, owner_name)
        presented = _apply_presenter(working, pipeline.presenter, owner_name)
    except PipelineStageError as e:
        _report(e)
        return None

    working = working.evolve(message=presented, presented_message=presented)

    for index, output in enumerate(pipeline.outputs):
        try:
            output(working)
        except Exception as e:
            _report(
                OutputError(
                    f"Output '{output.name}' failed: {e!r}",
                    error_code="OUTPUT_FAILED",
                    details={
                        "stage": "output",
                        "index": index,
                        "logger_name": owner_name,
                        "error": repr(e),
                    },
                )
            )

    logger.debug("pipeline completed", logger_name=owner_name, outputs=len(pipeline.outputs))
    return working
