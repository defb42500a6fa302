"""
Unit tests for the pipeline processor
"""

from unittest.mock import MagicMock

import pytest

from treelog.core import levels
from treelog.dispatch.record import create_log_record
from treelog.pipelines.base import Pipeline
from treelog.pipelines.processor import pipeline_accepts, run_pipeline


def _owner(name="app", level=levels.INFO, propagate=True):
    owner = MagicMock()
    owner.name = name
    owner.level = level
    owner.propagate = propagate
    return owner


@pytest.fixture
def record():
    return create_log_record("app.db", levels.WARNING, "disk at %d%%", (91,))


class TestRunPipeline:
    """Transform, present, output"""

    def test_noop_round_trip(self, record, capture):
        pipeline = Pipeline(transformers=["noop", "noop"], presenter="message", outputs=[capture])

        result = run_pipeline(record, pipeline, _owner())

        assert result.presented_message == record.message == "disk at 91%"
        assert capture.messages == ["disk at 91%"]

    def test_owner_fields_on_working_copy(self, record, capture):
        pipeline = Pipeline(level="warning", outputs=[capture])

        run_pipeline(record, pipeline, _owner("app", levels.INFO, False))

        seen = capture.records[0]
        assert seen.logger_name == "app"
        assert seen.source_logger_name == "app.db"
        assert seen.logger_level == levels.INFO
        assert seen.logger_propagate is False
        assert seen.pipeline_level == levels.WARNING
        assert record.logger_name == "app.db"

    def test_pipeline_level_filters(self, record, capture):
        pipeline = Pipeline(level="error", outputs=[capture])

        assert run_pipeline(record, pipeline, _owner()) is None
        assert len(capture) == 0

    def test_pipeline_accepts(self, record):
        assert pipeline_accepts(Pipeline(), record)
        assert pipeline_accepts(Pipeline(level="warning"), record)
        assert not pipeline_accepts(Pipeline(level="critical"), record)

    def test_transformers_run_in_order(self, record, capture):
        def first(rec, config):
            return rec.evolve(extra={**rec.extra, "order": ["first"]})

        def second(rec, config):
            return rec.evolve(extra={**rec.extra, "order": rec.extra["order"] + ["second"]})

        run_pipeline(record, Pipeline(transformers=[first, second], outputs=[capture]), _owner())

        assert capture.records[0].extra["order"] == ["first", "second"]

    def test_transformer_returning_none_keeps_record(self, record, capture):
        run_pipeline(record, Pipeline(transformers=[lambda rec, config: None], outputs=[capture]), _owner())
        assert capture.messages == ["disk at 91%"]

    def test_presenter_with_config(self, record, capture):
        def bracket(rec, config):
            return config["left"] + rec.message + config["right"]

        pipeline = Pipeline(presenter=(bracket, {"left": "<", "right": ">"}), outputs=[capture])
        run_pipeline(record, pipeline, _owner())

        assert capture.messages == ["<disk at 91%>"]


class TestErrorIsolation:
    """Failures are reported and contained"""

    def test_transformer_failure_is_pipeline_fatal(self, record, capture, capsys):
        def broken(rec, config):
            raise ValueError("bad transform")

        later = MagicMock(side_effect=lambda rec, config: rec)
        pipeline = Pipeline(transformers=[broken, later], outputs=[capture])

        assert run_pipeline(record, pipeline, _owner()) is None

        later.assert_not_called()
        assert len(capture) == 0
        err = capsys.readouterr().err
        assert "TRANSFORMER_FAILED" in err
        assert "stage='transformer'" in err

    def test_transformer_bad_result(self, record, capture, capsys):
        pipeline = Pipeline(transformers=[lambda rec, config: "not a record"], outputs=[capture])

        assert run_pipeline(record, pipeline, _owner()) is None
        assert "TRANSFORMER_BAD_RESULT" in capsys.readouterr().err

    def test_presenter_failure_is_pipeline_fatal(self, record, capture, capsys):
        def broken(rec, config):
            raise KeyError("missing")

        assert run_pipeline(record, Pipeline(presenter=broken, outputs=[capture]), _owner()) is None
        assert len(capture) == 0
        assert "PRESENTER_FAILED" in capsys.readouterr().err

    def test_presenter_must_return_string(self, record, capture, capsys):
        pipeline = Pipeline(presenter=lambda rec, config: 42, outputs=[capture])

        assert run_pipeline(record, pipeline, _owner()) is None
        assert "PRESENTER_BAD_RESULT" in capsys.readouterr().err

    def test_output_failure_is_isolated(self, record, make_capture, capsys):
        before, after = make_capture(), make_capture()

        def broken(rec, config):
            raise OSError("disk full")

        pipeline = Pipeline(outputs=[before, broken, after])
        result = run_pipeline(record, pipeline, _owner())

        assert result is not None
        assert len(before) == 1
        assert len(after) == 1
        err = capsys.readouterr().err
        assert "OUTPUT_FAILED" in err
        assert "disk full" in err

    def test_no_outputs_is_legal(self, record):
        result = run_pipeline(record, Pipeline(), _owner())
        assert result.presented_message == "disk at 91%"
