"""
Unit tests for the propagation driver
"""

from unittest.mock import patch

import treelog
from treelog.core import levels
from treelog.dispatch.engine import dispatch, dispatch_log_event
from treelog.dispatch.record import create_log_record


def _pipeline(output, **extra):
    return {"outputs": [output], **extra}


class TestPropagation:
    """Walking records up the tree"""

    def test_app_scenario(self, make_capture):
        root_capture, app_capture = make_capture(), make_capture()
        treelog.config(level="warning", pipelines=[_pipeline(root_capture)])
        app = treelog.logger("app", {"level": "info", "pipelines": [_pipeline(app_capture)]})

        app.info("x")

        assert app_capture.messages == ["x"]
        assert app_capture.records[0].logger_name == "app"
        assert len(root_capture) == 0

    def test_three_level_chain(self, quiet_root, capture):
        treelog.logger("a", {"pipelines": [_pipeline(capture)]})
        treelog.logger("a.b")
        leaf = treelog.logger("a.b.c")

        leaf.error("boom")

        assert len(capture) == 1
        record = capture.records[0]
        assert record.source_logger_name == "a.b.c"
        assert record.logger_name == "a"

    def test_propagate_false_cuts_off_ancestors(self, make_capture):
        outer, middle, inner = make_capture(), make_capture(), make_capture()
        treelog.config(level="debug", pipelines=[_pipeline(outer)])
        treelog.logger("a", {"pipelines": [_pipeline(middle)]})
        treelog.logger("a.b", {"propagate": False, "pipelines": [_pipeline(inner)]})

        treelog.logger("a.b.c").critical("stop at a.b")

        assert len(inner) == 1
        assert len(middle) == 0
        assert len(outer) == 0

    def test_origin_filter_blocks_every_pipeline(self, make_capture):
        outer, inner = make_capture(), make_capture()
        treelog.config(level="debug", pipelines=[_pipeline(outer)])
        node = treelog.logger("svc", {"level": "error", "pipelines": [_pipeline(inner)]})

        with patch("treelog.loggers.base.dispatch_log_event") as mock_dispatch:
            node.warning("dropped")

        mock_dispatch.assert_not_called()
        assert len(outer) == 0
        assert len(inner) == 0

    def test_each_hop_filters_on_its_effective_level(self, make_capture):
        outer, inner = make_capture(), make_capture()
        treelog.config(level="error", pipelines=[_pipeline(outer)])
        node = treelog.logger("svc", {"level": "info", "pipelines": [_pipeline(inner)]})

        node.warning("only svc")
        node.error("both")

        assert inner.messages == ["only svc", "both"]
        assert outer.messages == ["both"]

    def test_hop_fields(self, make_capture):
        outer, inner = make_capture(), make_capture()
        treelog.config(level="debug", pipelines=[_pipeline(outer)])
        treelog.logger("svc", {"level": "info", "pipelines": [_pipeline(inner)]})

        treelog.logger("svc").info("m")

        inner_record, outer_record = inner.records[0], outer.records[0]
        assert inner_record.logger_name == "svc"
        assert inner_record.logger_level == levels.INFO
        assert inner_record.logger_propagate is True
        assert outer_record.logger_name == "_root"
        assert outer_record.logger_level == levels.DEBUG
        assert outer_record.logger_propagate is False
        assert outer_record.source_logger_name == "svc"

    def test_pipeline_changes_do_not_leak_to_ancestors(self, make_capture):
        outer, inner = make_capture(), make_capture()

        def tag(record, config):
            return record.evolve(extra={**record.extra, "tagged": True})

        treelog.config(level="debug", pipelines=[_pipeline(outer)])
        treelog.logger("svc", {"pipelines": [{"transformers": [tag], "outputs": [inner]}]})

        treelog.logger("svc").warning("m")

        assert inner.records[0].extra == {"tagged": True}
        assert outer.records[0].extra == {}

    def test_in_place_changes_do_not_leak_to_sibling_pipelines(self, quiet_root, make_capture):
        first, second = make_capture(), make_capture()

        def scribble(record, config):
            record.extra["scribbled"] = True
            record.context["user"] = "mallory"
            return record

        treelog.logger(
            "svc",
            {
                "pipelines": [
                    {"transformers": [scribble], "outputs": [first]},
                    {"outputs": [second]},
                ]
            },
        )

        treelog.logger("svc").warning("login", user="ada")

        assert first.records[0].extra == {"scribbled": True}
        assert first.records[0].context == {"user": "mallory"}
        assert second.records[0].extra == {}
        assert second.records[0].context == {"user": "ada"}


class TestDispatchNeverRaises:
    """Failures stay on the diagnostic channel"""

    def test_broken_node_is_reported(self, capsys):
        record = create_log_record("x", levels.ERROR, "m")

        class Broken:
            name = "x"

            def effective_level(self):
                raise RuntimeError("corrupt")

        dispatch(Broken(), record)

        assert "DISPATCH_FAILED" in capsys.readouterr().err

    def test_async_submit_failure_falls_back(self, quiet_root, capture):
        node = treelog.logger("svc", {"pipelines": [_pipeline(capture)]})
        record = create_log_record("svc", levels.ERROR, "m")

        with patch("treelog.dispatch.engine.async_manager") as mock_manager:
            mock_manager.is_enabled.return_value = True
            mock_manager.submit.side_effect = RuntimeError("queue gone")
            dispatch_log_event(node, record)

        assert capture.messages == ["m"]
