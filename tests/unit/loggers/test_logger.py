"""
Unit tests for logger nodes
"""

import pytest

import treelog
from treelog.core import levels
from treelog.core.exceptions.custom_exceptions import (
    ConfigurationError,
    TreelogError,
    UnknownLevel,
)
from treelog.loggers.base import Logger
from treelog.pipelines.base import Pipeline


class TestEffectiveLevel:
    """Inheritance of levels along the tree"""

    def test_unset_inherits_from_parent(self):
        treelog.config(level="error")
        parent = treelog.logger("a")
        child = treelog.logger("a.b")

        assert child.level == levels.NOTSET
        assert child.effective_level() == parent.effective_level() == levels.ERROR

    def test_nearest_explicit_ancestor_wins(self):
        treelog.config(level="error")
        treelog.logger("a").set_level("info")
        treelog.logger("a.b.c.d")

        assert treelog.logger("a.b.c.d").effective_level() == levels.INFO
        assert treelog.logger("a.b").effective_level() == levels.INFO

    def test_own_level_wins(self):
        treelog.logger("a").set_level("info")
        node = treelog.logger("a.b")
        node.set_level("debug")
        assert node.effective_level() == levels.DEBUG

    def test_root_without_level_is_invariant_failure(self):
        root = Logger("_root", level=levels.NOTSET, propagate=False)
        with pytest.raises(TreelogError):
            root.effective_level()

    def test_is_enabled_for(self):
        node = treelog.logger("app")
        assert node.is_enabled_for("warning")
        assert not node.is_enabled_for(levels.INFO)


class TestApply:
    """In-place configuration changes"""

    def test_references_observe_changes(self):
        held = treelog.logger("app")
        treelog.logger("app", {"level": "debug", "propagate": False})

        assert held.level == levels.DEBUG
        assert held.propagate is False

    def test_partial_update_keeps_other_fields(self, capture):
        node = treelog.logger("app")
        node.add_pipeline({"outputs": [capture]})

        node.apply({"level": "info"})

        assert len(node.pipelines) == 1
        assert node.propagate is True

    def test_invalid_update_changes_nothing(self):
        node = treelog.logger("app")
        node.set_level("info")

        with pytest.raises(ConfigurationError):
            node.apply({"level": "debug", "propagate": "yes"})

        assert node.level == levels.INFO

    def test_unknown_level(self):
        with pytest.raises(UnknownLevel):
            treelog.logger("app").set_level("loud")

    def test_outputs_key_rejected(self, capture):
        with pytest.raises(ConfigurationError) as exc_info:
            treelog.logger("app").apply({"outputs": [capture]})
        assert "pipelines" in str(exc_info.value)

    def test_root_rejects_notset_and_propagation(self):
        root = treelog.root()
        with pytest.raises(ConfigurationError):
            root.set_level(levels.NOTSET)
        root.set_propagate(True)
        assert root.propagate is False

    def test_set_pipelines_normalizes(self, capture):
        node = treelog.logger("app")
        node.set_pipelines([{"level": "error", "outputs": [capture]}])

        assert isinstance(node.pipelines[0], Pipeline)
        assert node.pipelines[0].level == levels.ERROR

    def test_get_config(self, capture):
        node = treelog.logger("app.db", {"level": "info", "pipelines": [{"outputs": [capture]}]})

        config = node.get_config()

        assert config["name"] == "app.db"
        assert config["level"] == levels.INFO
        assert config["propagate"] is True
        assert config["parent_name"] == "app"
        assert config["pipelines"][0]["presenter"]["name"] == "message"

    def test_get_config_full_tree(self):
        node = treelog.logger("app.db")
        tree = node.get_config(full_tree=True)
        assert list(tree) == ["app.db", "app", "_root"]


class Unprintable:
    """Argument whose string conversion fails"""

    def __str__(self):
        raise RuntimeError("boom in __str__")


class TestLoggingMethods:
    """Logging methods and custom levels"""

    def test_methods_dispatch_at_their_level(self, quiet_root, capture):
        node = treelog.logger("app", {"level": "debug", "pipelines": [{"outputs": [capture]}]})

        node.debug("d")
        node.info("i")
        node.warning("w")
        node.warn("w2")
        node.error("e")
        node.critical("c")
        node.log("info", "l")

        assert [r.level_name for r in capture.records] == [
            "DEBUG",
            "INFO",
            "WARNING",
            "WARNING",
            "ERROR",
            "CRITICAL",
            "INFO",
        ]

    def test_custom_level_method(self, quiet_root, capture):
        treelog.set_levels({"verbose": 15})
        node = treelog.logger("app", {"level": "verbose", "pipelines": [{"outputs": [capture]}]})

        node.verbose("details %d", 3)
        node.debug("hidden")

        assert capture.messages == ["details 3"]
        assert capture.records[0].level_name == "VERBOSE"

    def test_unknown_attribute(self):
        with pytest.raises(AttributeError):
            treelog.logger("app").chatty("x")

    def test_log_with_unknown_level_raises(self):
        with pytest.raises(UnknownLevel):
            treelog.logger("app").log("loud", "x")

    def test_records_carry_caller_location(self, quiet_root, capture):
        node = treelog.logger("app", {"level": "info", "pipelines": [{"outputs": [capture]}]})
        node.info("here")

        assert capture.records[0].filename == __file__
        assert capture.records[0].lineno > 0

    def test_structured_context(self, quiet_root, capture):
        node = treelog.logger("app", {"level": "info", "pipelines": [{"outputs": [capture]}]})

        node.info({"user": "ada"}, "login from %s", "10.0.0.1")
        node.info("logout", user="ada")

        first, second = capture.records
        assert first.message == "login from 10.0.0.1"
        assert first.context == {"user": "ada"}
        assert second.context == {"user": "ada"}

    def test_unprintable_argument_does_not_raise(self, quiet_root, capture):
        node = treelog.logger("app", {"level": "info", "pipelines": [{"outputs": [capture]}]})

        node.info("value %s", Unprintable())

        assert capture.messages == ["value %s [FORMAT ERROR: boom in __str__]"]
