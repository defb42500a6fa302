"""
Unit tests for the pipeline model and component normalization
"""

import pytest

from treelog.core import levels
from treelog.core.exceptions.custom_exceptions import ConfigurationError
from treelog.pipelines.base import (
    OUTPUT,
    PRESENTER,
    TRANSFORMER,
    Component,
    ComponentRegistry,
    Pipeline,
    normalize_component,
    register_component,
)
from treelog.pipelines.outputs import console_output
from treelog.pipelines.presenters import json_presenter


def shout(record, config):
    return record.message.upper()


class TestNormalizeComponent:
    """Every accepted registration shape becomes a Component"""

    def test_bare_callable(self):
        component = normalize_component(shout, PRESENTER)
        assert component == Component(shout, {}, "shout")

    def test_callable_with_config(self):
        component = normalize_component((shout, {"suffix": "!"}), PRESENTER)
        assert component.func is shout
        assert component.config == {"suffix": "!"}

    def test_func_table(self):
        component = normalize_component({"func": shout, "suffix": "!"}, PRESENTER)
        assert component.func is shout
        assert component.config == {"suffix": "!"}

    def test_builtin_name(self):
        component = normalize_component("console", OUTPUT)
        assert component.func is console_output
        assert component.name == "console"

    def test_name_with_config(self):
        component = normalize_component(("json", {"pretty": True}), PRESENTER)
        assert component.func is json_presenter
        assert component.config == {"pretty": True}

    def test_type_table(self):
        component = normalize_component({"type": "json", "pretty": True}, PRESENTER)
        assert component.func is json_presenter
        assert component.config == {"pretty": True}

    def test_component_passes_through(self):
        component = Component(shout, {}, "shout")
        assert normalize_component(component, PRESENTER) is component

    def test_unknown_name(self):
        with pytest.raises(ConfigurationError):
            normalize_component("carrier_pigeon", OUTPUT)

    def test_names_are_per_kind(self):
        with pytest.raises(ConfigurationError):
            normalize_component("console", PRESENTER)

    @pytest.mark.parametrize("spec", [42, {"prefix": ">"}, {"func": "not callable"}])
    def test_invalid_shapes(self, spec):
        with pytest.raises(ConfigurationError):
            normalize_component(spec, TRANSFORMER)

    def test_component_call(self):
        seen = []
        component = normalize_component((lambda record, config: seen.append((record, config)), {"k": 1}), OUTPUT)
        component("rec")
        assert seen == [("rec", {"k": 1})]


class TestComponentRegistry:
    """User registration of named components"""

    def test_register_component_decorator(self):
        @register_component(OUTPUT, "test_null_output")
        def null_output(record, config):
            return None

        assert ComponentRegistry.get(OUTPUT, "test_null_output") is null_output
        assert "test_null_output" in ComponentRegistry.list(OUTPUT)

    def test_builtins_listed(self):
        assert {"message", "text", "json", "color"} <= set(ComponentRegistry.list(PRESENTER))
        assert "noop" in ComponentRegistry.list(TRANSFORMER)
        assert "console" in ComponentRegistry.list(OUTPUT)


class TestPipeline:
    """Pipeline construction"""

    def test_defaults(self):
        pipeline = Pipeline()
        assert pipeline.level == levels.NOTSET
        assert pipeline.transformers == []
        assert pipeline.presenter.name == "message"
        assert pipeline.outputs == []

    def test_level_names_resolved(self):
        assert Pipeline(level="error").level == levels.ERROR
        assert Pipeline(level=None).level == levels.NOTSET

    def test_from_config(self):
        pipeline = Pipeline.from_config(
            {"level": "info", "transformers": ["noop"], "presenter": "text", "outputs": ["console"]}
        )
        assert pipeline.level == levels.INFO
        assert [t.name for t in pipeline.transformers] == ["noop"]
        assert pipeline.presenter.name == "text"
        assert [o.name for o in pipeline.outputs] == ["console"]

    def test_from_config_unknown_key(self):
        with pytest.raises(ConfigurationError):
            Pipeline.from_config({"formatter": "text"})

    def test_from_config_not_a_table(self):
        with pytest.raises(ConfigurationError):
            Pipeline.from_config(["console"])

    def test_to_dict(self):
        data = Pipeline(level="warning", outputs=[("console", {"stream": None})]).to_dict()
        assert data["level"] == levels.WARNING
        assert data["presenter"]["name"] == "message"
        assert data["outputs"][0]["name"] == "console"
