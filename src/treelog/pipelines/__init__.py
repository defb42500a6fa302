"""
treelog pipelines - transform, present, output.

Importing this package registers the builtin components so configuration
tables can refer to them by name (``"console"``, ``"text"``, ``"json"``,
``"color"``, ``"message"``, ``"noop"``, ``"static_fields"``).
"""

from .base import (
    Component,
    ComponentRegistry,
    Pipeline,
    normalize_component,
    register_component,
)
from . import outputs, presenters, transformers  # noqa: F401  (registration)
from .processor import run_pipeline

__all__ = [
    "Component",
    "ComponentRegistry",
    "Pipeline",
    "normalize_component",
    "register_component",
    "run_pipeline",
]
