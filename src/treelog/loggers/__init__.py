"""
treelog loggers - logger nodes and the process-wide registry.
"""

from .base import ROOT_NAME, Logger
from .registry import LoggerRegistry, canonical_name, parent_name_of, registry

__all__ = [
    "ROOT_NAME",
    "Logger",
    "LoggerRegistry",
    "canonical_name",
    "parent_name_of",
    "registry",
]
