"""
Pytest configuration and fixtures for treelog tests
"""

import io
import threading
from typing import Any, Dict, List

import pytest

import treelog
from treelog.dispatch.record import LogRecord


class CapturingOutput:
    """Output component recording every presented record it receives."""

    def __init__(self):
        self.records: List[LogRecord] = []
        self.configs: List[Dict[str, Any]] = []
        self.lock = threading.Lock()
        self.received = threading.Event()

    def __call__(self, record: LogRecord, config: Dict[str, Any]) -> None:
        with self.lock:
            self.records.append(record)
            self.configs.append(config)
        self.received.set()

    @property
    def messages(self) -> List[str]:
        with self.lock:
            return [record.message for record in self.records]

    def __len__(self) -> int:
        with self.lock:
            return len(self.records)


@pytest.fixture(autouse=True)
def reset_treelog():
    """Start and finish every test from a pristine library state"""
    treelog.reset_config()
    yield
    treelog.reset_config()


@pytest.fixture
def capture() -> CapturingOutput:
    """A fresh capturing output"""
    return CapturingOutput()


@pytest.fixture
def make_capture():
    """Factory for several independent capturing outputs"""
    return CapturingOutput


@pytest.fixture
def stream() -> io.StringIO:
    """In-memory text stream for console outputs"""
    return io.StringIO()


@pytest.fixture
def quiet_root():
    """Root at WARNING with no pipelines, so only the loggers under test write"""
    treelog.config(level="warning", pipelines=[])
    return treelog.root()
