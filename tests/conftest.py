"""
Shared fixtures for the varexport test suite.
"""

from datetime import datetime
from unittest.mock import Mock

import pytest

from varexport import FailureSink, VariableRegistry


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")


class FakeClock:
    """Monotonic clock whose waits advance simulated time instantly."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.waits = []

    def monotonic(self) -> float:
        return self.now

    def wait(self, timeout: float) -> bool:
        self.waits.append(timeout)
        self.now += timeout
        return False


class RecordingSink(FailureSink):
    def __init__(self):
        self.failures = []

    def record_failure(self, result):
        self.failures.append(result)


@pytest.fixture
def registry():
    return VariableRegistry()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def transport():
    """Transport double that records every send."""
    return Mock(name="transport")


@pytest.fixture
def fixed_time():
    return datetime(2006, 1, 2, 15, 4, 5)
