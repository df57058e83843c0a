"""
Test Configuration
==================

Pytest fixtures and test configuration for CrowdWatch.
"""

import itertools

import pytest

from crowdwatch.engine import CrowdMonitor
from crowdwatch.models.geo import Coordinate


class StepClock:
    """Deterministic clock advancing by a fixed step per call."""
    
    def __init__(self, start: float = 1_770_500_000.0, step: float = 3.0) -> None:
        self._values = itertools.count(start, step)
        self.last: float = start
    
    def __call__(self) -> float:
        self.last = next(self._values)
        return self.last


@pytest.fixture
def clock():
    """Provide a step clock starting at a fixed instant."""
    return StepClock()


@pytest.fixture
def coordinate():
    """Provide a sample Coordinate (Bengaluru)."""
    return Coordinate(lat=12.9716, lng=77.5946)


@pytest.fixture
def monitor():
    """Provide a CrowdMonitor with default thresholds."""
    return CrowdMonitor()
