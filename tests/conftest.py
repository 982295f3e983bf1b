"""
Pytest Configuration and Shared Fixtures

This file contains pytest configuration and fixtures that are available
to all test modules.
"""

import pytest

from src.common.types import Rect
from src.vin.types import GuideRegion, TextObservation


class FakeTimer:
    """Stand-in for threading.Timer that only fires when told to."""

    def __init__(self, interval, callback):
        self.interval = interval
        self.callback = callback
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.callback()


class FakeTimerFactory:
    """Records every timer a session arms (alignment first, then timeout)."""

    def __init__(self):
        self.timers = []

    def __call__(self, interval, callback):
        timer = FakeTimer(interval, callback)
        self.timers.append(timer)
        return timer

    @property
    def alignment(self) -> FakeTimer:
        return self.timers[0]

    @property
    def timeout(self) -> FakeTimer:
        return self.timers[1]


@pytest.fixture
def timer_factory():
    """Fixture providing a manually driven timer factory."""
    return FakeTimerFactory()


@pytest.fixture
def guide_region():
    """Fixture providing a 1000x100 guide region at the origin."""
    return GuideRegion(rect=Rect(left=0, top=0, right=1000, bottom=100))


@pytest.fixture
def make_observation():
    """Fixture providing a factory for text observations.

    Observations default to a block well inside ``guide_region``.
    """

    def _make(text, left=100, top=20, right=900, bottom=60, order=0):
        return TextObservation(
            text=text,
            bounding_box=Rect(left=left, top=top, right=right, bottom=bottom),
            timestamp_order=order,
        )

    return _make
