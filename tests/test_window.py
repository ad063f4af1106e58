"""Frame timing of the desktop window (no display needed)."""

import random

import pytest

from stackblock.game.driver import GameLoopDriver
from stackblock.simulator.window import SimulatorWindow


class StubClock:
    """Stands in for pygame.time.Clock after a long blocking wait."""

    def __init__(self, last_ms):
        self.last_ms = last_ms
        self.ticks = 0

    def tick(self, framerate=0):
        self.ticks += 1
        return self.last_ms

    def get_time(self):
        return self.last_ms


@pytest.fixture
def window(bus):
    driver = GameLoopDriver(None, event_bus=bus, rng=random.Random(4))
    return SimulatorWindow(driver)


def test_idle_wait_is_not_replayed(window):
    window._clock = StubClock(last_ms=5000)
    window.driver.start_or_reset("medium")
    block = window.driver.simulation.session.current_block
    x = block.x

    window._restart_clock()
    assert window._clock.ticks == 1
    window.driver.tick(window._next_delta())
    assert block.x == x


def test_frames_after_resume_use_clock(window):
    window._clock = StubClock(last_ms=16)
    window._restart_clock()
    assert window._next_delta() == 0.0
    assert window._next_delta() == 16


def test_no_clock_means_no_motion(window):
    assert window._next_delta() == 0.0
