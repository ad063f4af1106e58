"""Shared fixtures."""

import random

import pytest

from stackblock.config.settings import GameConfig
from stackblock.core.events import Event, EventBus
from stackblock.game.ports import MemoryHighScoreStore
from stackblock.game.simulation import StackSimulation


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def recorded(bus):
    """Every event emitted on ``bus``, in order."""
    events: list[Event] = []
    bus.subscribe_all(events.append)
    return events


@pytest.fixture
def store():
    return MemoryHighScoreStore()


@pytest.fixture
def make_sim(bus, store, rng):
    def _make(**overrides):
        config = GameConfig(**overrides) if overrides else GameConfig()
        return StackSimulation(config, bus, store, rng)
    return _make


@pytest.fixture
def sim(make_sim):
    simulation = make_sim()
    simulation.reset("medium")
    return simulation
