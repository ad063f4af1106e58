"""Game loop driver lifecycle and frame snapshots."""

import random

import pytest

from stackblock.core.events import EventType, commit_event, start_event
from stackblock.core.state import State
from stackblock.game.blocks import EntityKind
from stackblock.game.driver import FRAME_MS, GameLoopDriver, InputDebouncer
from stackblock.game.simulation import Placement


@pytest.fixture
def driver(bus, store):
    return GameLoopDriver(None, event_bus=bus, store=store, rng=random.Random(99))


def force_miss(driver):
    session = driver.simulation.session
    top = session.top_block
    session.current_block.x = top.x + top.width + 10
    return driver.commit()


def test_starts_in_menu_and_idle(driver):
    assert driver.state == State.MENU
    assert not driver.is_running
    assert driver.tick() is None
    snapshot = driver.snapshot()
    assert snapshot.state == State.MENU
    assert snapshot.blocks == ()


def test_start_begins_playing(driver):
    driver.start_or_reset("easy")
    assert driver.state == State.PLAYING
    assert driver.is_running
    snapshot = driver.tick()
    assert snapshot.state == State.PLAYING
    assert snapshot.difficulty == "easy"
    assert len(snapshot.blocks) == 1
    assert snapshot.current_block.kind == EntityKind.BLOCK


def test_tick_moves_block_by_frames(driver):
    driver.start_or_reset("easy")
    block = driver.simulation.session.current_block
    x = block.x
    driver.tick(FRAME_MS * 2)
    assert abs(block.x - x) == pytest.approx(2 * 2.5)


def test_long_stall_is_clamped(driver):
    driver.start_or_reset("easy")
    block = driver.simulation.session.current_block
    x = block.x
    driver.tick(10_000)
    assert abs(block.x - x) == pytest.approx(4 * 2.5)


def test_commit_ignored_outside_playing(driver):
    assert driver.commit() is None
    driver.start_or_reset("medium")
    force_miss(driver)
    assert driver.state == State.ENDING
    assert driver.commit() is None


def test_miss_runs_effects_then_returns_to_menu(driver, recorded):
    driver.start_or_reset("medium")
    result = force_miss(driver)
    assert result.placement == Placement.MISS
    assert driver.state == State.ENDING
    assert driver.is_running

    frames = 0
    while driver.tick() is not None:
        frames += 1
        assert frames < 500
    assert frames > 0
    assert driver.state == State.MENU
    assert not driver.is_running

    changes = [(e.data["from"], e.data["to"]) for e in recorded if e.type == EventType.STATE_CHANGED]
    assert changes == [("MENU", "PLAYING"), ("PLAYING", "ENDING"), ("ENDING", "MENU")]


def test_restart_during_ending(driver):
    driver.start_or_reset("medium")
    force_miss(driver)
    driver.start_or_reset("hard")
    assert driver.state == State.PLAYING
    assert driver.simulation.session.effects.is_empty
    assert len(driver.simulation.session.blocks) == 1


def test_input_events_drive_the_loop(driver, bus):
    bus.emit(start_event("hard"))
    assert driver.state == State.PLAYING
    assert driver.simulation.session.difficulty.value == "hard"

    session = driver.simulation.session
    session.current_block.x = session.top_block.x
    bus.emit(commit_event())
    assert session.score == 2
    assert len(session.blocks) == 2


def test_snapshot_reflects_session(driver):
    driver.start_or_reset("medium")
    session = driver.simulation.session
    session.current_block.x = session.top_block.x + 40
    driver.commit()
    snapshot = driver.tick()
    assert snapshot.score == 1
    assert snapshot.combo == 0
    assert len(snapshot.blocks) == 2
    assert len(snapshot.debris) == 1
    assert len(snapshot.particles) == 10
    assert snapshot.shake_offset != (0.0, 0.0)


def test_snapshot_culls_blocks_above_view(driver):
    driver.start_or_reset("medium")
    session = driver.simulation.session
    session.camera.camera_y = 1000
    assert driver.snapshot().blocks == ()


def test_snapshot_hides_block_after_game_over(driver):
    driver.start_or_reset("medium")
    force_miss(driver)
    assert driver.snapshot().current_block is None


class TestInputDebouncer:

    def test_collapses_duplicates(self):
        debouncer = InputDebouncer(window_ms=80)
        assert debouncer.accept(0)
        assert not debouncer.accept(50)
        assert debouncer.accept(80)
        assert not debouncer.accept(100)
        assert debouncer.accept(200)
