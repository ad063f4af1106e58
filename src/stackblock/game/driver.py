"""
Game loop driver.

Sits between the host scheduler and the simulation:

    MENU --start--> PLAYING --miss--> ENDING --effects done--> MENU

The host calls ``tick(delta_ms)`` once per frame while ``is_running`` is
true. Once the game has ended and every effect has finished animating,
the driver suspends itself until the next ``start_or_reset()``.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union
import logging
import random

from stackblock.config.settings import GameConfig
from stackblock.core.events import Event, EventBus, EventType
from stackblock.core.state import State, StateMachine
from stackblock.game.blocks import Drawable
from stackblock.game.ports import HighScoreStore
from stackblock.game.simulation import Placement, PlacementResult, StackSimulation

logger = logging.getLogger(__name__)

FRAME_MS = 1000.0 / 60.0
MAX_FRAME_DT = 4.0  # Frames; long stalls are not replayed
CULL_MARGIN = 100.0


@dataclass(frozen=True)
class RenderSnapshot:
    """Read-only view of one frame for the renderer."""
    state: State
    field_width: float
    viewport_height: float
    camera_y: float
    shake_offset: Tuple[float, float]
    blocks: Tuple[Drawable, ...] = ()
    current_block: Optional[Drawable] = None
    debris: Tuple[Drawable, ...] = ()
    particles: Tuple[Drawable, ...] = ()
    texts: Tuple[Drawable, ...] = ()
    score: int = 0
    combo: int = 0
    high_score: int = 0
    environment_index: int = 0
    difficulty: str = "medium"


class InputDebouncer:
    """Collapses duplicate input events (key + mouse + touch) into one."""

    def __init__(self, window_ms: float = 80.0) -> None:
        self.window_ms = window_ms
        self._last_ms: Optional[float] = None

    def accept(self, now_ms: float) -> bool:
        if self._last_ms is not None and now_ms - self._last_ms < self.window_ms:
            return False
        self._last_ms = now_ms
        return True


class GameLoopDriver:
    """Owns the game session lifecycle and advances it each frame."""

    def __init__(
        self,
        config: Union[GameConfig, Dict[str, Any], None] = None,
        event_bus: Optional[EventBus] = None,
        store: Optional[HighScoreStore] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.event_bus = event_bus or EventBus()
        self.state_machine = StateMachine()
        self.simulation = StackSimulation(config, self.event_bus, store, rng)
        self._active = False
        self._shake: Tuple[float, float] = (0.0, 0.0)
        self._frame = 0

        self.state_machine.add_listener(self._on_state_changed)
        self.event_bus.subscribe(EventType.COMMIT, self._on_commit_event)
        self.event_bus.subscribe(EventType.START, self._on_start_event)

    @property
    def state(self) -> State:
        return self.state_machine.state

    @property
    def is_running(self) -> bool:
        """True while the host should keep scheduling frames."""
        return self._active

    @property
    def config(self) -> GameConfig:
        return self.simulation.config

    # Input commands

    def start_or_reset(self, difficulty: Any = "medium") -> None:
        """Start a new game, discarding any game in progress."""
        self.state_machine.transition(State.PLAYING)
        self.simulation.reset(difficulty)
        self._shake = (0.0, 0.0)
        self._active = True

    def commit(self) -> Optional[PlacementResult]:
        """Drop the moving block. Ignored outside PLAYING."""
        if self.state != State.PLAYING:
            logger.debug(f"Commit ignored in {self.state.name}")
            return None
        result = self.simulation.commit()
        if result is not None and result.placement == Placement.MISS:
            self.state_machine.transition(State.ENDING)
        return result

    def _on_commit_event(self, event: Event) -> None:
        self.commit()

    def _on_start_event(self, event: Event) -> None:
        self.start_or_reset(event.data.get("difficulty", "medium"))

    def _on_state_changed(self, old: State, new: State) -> None:
        self.event_bus.emit(Event(
            EventType.STATE_CHANGED,
            data={"from": old.name, "to": new.name},
            source="driver",
        ))

    # Frame

    def tick(self, delta_ms: float = FRAME_MS) -> Optional[RenderSnapshot]:
        """Advance one frame.

        Returns:
            The frame snapshot, or None while the loop is suspended.
        """
        session = self.simulation.session
        if not self._active or session is None:
            return None

        dt = min(max(delta_ms, 0.0) / FRAME_MS, MAX_FRAME_DT)
        cfg = self.config
        self._frame += 1

        session.camera.update(dt)
        self._shake = session.camera.shake_offset(dt)
        self.simulation.tick(dt)

        view_bottom = session.camera.camera_y + cfg.viewport_height + cfg.debris_cull_margin
        session.effects.advance_all(dt, view_bottom)

        if self.state == State.ENDING and session.effects.is_empty:
            self.state_machine.transition(State.MENU)
            self._active = False
            logger.info(f"Loop suspended after {self._frame} frames")

        return self.snapshot()

    def snapshot(self) -> RenderSnapshot:
        """Build the render view of the current session."""
        cfg = self.config
        sim = self.simulation
        session = sim.session
        if session is None:
            return RenderSnapshot(
                state=self.state,
                field_width=cfg.field_width,
                viewport_height=cfg.viewport_height,
                camera_y=0.0,
                shake_offset=(0.0, 0.0),
                high_score=sim.high_score,
            )

        camera_y = session.camera.camera_y
        top = camera_y - CULL_MARGIN
        bottom = camera_y + cfg.viewport_height + CULL_MARGIN
        visible = tuple(b.describe() for b in session.blocks if top < b.y < bottom)
        effects = session.effects.drawables()
        current = session.current_block

        return RenderSnapshot(
            state=self.state,
            field_width=cfg.field_width,
            viewport_height=cfg.viewport_height,
            camera_y=camera_y,
            shake_offset=self._shake,
            blocks=visible,
            current_block=current.describe() if current is not None and session.running else None,
            debris=tuple(effects["debris"]),
            particles=tuple(effects["particles"]),
            texts=tuple(effects["texts"]),
            score=session.score,
            combo=session.combo_count,
            high_score=sim.high_score,
            environment_index=session.environment_index,
            difficulty=session.difficulty.value,
        )
