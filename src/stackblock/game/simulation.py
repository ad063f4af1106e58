"""Stack simulation - placement rules, scoring, speed and power-ups.

The simulation is host-agnostic: no drawing, no audio, no clock. Each
frame the driver calls ``tick(dt)``; a player action calls ``commit()``.
Sound and persistence hear about placements through the EventBus and
the HighScoreStore.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union
import logging
import random

from pydantic import ValidationError

from stackblock.config.settings import GameConfig, SpeedPolicy, load_game_config
from stackblock.core.events import Event, EventBus, EventType
from stackblock.game.blocks import GOLD, GREEN, START_HUE, WHITE, Block, hsl_color, next_hue
from stackblock.game.camera import CameraController
from stackblock.game.effects import EffectsPool
from stackblock.game.ports import HighScoreStore, MemoryHighScoreStore

logger = logging.getLogger(__name__)

FOUNDATION_ROWS = 3
PERFECT_PARTICLES = 20
PLACE_PARTICLES = 10


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, value: Any) -> "Difficulty":
        """Accept an enum member or a name; anything else is MEDIUM."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        logger.warning(f"Unknown difficulty {value!r}, using medium")
        return cls.MEDIUM


class Placement(Enum):
    PERFECT = "perfect"
    TRIMMED = "trimmed"
    MISS = "miss"


@dataclass(frozen=True)
class PlacementResult:
    """Outcome of one commit."""
    placement: Placement
    overhang: float
    overlap: float
    points: int
    score: int
    combo: int


@dataclass
class GameSession:
    """All mutable state of one game, from reset to the next reset."""
    difficulty: Difficulty
    initial_speed: float
    current_speed: float
    next_power_up_target: int
    effects: EffectsPool
    camera: CameraController
    blocks: List[Block] = field(default_factory=list)
    current_block: Optional[Block] = None
    score: int = 0
    combo_count: int = 0
    blocks_since_last_power_up: int = 0
    running: bool = False
    hue: int = START_HUE
    environment_index: int = 0

    @property
    def top_block(self) -> Block:
        return self.blocks[-1]

    @property
    def height(self) -> int:
        """Blocks stacked on the foundation."""
        return max(0, len(self.blocks) - 1)


class StackSimulation:
    """Rules for placing blocks on the stack."""

    def __init__(
        self,
        config: Union[GameConfig, Dict[str, Any], None] = None,
        event_bus: Optional[EventBus] = None,
        store: Optional[HighScoreStore] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        if isinstance(config, GameConfig):
            self.config = config
        else:
            self.config = load_game_config(config)
        self.event_bus = event_bus or EventBus()
        self.store = store or MemoryHighScoreStore()
        self.rng = rng or random.Random()
        self.high_score = self.store.load_high_score()
        self.session: Optional[GameSession] = None

    @property
    def running(self) -> bool:
        return self.session is not None and self.session.running

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self, difficulty: Any = Difficulty.MEDIUM) -> GameSession:
        """Discard the current game and start a fresh one."""
        self.config = self._checked_config()
        cfg = self.config
        diff = Difficulty.parse(difficulty)
        settings = cfg.difficulties[diff.value]

        if self.session is not None:
            # Drop references so nothing from the old game leaks into the new one
            self.session.effects.clear()
            self.session.current_block = None

        session = GameSession(
            difficulty=diff,
            initial_speed=settings.base_speed,
            current_speed=settings.base_speed,
            next_power_up_target=self._roll_power_up_target(),
            effects=EffectsPool(rng=self.rng, block_height=cfg.block_height),
            camera=CameraController(lerp=cfg.camera_lerp, shake_decay=cfg.shake_decay, rng=self.rng),
        )

        width = cfg.field_width * settings.width_fraction
        session.blocks.append(Block(
            x=(cfg.field_width - width) / 2,
            y=cfg.field_height - cfg.block_height * FOUNDATION_ROWS,
            width=width,
            height=cfg.block_height,
            color=hsl_color(session.hue),
        ))

        self.session = session
        self.spawn_next()
        session.running = True

        logger.info(f"New game: difficulty={diff.value} speed={session.current_speed}")
        self._emit(EventType.GAME_STARTED, difficulty=diff.value)
        return session

    def _checked_config(self) -> GameConfig:
        # Fields can be assigned after construction without validation
        try:
            return GameConfig.model_validate(self.config.model_dump())
        except ValidationError as e:
            logger.warning(f"Invalid game config at reset, using defaults: {e.error_count()} error(s)")
            return GameConfig()

    def _roll_power_up_target(self) -> int:
        return self.rng.randint(self.config.power_up_min, self.config.power_up_max)

    # ------------------------------------------------------------------
    # Moving block
    # ------------------------------------------------------------------

    def spawn_next(self) -> Block:
        """Create the next moving block above the stack top."""
        s = self.session
        cfg = self.config
        s.hue = next_hue(s.hue)
        prev = s.top_block

        from_left = self.rng.random() < 0.5

        s.blocks_since_last_power_up += 1
        power_up = s.blocks_since_last_power_up >= s.next_power_up_target
        if power_up:
            s.blocks_since_last_power_up = 0
            s.next_power_up_target = self._roll_power_up_target()

        block = Block(
            x=-prev.width if from_left else cfg.field_width,
            y=prev.y - cfg.block_height,
            width=prev.width,
            height=cfg.block_height,
            color=GOLD if power_up else hsl_color(s.hue),
            velocity=min(s.current_speed, cfg.max_speed),
            direction=1 if from_left else -1,
            is_power_up=power_up,
        )
        s.current_block = block
        if power_up:
            logger.debug(f"Power-up block spawned, next in {s.next_power_up_target}")
        return block

    def tick(self, dt: float = 1.0) -> None:
        """Slide the moving block. Only runs while a game is live."""
        s = self.session
        if s is None or not s.running or s.current_block is None:
            return
        s.current_block.advance(dt, self.config.field_width)

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------

    def commit(self, position: Optional[float] = None) -> Optional[PlacementResult]:
        """Drop the moving block onto the stack.

        Args:
            position: Optional left edge to commit at instead of the
                block's current x.

        Returns:
            The placement outcome, or None when there was nothing to drop.
        """
        s = self.session
        if s is None or not s.running or s.current_block is None:
            logger.debug("Commit ignored: no active block")
            return None

        cfg = self.config
        prev = s.top_block
        curr = s.current_block
        if position is not None:
            curr.x = float(position)

        dist = curr.x - prev.x
        overhang = abs(dist)
        overlap = curr.width - overhang

        if overlap <= 0:
            self._game_over()
            return PlacementResult(Placement.MISS, overhang, overlap, 0, s.score, 0)

        cx = curr.center_x
        score_before = s.score

        if overhang < cfg.perfect_threshold:
            placement = Placement.PERFECT
            self._place_perfect(curr, prev, cx)
        else:
            placement = Placement.TRIMMED
            self._place_trimmed(curr, prev, dist, overhang, overlap)

        if curr.is_power_up:
            s.current_speed *= cfg.power_up_slowdown
            s.effects.spawn_floating_text(cx, curr.y - 60, "SLOW DOWN!", GOLD)
            curr.color = GOLD
            self._emit(EventType.POWER_UP, speed=s.current_speed)

        self._progress_speed(score_before)

        curr.velocity = 0.0
        s.blocks.append(curr)
        s.current_block = None
        s.camera.follow(curr.y, cfg.viewport_height, cfg.camera_target)

        result = PlacementResult(
            placement, overhang, curr.width, s.score - score_before, s.score, s.combo_count
        )
        logger.debug(
            f"{placement.value}: overhang={overhang:.1f} width={curr.width:.1f} "
            f"score={s.score} combo={s.combo_count} speed={s.current_speed:.2f}"
        )

        self.spawn_next()
        return result

    def _place_perfect(self, curr: Block, prev: Block, cx: float) -> None:
        s = self.session
        cfg = self.config
        curr.x = prev.x
        curr.width = prev.width
        s.combo_count += 1
        s.score += cfg.perfect_bonus + (s.combo_count if s.combo_count >= 2 else 0)

        s.effects.spawn_floating_text(cx, curr.y - 10, "PERFECT!", WHITE)
        s.effects.spawn_particles(curr.x, curr.y, curr.width, WHITE, PERFECT_PARTICLES)
        self._emit(EventType.BLOCK_PERFECT, combo=s.combo_count)

        if s.combo_count >= 2:
            s.effects.spawn_floating_text(cx, curr.y - 35, f"COMBO x{s.combo_count}", WHITE)
            self._emit(EventType.COMBO, count=s.combo_count)

        if cfg.growth_enabled and s.combo_count % cfg.growth_every == 0:
            curr.width += cfg.growth_amount
            curr.x -= cfg.growth_amount / 2
            s.effects.spawn_floating_text(cx, curr.y - 40, "GROWTH!", GREEN)
            self._emit(EventType.GROWTH, width=curr.width)

    def _place_trimmed(self, curr: Block, prev: Block, dist: float,
                       overhang: float, overlap: float) -> None:
        s = self.session
        cfg = self.config
        s.combo_count = 0
        if dist > 0:
            # Hanging off the right: keep the left part
            curr.width = overlap
            s.effects.spawn_debris(curr.x + overlap, curr.y, overhang, curr.color, 1)
        else:
            debris_x = curr.x
            curr.x = prev.x
            curr.width = overlap
            s.effects.spawn_debris(debris_x, curr.y, overhang, curr.color, -1)

        s.score += cfg.base_score
        s.camera.impulse(cfg.place_shake)
        s.effects.spawn_particles(curr.x, curr.y, curr.width, curr.color, PLACE_PARTICLES)
        self._emit(EventType.BLOCK_PLACED, overhang=overhang)

    def _progress_speed(self, score_before: int) -> None:
        s = self.session
        cfg = self.config
        # A perfect can add several points, so look for a crossed multiple
        milestone = (
            cfg.speed_policy == SpeedPolicy.MILESTONE
            and s.score // cfg.milestone_every > score_before // cfg.milestone_every
        )
        if milestone:
            s.current_speed *= cfg.milestone_multiplier
            s.environment_index = s.score // cfg.milestone_every
            s.effects.spawn_floating_text(
                cfg.field_width / 2, s.camera.camera_y + 100, "SPEED UP!", WHITE
            )
            self._emit(EventType.SPEED_UP, environment=s.environment_index)
        else:
            s.current_speed += cfg.speed_increment
        s.current_speed = min(max(s.current_speed, s.initial_speed), cfg.max_speed)

    # ------------------------------------------------------------------
    # Game over
    # ------------------------------------------------------------------

    def _game_over(self) -> None:
        s = self.session
        cfg = self.config
        s.running = False
        curr = s.current_block
        if curr is not None:
            s.effects.spawn_debris(curr.x, curr.y, curr.width, curr.color, curr.direction)
            s.current_block = None
        s.camera.impulse(cfg.game_over_shake)
        s.combo_count = 0

        logger.info(f"Game over: score={s.score} height={s.height}")
        self._emit(EventType.GAME_OVER, score=s.score, height=s.height)

        if s.score > self.high_score:
            self.high_score = s.score
            self._emit(EventType.HIGH_SCORE, score=s.score)
            self.store.save_high_score(s.score)

    def _emit(self, event_type: EventType, **data: Any) -> None:
        self.event_bus.emit(Event(event_type, data=data, source="simulation"))
