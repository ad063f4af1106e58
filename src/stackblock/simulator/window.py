"""
Desktop window using pygame.

Hosts the game loop driver: turns keyboard and mouse input into
start/commit events, feeds the frame clock into ``tick()`` and shows
the rendered frame with the HUD and floating text on top.
"""

import pygame
import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from stackblock.core.events import EventBus, EventType, Event, commit_event, start_event
from stackblock.core.state import State
from stackblock.game.driver import GameLoopDriver, InputDebouncer, RenderSnapshot
from stackblock.graphics.renderer import StackRenderer

logger = logging.getLogger(__name__)

DIFFICULTIES = ("easy", "medium", "hard")
DIFFICULTY_COLORS: Dict[str, Tuple[int, int, int]] = {
    "easy": (80, 220, 120),
    "medium": (240, 200, 80),
    "hard": (240, 90, 90),
}


@dataclass
class WindowConfig:
    """Window configuration."""
    title: str = "Stack"
    scale: int = 1
    fps: int = 60
    debounce_ms: float = 80.0

    # Colors
    text_color: tuple[int, int, int] = (240, 240, 250)
    dim_color: tuple[int, int, int] = (150, 150, 170)
    overlay_color: tuple[int, int, int, int] = (10, 10, 20, 170)


class SimulatorWindow:
    """
    Game window.

    Keyboard Mapping:
        SPACE / click: Start (in menu) or drop the block
        LEFT / RIGHT or 1-3: Choose difficulty in the menu
        R: Restart with the current difficulty
        M: Mute
        D: Toggle debug overlay
        S: Screenshot
        ESC / Q: Quit
    """

    def __init__(
        self,
        driver: GameLoopDriver,
        config: WindowConfig | None = None,
        difficulty: str = "medium",
        audio=None,
    ) -> None:
        self.config = config or WindowConfig()
        self.driver = driver
        self.event_bus: EventBus = driver.event_bus
        self.audio = audio
        self.difficulty = difficulty if difficulty in DIFFICULTIES else "medium"

        game = driver.config
        self._width = int(game.field_width)
        self._height = int(game.viewport_height)
        self.renderer = StackRenderer(self._width, self._height)
        self.debouncer = InputDebouncer(self.config.debounce_ms)

        # Pygame setup
        self._screen: pygame.Surface | None = None
        self._clock: pygame.time.Clock | None = None
        self._running = False
        self._frame_count = 0
        self._show_debug = False
        self._game_over_ms: Optional[float] = None
        self._resumed = False

        # Fonts, keyed by pixel size
        self._fonts: Dict[int, pygame.font.Font] = {}

        self.event_bus.subscribe(EventType.GAME_OVER, self._on_game_over)
        self.event_bus.subscribe(EventType.GAME_STARTED, self._on_game_started)

        logger.info("SimulatorWindow created")

    def _init_pygame(self) -> None:
        """Initialize pygame and create window."""
        pygame.init()
        pygame.display.set_caption(self.config.title)
        scale = self.config.scale
        self._screen = pygame.display.set_mode(
            (self._width * scale, self._height * scale), pygame.DOUBLEBUF
        )
        self._clock = pygame.time.Clock()
        pygame.font.init()
        logger.info(f"Pygame initialized: {self._width * scale}x{self._height * scale}")

    def _font(self, size: int) -> pygame.font.Font:
        size = max(8, size)
        if size not in self._fonts:
            self._fonts[size] = pygame.font.SysFont(None, size, bold=True)
        return self._fonts[size]

    # Input

    def _handle_events(self, events: list) -> None:
        for event in events:
            if event.type == pygame.QUIT:
                self._running = False
            elif event.type == pygame.KEYDOWN:
                self._handle_keydown(event)
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self._press()

    def _handle_keydown(self, event: pygame.event.Event) -> None:
        key = event.key

        if key in (pygame.K_ESCAPE, pygame.K_q):
            self._running = False
        elif key in (pygame.K_SPACE, pygame.K_RETURN):
            self._press()
        elif key == pygame.K_r:
            self.event_bus.queue_event(start_event(self.difficulty, source="keyboard"))
        elif key == pygame.K_m:
            if self.audio is not None:
                self.audio.toggle_mute()
        elif key == pygame.K_d:
            self._show_debug = not self._show_debug
        elif key == pygame.K_s:
            self._capture_screenshot()
        elif self.driver.state == State.MENU:
            if key == pygame.K_LEFT:
                self._select_difficulty(-1)
            elif key == pygame.K_RIGHT:
                self._select_difficulty(1)
            elif key in (pygame.K_1, pygame.K_2, pygame.K_3):
                self.difficulty = DIFFICULTIES[key - pygame.K_1]

    def _select_difficulty(self, step: int) -> None:
        index = DIFFICULTIES.index(self.difficulty)
        self.difficulty = DIFFICULTIES[max(0, min(len(DIFFICULTIES) - 1, index + step))]

    def _press(self) -> None:
        """Primary action: start from the menu, drop while playing."""
        if not self.debouncer.accept(pygame.time.get_ticks()):
            return
        if self.driver.state == State.PLAYING:
            self.event_bus.queue_event(commit_event(source="keyboard"))
        elif self._menu_visible():
            self.event_bus.queue_event(start_event(self.difficulty, source="keyboard"))

    def _on_game_over(self, event: Event) -> None:
        self._game_over_ms = pygame.time.get_ticks()

    def _on_game_started(self, event: Event) -> None:
        self._game_over_ms = None

    def _menu_visible(self) -> bool:
        state = self.driver.state
        if state == State.MENU:
            return True
        # Result card appears shortly after the miss
        return (
            state == State.ENDING
            and self._game_over_ms is not None
            and pygame.time.get_ticks() - self._game_over_ms > 500
        )

    # Rendering

    def _render(self, snapshot: RenderSnapshot) -> None:
        if not self._screen:
            return

        buffer = self.renderer.render(snapshot)
        surface = pygame.surfarray.make_surface(buffer.swapaxes(0, 1))
        if self.config.scale != 1:
            surface = pygame.transform.scale(surface, self._screen.get_size())
        self._screen.blit(surface, (0, 0))

        self._render_texts(snapshot)
        self._render_hud(snapshot)
        if self._menu_visible():
            self._render_menu(snapshot)
        if self._show_debug:
            self._render_debug(snapshot)

        pygame.display.flip()

    def _render_texts(self, snapshot: RenderSnapshot) -> None:
        scale = self.config.scale
        ox, oy = snapshot.shake_offset
        for label in snapshot.texts:
            font = self._font(int(24 * label.scale * scale * 1.3))
            surf = font.render(label.text, True, label.color)
            surf.set_alpha(int(255 * label.alpha))
            center = (
                int((label.x + ox) * scale),
                int((label.y - snapshot.camera_y + oy) * scale),
            )
            self._screen.blit(surf, surf.get_rect(center=center))

    def _render_hud(self, snapshot: RenderSnapshot) -> None:
        scale = self.config.scale
        w = self._screen.get_width()

        score = self._font(56 * scale).render(str(snapshot.score), True, self.config.text_color)
        self._screen.blit(score, score.get_rect(midtop=(w // 2, 20 * scale)))

        best = self._font(20 * scale).render(f"BEST: {snapshot.high_score}", True, self.config.dim_color)
        self._screen.blit(best, best.get_rect(topright=(w - 12 * scale, 12 * scale)))

        if snapshot.combo >= 2:
            combo = self._font(26 * scale).render(f"COMBO x{snapshot.combo}", True, (255, 215, 0))
            self._screen.blit(combo, combo.get_rect(midtop=(w // 2, 70 * scale)))

    def _render_menu(self, snapshot: RenderSnapshot) -> None:
        scale = self.config.scale
        w, h = self._screen.get_size()
        overlay = pygame.Surface((w, h), pygame.SRCALPHA)
        overlay.fill(self.config.overlay_color)
        self._screen.blit(overlay, (0, 0))

        ended = snapshot.state != State.MENU or self._game_over_ms is not None
        title = "Game Over" if ended else "Stack"
        lines = [(title, 48, self.config.text_color)]
        if ended:
            lines.append((f"Score: {snapshot.score}  Best: {snapshot.high_score}", 24, self.config.dim_color))
        lines.append(("< " + self.difficulty.upper() + " >", 28, DIFFICULTY_COLORS[self.difficulty]))
        lines.append(("SPACE / CLICK to " + ("try again" if ended else "play"), 22, self.config.dim_color))

        y = h // 2 - 80 * scale
        for text, size, color in lines:
            surf = self._font(size * scale).render(text, True, color)
            self._screen.blit(surf, surf.get_rect(midtop=(w // 2, y)))
            y += int(size * 1.6) * scale

    def _render_debug(self, snapshot: RenderSnapshot) -> None:
        font = self._font(16 * self.config.scale)
        session = self.driver.simulation.session
        lines = [
            f"FPS: {self._clock.get_fps():.1f}" if self._clock else "FPS: --",
            f"Frame: {self._frame_count}",
            f"State: {snapshot.state.name}",
            f"Camera: {snapshot.camera_y:.1f}",
        ]
        if session is not None:
            lines.append(f"Speed: {session.current_speed:.2f}")
            lines.append(f"Power-up in: {session.next_power_up_target - session.blocks_since_last_power_up}")
            lines.append(" ".join(f"{k}={v}" for k, v in session.effects.stats().items()))
        y = 100 * self.config.scale
        for line in lines:
            surf = font.render(line, True, self.config.dim_color)
            self._screen.blit(surf, (8, y))
            y += surf.get_height() + 2

    def _capture_screenshot(self) -> None:
        """Capture and save a screenshot."""
        if self._screen:
            filename = f"screenshot_{self._frame_count}.png"
            pygame.image.save(self._screen, filename)
            logger.info(f"Screenshot saved: {filename}")

    # Loop

    def _restart_clock(self) -> None:
        """Forget time spent blocked on input."""
        if self._clock:
            self._clock.tick()
        self._resumed = True

    def _next_delta(self) -> float:
        """Milliseconds to advance this frame; zero right after an idle wait."""
        if self._resumed or not self._clock:
            self._resumed = False
            return 0.0
        return self._clock.get_time()

    async def run(self) -> None:
        """Main window loop."""
        self._init_pygame()
        self._running = True
        logger.info("Window started")

        snapshot = self.driver.snapshot()
        while self._running:
            if self.driver.is_running:
                events = pygame.event.get()
            else:
                # Nothing animates in the menu: sleep until input arrives
                self._render(snapshot)
                events = [pygame.event.wait()]
                self._restart_clock()
            self._handle_events(events)

            await self.event_bus.process_queue()

            if self._clock:
                snapshot = self.driver.tick(self._next_delta()) or self.driver.snapshot()

            self._render(snapshot)

            if self._clock:
                self._clock.tick(self.config.fps)
            self._frame_count += 1

            # Yield to other tasks
            await asyncio.sleep(0)

        self._cleanup()

    def _cleanup(self) -> None:
        """Clean up pygame resources."""
        if self.audio is not None:
            self.audio.cleanup()
        pygame.quit()
        logger.info("Window stopped")

    def stop(self) -> None:
        """Stop the window loop."""
        self._running = False
