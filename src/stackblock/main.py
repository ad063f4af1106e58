"""
Main entry point for stackblock.

Runs the pygame window by default. ``STACKBLOCK_ENV=headless`` plays a
scripted game without a display, which is handy for smoke-testing a
config on a server.
"""

import asyncio
import logging
import sys

from stackblock.audio.engine import get_audio_engine
from stackblock.config.settings import Settings, get_settings
from stackblock.core.events import EventBus
from stackblock.game.driver import FRAME_MS, GameLoopDriver
from stackblock.game.ports import JsonHighScoreStore, SoundEventAdapter


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )


def build_driver(settings: Settings, event_bus: EventBus) -> GameLoopDriver:
    """Wire the simulation to persistent storage."""
    store = JsonHighScoreStore(settings.high_score_path)
    return GameLoopDriver(settings.game_config(), event_bus=event_bus, store=store)


async def run_simulator(settings: Settings) -> None:
    """Run the desktop window."""
    from stackblock.simulator.window import SimulatorWindow, WindowConfig

    event_bus = EventBus()
    driver = build_driver(settings, event_bus)

    audio = get_audio_engine()
    audio.set_volume(settings.audio.volume)
    if settings.audio.enabled:
        audio.init()
    SoundEventAdapter(event_bus, audio)

    config = WindowConfig(scale=settings.display.scale, fps=settings.display.fps)
    window = SimulatorWindow(
        driver,
        config=config,
        difficulty=settings.difficulty,
        audio=audio,
    )

    await window.run()


def run_headless(settings: Settings) -> int:
    """Play one game with a bot that drops when the block lines up.

    Returns:
        The final score.
    """
    logger = logging.getLogger(__name__)
    event_bus = EventBus()
    driver = build_driver(settings, event_bus)
    driver.start_or_reset(settings.difficulty)

    session = driver.simulation.session
    frames = 0
    while driver.is_running and frames < settings.headless_frames:
        current = session.current_block
        top = session.top_block
        if session.running and current is not None and top is not None:
            if abs(current.x - top.x) <= current.velocity:
                driver.commit()
        driver.tick(FRAME_MS)
        frames += 1

    logger.info(f"Headless run finished after {frames} frames: score {session.score}, best {driver.simulation.high_score}")
    return session.score


def main() -> None:
    """Main entry point."""
    from dotenv import load_dotenv

    # Load environment variables
    load_dotenv()

    settings = get_settings()
    setup_logging(settings.debug)

    logger = logging.getLogger(__name__)
    logger.info("stackblock starting...")

    try:
        if settings.env == "simulator":
            logger.info("Running in simulator mode")
            asyncio.run(run_simulator(settings))
        else:
            logger.info("Running in headless mode")
            run_headless(settings)

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)

    logger.info("stackblock stopped")


if __name__ == "__main__":
    main()
