"""
Boundary interfaces between the simulation and its host.

The core never calls audio or storage directly. Audio is driven by
events on the EventBus through ``SoundEventAdapter``; the best score
goes through a ``HighScoreStore``.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, List
import json
import logging

from stackblock.core.events import Event, EventBus, EventType

logger = logging.getLogger(__name__)


class Sound(ABC):
    """Sound effects the game can trigger."""

    @abstractmethod
    def place(self) -> None:
        ...

    @abstractmethod
    def perfect(self) -> None:
        ...

    @abstractmethod
    def combo(self, n: int) -> None:
        ...

    @abstractmethod
    def game_over(self) -> None:
        ...


class NullSound(Sound):
    """Silent sound port for headless runs and missing audio devices."""

    def place(self) -> None:
        pass

    def perfect(self) -> None:
        pass

    def combo(self, n: int) -> None:
        pass

    def game_over(self) -> None:
        pass


class HighScoreStore(ABC):
    """Persistent best score."""

    @abstractmethod
    def load_high_score(self) -> int:
        ...

    @abstractmethod
    def save_high_score(self, score: int) -> None:
        ...


class MemoryHighScoreStore(HighScoreStore):
    """Session-only store."""

    def __init__(self, initial: int = 0) -> None:
        self._score = initial

    def load_high_score(self) -> int:
        return self._score

    def save_high_score(self, score: int) -> None:
        self._score = score


class JsonHighScoreStore(HighScoreStore):
    """Best score kept in a small JSON file.

    Unreadable or unwritable files are logged and treated as a zero
    best score, so a broken disk never interrupts play.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load_high_score(self) -> int:
        if not self.path.exists():
            return 0
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
            score = int(data.get("high_score", 0))
            logger.info(f"Loaded high score {score}")
            return max(0, score)
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"Failed to load high score: {e}")
            return 0

    def save_high_score(self, score: int) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w") as f:
                json.dump({"high_score": int(score)}, f, indent=2)
            logger.info(f"Saved high score {score}")
        except OSError as e:
            logger.error(f"Failed to save high score: {e}")


class SoundEventAdapter:
    """Plays sounds in response to gameplay events."""

    def __init__(self, event_bus: EventBus, sound: Sound) -> None:
        self.sound = sound
        self._unsubscribers: List[Callable[[], None]] = [
            event_bus.subscribe(EventType.BLOCK_PLACED, self._on_place),
            event_bus.subscribe(EventType.BLOCK_PERFECT, self._on_perfect),
            event_bus.subscribe(EventType.COMBO, self._on_combo),
            event_bus.subscribe(EventType.GROWTH, self._on_growth),
            event_bus.subscribe(EventType.GAME_OVER, self._on_game_over),
        ]

    def _on_place(self, event: Event) -> None:
        self.sound.place()

    def _on_perfect(self, event: Event) -> None:
        self.sound.perfect()

    def _on_combo(self, event: Event) -> None:
        self.sound.combo(int(event.data.get("count", 2)))

    def _on_growth(self, event: Event) -> None:
        self.sound.combo(5)

    def _on_game_over(self, event: Event) -> None:
        self.sound.game_over()

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
