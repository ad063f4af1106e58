"""
Event bus for stackblock.

Input adapters queue START/COMMIT events; the simulation emits gameplay
events (placements, combos, game over) synchronously so audio and UI
listeners react in the same frame.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Awaitable
from enum import Enum, auto
import asyncio
import inspect
import logging
import time
from collections import defaultdict

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Events exchanged between the core and its adapters."""
    # Input
    COMMIT = auto()
    START = auto()

    # Gameplay
    GAME_STARTED = auto()
    BLOCK_PLACED = auto()
    BLOCK_PERFECT = auto()
    COMBO = auto()
    GROWTH = auto()
    POWER_UP = auto()
    SPEED_UP = auto()
    GAME_OVER = auto()
    HIGH_SCORE = auto()

    # Loop
    STATE_CHANGED = auto()


@dataclass
class Event:
    """
    One message on the bus.

    Attributes:
        type: EventType member (or a custom string)
        data: Payload, e.g. ``{"count": 3}`` for COMBO
        source: Name of the emitting component
        timestamp: Wall-clock creation time
    """
    type: EventType | str
    data: dict[str, Any] = field(default_factory=dict)
    source: str = "system"
    timestamp: float = field(default_factory=time.time)


SyncHandler = Callable[[Event], None]
AsyncHandler = Callable[[Event], Awaitable[None]]
Handler = SyncHandler | AsyncHandler


class EventBus:
    """
    Publish/subscribe hub.

    ``emit`` runs synchronous handlers immediately. Queued events are
    delivered by ``process_queue`` from the host loop, where coroutine
    handlers are awaited as well. A failing handler is logged and never
    reaches the emitter.
    """

    def __init__(self) -> None:
        self._handlers: dict[EventType | str, list[Handler]] = defaultdict(list)
        self._wildcard: list[Handler] = []
        self._queue: asyncio.Queue[Event] = asyncio.Queue()

    def subscribe(self, event_type: EventType | str, handler: Handler) -> Callable[[], None]:
        """
        Register ``handler`` for one event type.

        Returns:
            A callable that removes the subscription
        """
        handlers = self._handlers[event_type]
        handlers.append(handler)
        logger.debug(f"Subscribed {getattr(handler, '__qualname__', handler)} to {event_type}")
        return lambda: self._discard(handlers, handler)

    def subscribe_all(self, handler: Handler) -> Callable[[], None]:
        """Register ``handler`` for every event."""
        self._wildcard.append(handler)
        return lambda: self._discard(self._wildcard, handler)

    @staticmethod
    def _discard(handlers: list[Handler], handler: Handler) -> None:
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: Event) -> None:
        """Deliver ``event`` now. Coroutine handlers are skipped."""
        for handler in self._targets(event):
            if inspect.iscoroutinefunction(handler):
                continue
            self._call(handler, event)

    def queue_event(self, event: Event) -> None:
        """Hold ``event`` until the next ``process_queue``."""
        self._queue.put_nowait(event)

    async def process_queue(self) -> None:
        """Deliver queued events in order, awaiting coroutine handlers."""
        while not self._queue.empty():
            event = self._queue.get_nowait()
            pending = []
            for handler in self._targets(event):
                if inspect.iscoroutinefunction(handler):
                    pending.append(handler(event))
                else:
                    self._call(handler, event)
            if pending:
                for result in await asyncio.gather(*pending, return_exceptions=True):
                    if isinstance(result, Exception):
                        logger.error(f"Error in async handler for {event.type}: {result}")
            self._queue.task_done()

    def _targets(self, event: Event) -> list[Handler]:
        return self._handlers.get(event.type, []) + self._wildcard

    @staticmethod
    def _call(handler: SyncHandler, event: Event) -> None:
        try:
            handler(event)
        except Exception as e:
            logger.error(f"Error in handler for {event.type}: {e}")


def commit_event(source: str = "input") -> Event:
    """Drop the moving block."""
    return Event(EventType.COMMIT, source=source)


def start_event(difficulty: str, source: str = "input") -> Event:
    """Start (or restart) a game at ``difficulty``."""
    return Event(EventType.START, data={"difficulty": difficulty}, source=source)

