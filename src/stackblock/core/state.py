"""
State machine for the game loop.

States:
    MENU: Idle, waiting for a start/reset
    PLAYING: A block is moving and commits are accepted
    ENDING: The player missed; effects are still animating
"""

from enum import Enum, auto
from typing import Callable
import logging

logger = logging.getLogger(__name__)


class State(Enum):
    """Game loop states."""
    MENU = auto()
    PLAYING = auto()
    ENDING = auto()


Listener = Callable[[State, State], None]


class StateMachine:
    """
    Tracks the loop state and enforces valid transitions.

    Listeners are notified after every successful transition. A listener
    that raises is logged and does not block the transition.
    """

    # Valid state transitions
    VALID_TRANSITIONS: list[tuple[State, State]] = [
        # From MENU
        (State.MENU, State.PLAYING),

        # From PLAYING
        (State.PLAYING, State.ENDING),   # Miss
        (State.PLAYING, State.PLAYING),  # Reset mid-game

        # From ENDING
        (State.ENDING, State.MENU),      # Effects finished
        (State.ENDING, State.PLAYING),   # Reset before effects finished
    ]

    def __init__(self, initial_state: State = State.MENU) -> None:
        self._state = initial_state
        self._listeners: list[Listener] = []
        self._valid_transitions = set(self.VALID_TRANSITIONS)
        logger.info(f"StateMachine initialized with state: {initial_state.name}")

    @property
    def state(self) -> State:
        """Get current state."""
        return self._state

    def can_transition(self, to_state: State) -> bool:
        """Check if transition to given state is valid."""
        return (self._state, to_state) in self._valid_transitions

    def transition(self, to_state: State) -> bool:
        """
        Attempt to transition to a new state.

        Args:
            to_state: Target state

        Returns:
            True if the transition happened
        """
        if not self.can_transition(to_state):
            logger.warning(
                f"Invalid transition: {self._state.name} -> {to_state.name}"
            )
            return False

        old_state = self._state
        self._state = to_state

        logger.info(f"State transition: {old_state.name} -> {to_state.name}")

        for listener in self._listeners:
            try:
                listener(old_state, to_state)
            except Exception as e:
                logger.error(f"Error in state listener: {e}")

        return True

    def add_listener(self, callback: Listener) -> None:
        """Add a state change listener."""
        self._listeners.append(callback)

