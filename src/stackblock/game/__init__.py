"""Stack simulation core: blocks, effects, camera, rules and loop driver."""

from stackblock.game.blocks import Block, Drawable, EntityKind
from stackblock.game.camera import CameraController
from stackblock.game.effects import Debris, EffectsPool, FloatingText, Particle
from stackblock.game.simulation import (
    Difficulty,
    GameSession,
    Placement,
    PlacementResult,
    StackSimulation,
)
from stackblock.game.driver import GameLoopDriver, InputDebouncer, RenderSnapshot
from stackblock.game.ports import (
    HighScoreStore,
    JsonHighScoreStore,
    MemoryHighScoreStore,
    NullSound,
    Sound,
    SoundEventAdapter,
)

__all__ = [
    "Block",
    "Drawable",
    "EntityKind",
    "CameraController",
    "Debris",
    "EffectsPool",
    "FloatingText",
    "Particle",
    "Difficulty",
    "GameSession",
    "Placement",
    "PlacementResult",
    "StackSimulation",
    "GameLoopDriver",
    "InputDebouncer",
    "RenderSnapshot",
    "HighScoreStore",
    "JsonHighScoreStore",
    "MemoryHighScoreStore",
    "NullSound",
    "Sound",
    "SoundEventAdapter",
]
