"""Configuration for stackblock."""

from stackblock.config.settings import (
    DifficultySettings,
    GameConfig,
    Settings,
    SpeedPolicy,
    get_settings,
    load_game_config,
)

__all__ = [
    "DifficultySettings",
    "GameConfig",
    "Settings",
    "SpeedPolicy",
    "get_settings",
    "load_game_config",
]
