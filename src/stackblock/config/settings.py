"""
Application settings using Pydantic.

Settings are loaded from environment variables with .env file support.
Gameplay tuning lives in ``GameConfig`` so the simulation can be built
from a plain dict in tests without touching the environment.
"""

import logging
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class SpeedPolicy(str, Enum):
    """How the moving block speeds up after each placement."""

    MILESTONE = "milestone"  # x1.3 jump every N points, flat increment otherwise
    FLAT = "flat"            # flat increment only


class DifficultySettings(BaseModel):
    """Foundation width and starting speed for one difficulty."""

    width_fraction: float = Field(gt=0.0, le=1.0)
    base_speed: float = Field(gt=0.0)


def _default_difficulties() -> Dict[str, DifficultySettings]:
    return {
        "easy": DifficultySettings(width_fraction=0.60, base_speed=2.5),
        "medium": DifficultySettings(width_fraction=0.45, base_speed=3.5),
        "hard": DifficultySettings(width_fraction=0.30, base_speed=5.0),
    }


class GameConfig(BaseModel):
    """Gameplay tuning. Distances are pixels, rates are per 60 Hz frame."""

    # Play field
    field_width: float = Field(default=400.0, gt=0)
    field_height: float = Field(default=700.0, gt=0)
    viewport_height: float = Field(default=700.0, gt=0)
    block_height: float = Field(default=40.0, gt=0)

    # Scoring
    perfect_threshold: float = Field(default=5.0, gt=0)
    base_score: int = Field(default=1, ge=0)
    perfect_bonus: int = Field(default=2, ge=0)

    # Camera
    camera_lerp: float = Field(default=0.08, gt=0.0, lt=1.0)
    camera_target: float = Field(default=0.6, gt=0.0, lt=1.0)
    shake_decay: float = Field(default=0.85, gt=0.0, lt=1.0)
    place_shake: float = Field(default=4.0, ge=0)
    game_over_shake: float = Field(default=14.0, ge=0)

    # Speed
    speed_increment: float = Field(default=0.15, ge=0)
    max_speed: float = Field(default=15.0, gt=0)
    speed_policy: SpeedPolicy = SpeedPolicy.MILESTONE
    milestone_every: int = Field(default=10, gt=0)
    milestone_multiplier: float = Field(default=1.3, ge=1.0)
    difficulties: Dict[str, DifficultySettings] = Field(default_factory=_default_difficulties)

    # Power-ups
    power_up_min: int = Field(default=5, gt=0)
    power_up_max: int = Field(default=10, gt=0)
    power_up_slowdown: float = Field(default=0.8, gt=0.0, le=1.0)

    # Growth bonus on every Nth consecutive perfect
    growth_enabled: bool = False
    growth_every: int = Field(default=3, gt=0)
    growth_amount: float = Field(default=15.0, ge=0)

    # Effects
    debris_cull_margin: float = Field(default=200.0, ge=0)

    @model_validator(mode="after")
    def _check_ranges(self) -> "GameConfig":
        if self.power_up_min > self.power_up_max:
            raise ValueError("power_up_min must not exceed power_up_max")
        missing = {"easy", "medium", "hard"} - set(self.difficulties)
        if missing:
            raise ValueError(f"missing difficulties: {sorted(missing)}")
        for name, diff in self.difficulties.items():
            if diff.base_speed > self.max_speed:
                raise ValueError(f"{name} base_speed exceeds max_speed")
        return self


def load_game_config(overrides: Optional[Dict[str, Any]] = None) -> GameConfig:
    """Build a GameConfig, falling back to defaults when validation fails."""
    try:
        return GameConfig(**(overrides or {}))
    except ValidationError as e:
        logger.warning(f"Invalid game config, using defaults: {e.error_count()} error(s)")
        logger.debug(str(e))
        return GameConfig()


class DisplaySettings(BaseSettings):
    """Display-related settings.

    ``width``/``height``, when set, size the play field and viewport.
    """

    width: int = Field(default=400, gt=0)
    height: int = Field(default=700, gt=0)
    scale: int = 1
    fps: int = 60


class AudioSettings(BaseSettings):
    """Audio-related settings."""

    enabled: bool = True
    volume: float = Field(default=0.6, ge=0.0, le=1.0)


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="STACKBLOCK_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    env: Literal["simulator", "headless"] = "simulator"
    debug: bool = False
    headless_frames: int = Field(default=3600, ge=1)
    difficulty: Literal["easy", "medium", "hard"] = "medium"

    # Paths
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".stackblock")

    # Nested settings
    display: DisplaySettings = Field(default_factory=DisplaySettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    game: GameConfig = Field(default_factory=GameConfig)

    @property
    def high_score_path(self) -> Path:
        """Path to the persisted best score."""
        return self.data_dir / "highscore.json"

    def game_config(self) -> GameConfig:
        """Gameplay config with the play field sized to an explicit display size."""
        overrides = self.game.model_dump()
        if "width" in self.display.model_fields_set:
            overrides["field_width"] = self.display.width
        if "height" in self.display.model_fields_set:
            overrides["field_height"] = self.display.height
            overrides["viewport_height"] = self.display.height
        return load_game_config(overrides)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    try:
        return Settings()
    except ValidationError as e:
        logger.warning(f"Invalid environment settings, using defaults: {e.error_count()} error(s)")
        return Settings.model_construct()
