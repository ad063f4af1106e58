"""Settings and gameplay config validation."""

import pytest
from pydantic import ValidationError

from stackblock.config.settings import GameConfig, Settings, SpeedPolicy, load_game_config


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ("STACKBLOCK_DIFFICULTY", "STACKBLOCK_DEBUG", "STACKBLOCK_ENV"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults():
    cfg = GameConfig()
    assert cfg.block_height == 40
    assert cfg.perfect_threshold == 5
    assert cfg.max_speed == 15
    assert cfg.speed_policy == SpeedPolicy.MILESTONE
    assert cfg.difficulties["medium"].width_fraction == pytest.approx(0.45)
    assert cfg.difficulties["hard"].base_speed == pytest.approx(5.0)
    assert not cfg.growth_enabled


@pytest.mark.parametrize("overrides", [
    {"camera_lerp": 0},
    {"shake_decay": 1.5},
    {"power_up_min": 8, "power_up_max": 4},
    {"difficulties": {"easy": {"width_fraction": 0.5, "base_speed": 2}}},
    {"max_speed": 3.0},
])
def test_invalid_values_rejected(overrides):
    with pytest.raises(ValidationError):
        GameConfig(**overrides)


def test_load_game_config_falls_back(caplog):
    cfg = load_game_config({"camera_target": 7})
    assert cfg.camera_target == pytest.approx(0.6)
    assert "Invalid game config" in caplog.text


def test_load_game_config_applies_overrides():
    cfg = load_game_config({"speed_policy": "flat", "growth_enabled": True})
    assert cfg.speed_policy == SpeedPolicy.FLAT
    assert cfg.growth_enabled


def test_settings_from_environment(clean_env, tmp_path):
    clean_env.setenv("STACKBLOCK_DIFFICULTY", "hard")
    clean_env.setenv("STACKBLOCK_GAME__MAX_SPEED", "20")
    clean_env.setenv("STACKBLOCK_DATA_DIR", str(tmp_path))
    settings = Settings()
    assert settings.difficulty == "hard"
    assert settings.game.max_speed == 20
    assert settings.high_score_path == tmp_path / "highscore.json"


def test_settings_defaults(clean_env):
    settings = Settings()
    assert settings.env == "simulator"
    assert settings.display.fps == 60
    assert settings.audio.volume == pytest.approx(0.6)
