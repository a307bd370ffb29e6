from __future__ import annotations

import os
from pathlib import Path

import pytest
from config import ConfigurationSet

from atbat_predictor.config import create_config, load_settings
from atbat_predictor.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove all ATBAT__ env vars so tests are isolated from the caller's shell."""
    for key in list(os.environ):
        if key.startswith("ATBAT__"):
            monkeypatch.delenv(key)


def test_create_config_returns_defaults() -> None:
    cfg = create_config(yaml_path="/nonexistent/atbat.yaml")
    assert isinstance(cfg, ConfigurationSet)
    assert cfg["mlb.team_id"] == 136
    assert cfg["sync.interval_seconds"] == 10.0
    assert cfg["resolution.retry_attempts"] == 3
    assert cfg["resolution.streak_window"] == 20


def test_load_settings_defaults() -> None:
    settings = load_settings(create_config(yaml_path="/nonexistent/atbat.yaml"))
    assert settings.mlb_base_url == "https://statsapi.mlb.com"
    assert settings.db_pool_size == 5
    assert settings.max_balls == 2
    assert settings.max_strikes == 2
    assert settings.webhook_url is None
    assert settings.db_path == Path("~/.local/share/atbat/atbat.db").expanduser()


def test_yaml_overrides_defaults(tmp_path: Path) -> None:
    yaml_file = tmp_path / "atbat.yaml"
    yaml_file.write_text("mlb:\n  team_id: 147\nsync:\n  interval_seconds: 5\n")
    settings = load_settings(create_config(yaml_path=str(yaml_file)))
    assert settings.mlb_team_id == 147
    assert settings.sync_interval_seconds == 5.0
    # Defaults still apply for unset keys
    assert settings.retry_attempts == 3


def test_env_overrides_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    yaml_file = tmp_path / "atbat.yaml"
    yaml_file.write_text("mlb:\n  team_id: 147\n")
    monkeypatch.setenv("ATBAT__MLB__TEAM_ID", "121")
    monkeypatch.setenv("ATBAT__NOTIFY__WEBHOOK_URL", "https://hooks.example.com/atbat")

    settings = load_settings(create_config(yaml_path=str(yaml_file)))
    assert settings.mlb_team_id == 121
    assert settings.webhook_url == "https://hooks.example.com/atbat"


def test_explicit_overrides_beat_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ATBAT__DB__PATH", "/from/env.db")
    override = tmp_path / "override.db"
    cfg = create_config(yaml_path="/nonexistent/atbat.yaml", overrides={"db": {"path": str(override)}})
    assert load_settings(cfg).db_path == override


def test_streak_window_below_minimum_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ATBAT__RESOLUTION__STREAK_WINDOW", "5")
    with pytest.raises(ConfigurationError, match="streak_window"):
        load_settings(create_config(yaml_path="/nonexistent/atbat.yaml"))


def test_non_numeric_value_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ATBAT__DB__POOL_SIZE", "lots")
    with pytest.raises(ConfigurationError, match="db.pool_size"):
        load_settings(create_config(yaml_path="/nonexistent/atbat.yaml"))


def test_missing_key_rejected() -> None:
    cfg = create_config(yaml_path="/nonexistent/atbat.yaml", defaults={"db": {"path": "x.db"}})
    with pytest.raises(ConfigurationError, match="Missing configuration value"):
        load_settings(cfg)
