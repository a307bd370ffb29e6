from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from config import ConfigurationSet, config_from_dict, config_from_env, config_from_yaml

from atbat_predictor.exceptions import ConfigurationError

_DEFAULTS: dict[str, object] = {
    "db": {
        "path": "~/.local/share/atbat/atbat.db",
        "pool_size": 5,
        "timeout": 10.0,
    },
    "mlb": {
        "base_url": "https://statsapi.mlb.com",
        "team_id": 136,
        "timeout": 10.0,
    },
    "sync": {
        "interval_seconds": 10.0,
    },
    "resolution": {
        "retry_attempts": 3,
        "retry_base_delay": 0.5,
        "streak_window": 20,
    },
    "predictions": {
        "max_balls": 2,
        "max_strikes": 2,
    },
    "notify": {
        "webhook_url": "",
    },
}


@dataclass(frozen=True)
class AppSettings:
    db_path: Path
    db_pool_size: int
    db_timeout: float
    mlb_base_url: str
    mlb_team_id: int
    mlb_timeout: float
    sync_interval_seconds: float
    retry_attempts: int
    retry_base_delay: float
    streak_window: int
    max_balls: int
    max_strikes: int
    webhook_url: str | None


def create_config(
    yaml_path: str = "atbat.yaml",
    env_prefix: str = "ATBAT",
    defaults: dict[str, object] | None = None,
    *,
    overrides: dict[str, object] | None = None,
) -> ConfigurationSet:
    """Create a layered configuration.

    Priority (highest to lowest): explicit overrides > env vars > YAML file > defaults dict.
    Environment variables use ``__`` between levels, e.g. ``ATBAT__DB__PATH``.
    """
    if defaults is None:
        defaults = _DEFAULTS

    layers = [
        config_from_env(env_prefix, separator="__", lowercase_keys=True),
        config_from_yaml(yaml_path, read_from_file=True, ignore_missing_paths=True),
        config_from_dict(defaults),
    ]
    if overrides:
        layers.insert(0, config_from_dict(overrides))
    return ConfigurationSet(*layers)


def _get(cfg: ConfigurationSet, key: str) -> object:
    try:
        return cfg[key]
    except KeyError:
        raise ConfigurationError(f"Missing configuration value: {key}") from None


def _int(cfg: ConfigurationSet, key: str, *, minimum: int) -> int:
    raw = _get(cfg, key)
    try:
        value = int(str(raw))
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ConfigurationError(f"{key} must be at least {minimum}, got {value}")
    return value


def _float(cfg: ConfigurationSet, key: str, *, minimum: float) -> float:
    raw = _get(cfg, key)
    try:
        value = float(str(raw))
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}") from None
    if value < minimum:
        raise ConfigurationError(f"{key} must be at least {minimum}, got {value}")
    return value


def load_settings(cfg: ConfigurationSet | None = None) -> AppSettings:
    if cfg is None:
        cfg = create_config()
    webhook_url = str(_get(cfg, "notify.webhook_url") or "").strip()
    return AppSettings(
        db_path=Path(str(_get(cfg, "db.path"))).expanduser(),
        db_pool_size=_int(cfg, "db.pool_size", minimum=1),
        db_timeout=_float(cfg, "db.timeout", minimum=0.0),
        mlb_base_url=str(_get(cfg, "mlb.base_url")),
        mlb_team_id=_int(cfg, "mlb.team_id", minimum=1),
        mlb_timeout=_float(cfg, "mlb.timeout", minimum=0.1),
        sync_interval_seconds=_float(cfg, "sync.interval_seconds", minimum=0.1),
        retry_attempts=_int(cfg, "resolution.retry_attempts", minimum=1),
        retry_base_delay=_float(cfg, "resolution.retry_base_delay", minimum=0.0),
        streak_window=_int(cfg, "resolution.streak_window", minimum=20),
        max_balls=_int(cfg, "predictions.max_balls", minimum=1),
        max_strikes=_int(cfg, "predictions.max_strikes", minimum=1),
        webhook_url=webhook_url or None,
    )
