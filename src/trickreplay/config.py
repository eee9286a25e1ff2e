"""Replay configuration loader."""

import os

import yaml
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_ENV_VAR = "TRICKREPLAY_CONFIG"


def _default_delays() -> dict[float, int]:
    return {0.5: 4000, 1: 2000, 2: 1000}


@dataclass
class ReplayConfig:
    default_speed: float = 1
    speed_delays_ms: dict[float, int] = field(default_factory=_default_delays)
    autostart: bool = False
    stop_on_jump: bool = True  # jump_to_round / jump_to_trick end autoplay
    cache_size: int = 64  # per-table entries in HandCache
    log_level: str = "INFO"
    # Substitute display name -> rostered name whose hand it continues
    player_aliases: dict[str, str] = field(default_factory=dict)

    @property
    def speed_delays_s(self) -> dict[float, float]:
        return {speed: ms / 1000.0 for speed, ms in self.speed_delays_ms.items()}


def load_config(path: Path | None = None) -> ReplayConfig:
    """Load replay config from a YAML file.

    With no path, falls back to ``$TRICKREPLAY_CONFIG`` and then to the
    built-in defaults.
    """
    if path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if not env_path:
            return ReplayConfig()
        path = Path(env_path)

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    r = raw.get("replay") or {}
    delays_raw = r.get("speed_delays_ms")
    delays = (
        {float(k): int(v) for k, v in delays_raw.items()}
        if delays_raw else _default_delays()
    )
    default_speed = float(r.get("default_speed", 1))
    if default_speed not in delays:
        raise ValueError(
            f"default_speed {default_speed} has no entry in speed_delays_ms "
            f"({sorted(delays)})"
        )

    return ReplayConfig(
        default_speed=default_speed,
        speed_delays_ms=delays,
        autostart=r.get("autostart", False),
        stop_on_jump=r.get("stop_on_jump", True),
        cache_size=r.get("cache_size", 64),
        log_level=str(r.get("log_level", "INFO")).upper(),
        player_aliases={
            str(k): str(v) for k, v in (raw.get("player_aliases") or {}).items()
        },
    )
