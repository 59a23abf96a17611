# shared/game_config.py
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameConfig:
    initial_width: int = 180

    base_speed: float = 3.0
    speed_step: float = 0.5
    speed_cap: float = 8.0

    gravity: float = 0.8          # per 16ms unit
    time_unit_ms: float = 16.0
    debris_margin: int = 300      # px below the field before a piece is dropped
    tower_offset: int = 40        # gap between field bottom and tower base

    max_layers: int = 120

    perfect_ratio: float = 0.05
    perfect_min: int = 3

    points_base: int = 10
    points_per_combo: int = 5
    perfect_bonus: int = 20

    leaderboard_limit: int = 100


CFG = GameConfig()


@dataclass(frozen=True)
class Settings:
    server_host: Optional[str]
    server_port: Optional[int]
    data_dir: Path
    log_level: str = "INFO"

    @property
    def remote_enabled(self) -> bool:
        return bool(self.server_host) and self.server_port is not None


def _parse_server(raw: str):
    host, sep, port = raw.strip().rpartition(":")
    if not sep or not host:
        raise ValueError(f"expected host:port, got {raw!r}")
    p = int(port)
    if p <= 0 or p > 65535:
        raise ValueError(f"port out of range: {p}")
    return host, p


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Read runtime settings from the environment.

    CAKE_TOWER_SERVER      host:port of the leaderboard server; empty = local only
    CAKE_TOWER_DATA_DIR    where the local store file lives
    CAKE_TOWER_LOG_LEVEL   logging level name
    """
    env = os.environ if env is None else env

    host = port = None
    raw = env.get("CAKE_TOWER_SERVER", "")
    if raw.strip():
        try:
            host, port = _parse_server(raw)
        except ValueError as e:
            logger.warning("Ignoring CAKE_TOWER_SERVER: %s", e)
            host = port = None

    data_dir = Path(env.get("CAKE_TOWER_DATA_DIR") or Path.home() / ".cake_tower")
    level = (env.get("CAKE_TOWER_LOG_LEVEL") or "INFO").strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        logger.warning("Ignoring CAKE_TOWER_LOG_LEVEL: unknown level %r", level)
        level = "INFO"
    return Settings(server_host=host, server_port=port, data_dir=data_dir, log_level=level)
