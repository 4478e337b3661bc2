"""Battle settings loaded from config.toml."""
from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config.toml"


class BattleSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    max_rounds_per_stage: int = Field(default=10, ge=1)
    default_total_stages: int = Field(default=3, ge=1)
    # Fraction of max hp restored to survivors after a cleared stage
    stage_recovery_fraction: float = Field(default=0.0, ge=0.0, le=1.0)
    ally_attack_boost: float = Field(default=1.2, gt=0)
    enemy_attack_boost: float = Field(default=1.3, gt=0)
    min_reward_multiplier: float = Field(default=0.3, ge=0.0, le=1.0)


def _load_config(path: Path) -> dict[str, Any]:
    if path.exists():
        with open(path, "rb") as f:
            return tomllib.load(f)
    return {}


def load_settings(path: str | Path | None = None) -> BattleSettings:
    """Read the ``[battle]`` table; missing file or keys fall back to defaults."""
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    config = _load_config(config_path)
    if not config:
        logger.debug(f"No config at {config_path}, using default battle settings")
    return BattleSettings(**config.get("battle", {}))
