# config.py
# Game settings shared by the CLI and the API.

import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

import core

ENV_PREFIX = "MERGE2048_"
MAX_BOARD_SIZE = 16


class GameSettings(BaseModel):
    """Settings for a game instance."""
    model_config = ConfigDict(frozen=True)

    size: int = Field(
        default=4,
        ge=2,  # Board size must be at least 2x2
        le=MAX_BOARD_SIZE,
        description="Size of the N x N game board (e.g., 4 for a 4x4 board)."
    )
    win_tile: int = Field(
        default=core.DEFAULT_WIN_TILE,
        gt=1,
        description="The tile value to achieve for winning the game (e.g., 2048)."
    )
    spawn_bias: float = Field(
        default=core.DEFAULT_SPAWN_BIAS,
        ge=0.0,
        le=1.0,
        description="Probability that a spawned tile is a 2 rather than a 4."
    )


def load_settings(environ: Optional[Mapping[str, str]] = None) -> GameSettings:
    """
    Builds GameSettings from MERGE2048_SIZE, MERGE2048_WIN_TILE and MERGE2048_SPAWN_BIAS.
    Unset variables fall back to the defaults; invalid ones raise pydantic.ValidationError.
    """
    environ = os.environ if environ is None else environ
    values = {}
    for field in GameSettings.model_fields:
        raw = environ.get(ENV_PREFIX + field.upper())
        if raw is not None and raw.strip():
            values[field] = raw.strip()
    return GameSettings(**values)
