"""
Playback preferences data model.
"""

import math

from pydantic import BaseModel, Field, field_validator

from murattal.models.playback import RepeatMode

VOLUME_RANGE = (0.0, 1.0)
SPEED_RANGE = (0.5, 2.0)
REPEAT_COUNT_RANGE = (1, 10)

DEFAULT_VOLUME = 1.0
DEFAULT_SPEED = 1.0
DEFAULT_REPEAT_COUNT = 3


def clamp(value: float, low: float, high: float) -> float:
    """
    Clamp a number into [low, high].

    NaN clamps to ``low`` so a corrupt value can never leak through.
    """
    if math.isnan(value):
        return low
    return max(low, min(high, value))


def _coerce(value, low, high, default, cast):
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return cast(clamp(number, low, high))


class PlaybackPreferences(BaseModel):
    """
    User-adjustable playback settings that survive restarts.

    Numeric fields are clamped instead of rejected, so a hand-edited or
    outdated preferences file always loads.

    Attributes:
        reciter_id: Preferred reciter
        volume: Output volume (0.0-1.0)
        speed: Playback rate (0.5-2.0)
        repeat_mode: What happens when a verse ends
        repeat_count: Plays per verse in verse-repeat mode (1-10)
    """

    reciter_id: int = Field(
        default=7,
        description="Preferred reciter id",
        ge=1,
    )
    volume: float = Field(
        default=DEFAULT_VOLUME,
        description="Output volume (0.0-1.0)",
        ge=VOLUME_RANGE[0],
        le=VOLUME_RANGE[1],
    )
    speed: float = Field(
        default=DEFAULT_SPEED,
        description="Playback rate (0.5-2.0)",
        ge=SPEED_RANGE[0],
        le=SPEED_RANGE[1],
    )
    repeat_mode: RepeatMode = Field(
        default=RepeatMode.NONE,
        description="Repeat behaviour when a verse ends",
    )
    repeat_count: int = Field(
        default=DEFAULT_REPEAT_COUNT,
        description="Plays per verse in verse-repeat mode (1-10)",
        ge=REPEAT_COUNT_RANGE[0],
        le=REPEAT_COUNT_RANGE[1],
    )

    @field_validator("volume", mode="before")
    @classmethod
    def clamp_volume(cls, v) -> float:
        return _coerce(v, *VOLUME_RANGE, DEFAULT_VOLUME, float)

    @field_validator("speed", mode="before")
    @classmethod
    def clamp_speed(cls, v) -> float:
        return _coerce(v, *SPEED_RANGE, DEFAULT_SPEED, float)

    @field_validator("repeat_count", mode="before")
    @classmethod
    def clamp_repeat_count(cls, v) -> int:
        return _coerce(v, *REPEAT_COUNT_RANGE, DEFAULT_REPEAT_COUNT, int)

    @field_validator("repeat_mode", mode="before")
    @classmethod
    def known_repeat_mode(cls, v) -> RepeatMode:
        """Unknown modes load as 'none' rather than failing."""
        try:
            return RepeatMode(v)
        except ValueError:
            return RepeatMode.NONE

    model_config = {
        "validate_assignment": True,
        "json_schema_extra": {
            "examples": [
                {
                    "reciter_id": 7,
                    "volume": 1.0,
                    "speed": 1.0,
                    "repeat_mode": "none",
                    "repeat_count": 3,
                }
            ]
        },
    }
