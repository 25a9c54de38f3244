"""
Playback state models.
"""

from enum import Enum

from pydantic import BaseModel, Field


class PlaybackPhase(str, Enum):
    """Lifecycle phase of the playback controller."""

    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    PAUSED = "paused"
    ERROR = "error"


class RepeatMode(str, Enum):
    """What happens when a verse finishes."""

    NONE = "none"
    VERSE = "verse"
    SURAH = "surah"
    RANGE = "range"  # declared only; no control selects it


class PlaybackSelection(BaseModel):
    """
    The verse currently loaded in the player.

    Surah and verse always travel together: a controller either holds a
    selection or holds None, never half of one. Numbers are not range-checked
    here; an impossible verse fails later, when its audio is resolved.

    Attributes:
        surah_number: Surah number (1-114)
        verse_number: Verse number within the surah (1-based)
    """

    surah_number: int = Field(
        ...,
        description="Surah number (1-114)",
    )
    verse_number: int = Field(
        ...,
        description="Verse number within the surah (1-based)",
    )

    model_config = {"frozen": True}

    @property
    def verse_key(self) -> str:
        """Verse key in 'surah:verse' form."""
        return f"{self.surah_number}:{self.verse_number}"

    def __str__(self) -> str:
        return self.verse_key
