"""
Memorization progress data models.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class VerseStatus(str, Enum):
    """Memorization status of a single verse."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    MEMORIZED = "memorized"
    REVISED = "revised"

    @property
    def is_complete(self) -> bool:
        """Memorized and revised verses both count towards completing a surah."""
        return self in (VerseStatus.MEMORIZED, VerseStatus.REVISED)


class VerseProgress(BaseModel):
    """
    A user's memorization status for one verse.

    Attributes:
        user_id: Owner of the record
        surah_number: Surah number (1-114)
        ayah_number: Ayah number within the surah (1-based)
        status: Current memorization status
        created_at: When the verse was first tracked
        updated_at: When the status last changed
    """

    user_id: str = Field(..., min_length=1)
    surah_number: int = Field(..., ge=1, le=114)
    ayah_number: int = Field(..., ge=1)
    status: VerseStatus
    created_at: datetime
    updated_at: datetime

    @property
    def verse_key(self) -> str:
        return f"{self.surah_number}:{self.ayah_number}"

    def __str__(self) -> str:
        return f"VerseProgress({self.verse_key}, {self.status.value})"


class ProgressStats(BaseModel):
    """Summary counts over all of a user's tracked verses."""

    total_ayahs: int = 0
    memorized: int = 0
    in_progress: int = 0
    revised: int = 0
    not_started: int = 0
    surahs_completed: int = 0
