"""
Pydantic data models for Murattal library.

These models represent the core data structures used throughout the library:
- PlaybackPhase / RepeatMode / PlaybackSelection: playback state
- PlaybackPreferences: persisted user settings
- Reciter: an entry of the reciter catalog
- Surah: Surah metadata
- VerseStatus / VerseProgress / ProgressStats: memorization tracking
"""

from murattal.models.playback import PlaybackPhase, RepeatMode, PlaybackSelection
from murattal.models.preferences import PlaybackPreferences
from murattal.models.reciter import Reciter
from murattal.models.surah import Surah
from murattal.models.progress import VerseStatus, VerseProgress, ProgressStats

__all__ = [
    "PlaybackPhase",
    "RepeatMode",
    "PlaybackSelection",
    "PlaybackPreferences",
    "Reciter",
    "Surah",
    "VerseStatus",
    "VerseProgress",
    "ProgressStats",
]
