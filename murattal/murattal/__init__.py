"""
مُرَتَّل (Murattal) - A verse-by-verse Quran recitation player for memorization.

Usage:
    import asyncio
    from murattal.playback import PlaybackController, PygameMediaAdapter

    async def main():
        done = asyncio.Event()
        controller = PlaybackController(
            PygameMediaAdapter(),
            on_phase_change=lambda phase: phase in ("idle", "error") and done.set(),
        )

        # Repeat every verse three times, then move on
        controller.set_repeat_mode("verse")
        controller.set_repeat_count(3)
        await controller.play(67, 1)

        # The phase passes through "loading" between verses; wait for the end
        await done.wait()
        controller.close()

    asyncio.run(main())

Memorization progress is tracked separately:
    from murattal.progress import ProgressStore

    with ProgressStore() as store:
        store.update_progress("user-1", 67, 1, "memorized")
"""

from murattal.models import (
    PlaybackPhase,
    PlaybackPreferences,
    PlaybackSelection,
    ProgressStats,
    Reciter,
    RepeatMode,
    Surah,
    VerseProgress,
    VerseStatus,
)
from murattal.config import MurattalSettings, get_settings, configure
from murattal.exceptions import (
    MurattalError,
    SourceResolutionError,
    PlaybackError,
    PreferencesError,
    ConfigurationError,
    QuranDataError,
    ProgressError,
)

__version__ = "1.0.0"
__all__ = [
    # Version
    "__version__",
    # Models
    "PlaybackPhase",
    "RepeatMode",
    "PlaybackSelection",
    "PlaybackPreferences",
    "Reciter",
    "Surah",
    "VerseStatus",
    "VerseProgress",
    "ProgressStats",
    # Config
    "MurattalSettings",
    "get_settings",
    "configure",
    # Exceptions
    "MurattalError",
    "SourceResolutionError",
    "PlaybackError",
    "PreferencesError",
    "ConfigurationError",
    "QuranDataError",
    "ProgressError",
]
