"""
Basic Usage Example for Murattal

This example plays a short surah verse by verse for memorization:
1. Create a controller with the pygame backend
2. Repeat each verse a few times
3. Let the controller advance through the surah
4. Print progress as it plays
"""

import asyncio

from murattal._logging import configure_logging
from murattal.data import get_surah
from murattal.models import PlaybackPhase
from murattal.playback import PlaybackController, PygameMediaAdapter


async def main():
    configure_logging()
    surah = get_surah(112)
    print(f"Memorizing {surah} ({surah.total_ayahs} ayahs)\n")

    finished = asyncio.Event()

    def on_phase_change(phase):
        if phase in (PlaybackPhase.IDLE, PlaybackPhase.ERROR):
            finished.set()

    controller = PlaybackController(
        PygameMediaAdapter(),
        on_play=lambda s, v: print(f"  Playing {s}:{v}"),
        on_error=lambda e: print(f"  Error: {e}"),
        on_phase_change=on_phase_change,
    )

    # Each verse three times, then the next one
    controller.set_repeat_mode("verse")
    controller.set_repeat_count(3)

    await controller.play(surah.id, 1)
    await finished.wait()

    print(f"\nStopped at {controller.selection} ({controller.phase.value})")
    controller.close()


if __name__ == "__main__":
    asyncio.run(main())
