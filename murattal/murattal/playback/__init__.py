"""
Playback modules for Murattal library.

This package contains the verse-by-verse recitation player:
- PlaybackController: the playback state machine
- MediaAdapter: interface for audio outputs (PygameMediaAdapter ships built in)
- ContentResolver: turns a verse and reciter into a playable URL
- PreferenceStore: persisted volume, speed, repeat and reciter settings

Primary API:
    from murattal.playback import PlaybackController, PygameMediaAdapter

    controller = PlaybackController(PygameMediaAdapter())
    controller.set_repeat_mode("verse")
    await controller.play(1, 1)
"""

# Primary API - what most users need
from murattal.playback.controller import PlaybackController
from murattal.playback.pygame_backend import PygameMediaAdapter

# Extension points
from murattal.playback.base import MediaAdapter, MediaEvent, MediaSignal
from murattal.playback.resolver import ContentResolver, EveryAyahResolver, build_audio_url
from murattal.playback.preferences import PreferenceStore
from murattal.playback.scheduler import AsyncioScheduler, Scheduler

# Pure helpers
from murattal.playback.policy import (
    AfterVerse,
    AfterVerseAction,
    decide_after_verse,
    next_verse,
    previous_verse,
)
from murattal.playback.utils import format_time

__all__ = [
    # Primary API
    "PlaybackController",
    "PygameMediaAdapter",
    # Extension points
    "MediaAdapter",
    "MediaEvent",
    "MediaSignal",
    "ContentResolver",
    "EveryAyahResolver",
    "build_audio_url",
    "PreferenceStore",
    "Scheduler",
    "AsyncioScheduler",
    # Helpers
    "AfterVerse",
    "AfterVerseAction",
    "decide_after_verse",
    "next_verse",
    "previous_verse",
    "format_time",
]
