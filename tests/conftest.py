"""
Shared fixtures and test configuration for Murattal tests.
"""

import asyncio

import pytest

from murattal.config import MurattalSettings
from murattal.exceptions import PlaybackError
from murattal.playback import (
    ContentResolver,
    MediaAdapter,
    MediaSignal,
    PlaybackController,
    PreferenceStore,
    Scheduler,
)


class FakeMediaAdapter(MediaAdapter):
    """
    In-memory media backend.

    Records every call and emits the events a real backend would. Tests drive
    the end of a track with ``finish()``.
    """

    def __init__(self, announce_start: bool = True, duration: float = 10.0):
        super().__init__()
        self.announce_start = announce_start
        self.media_duration = duration
        self.fail_play = False

        self._source = None
        self._position = 0.0
        self._duration = 0.0
        self._ended = False
        self.playing = False
        self.closed = False

        self.loads = []
        self.play_calls = 0
        self.pause_calls = 0
        self.positions = []
        self.volumes = []
        self.speeds = []

    @property
    def source(self):
        return self._source

    @property
    def position(self):
        return self._position

    @property
    def duration(self):
        return self._duration

    @property
    def ended(self):
        return self._ended

    def load(self, url):
        self.loads.append(url)
        self._source = url
        self._position = 0.0
        self._duration = 0.0
        self._ended = False
        self.playing = False
        self.emit(MediaSignal.LOAD_START)

    async def play(self):
        self.play_calls += 1
        if self.fail_play:
            raise PlaybackError("device unavailable", source=self._source)
        if self._ended:
            self._position = 0.0
            self._ended = False
        if self._duration == 0.0:
            self._duration = self.media_duration
            self.emit(MediaSignal.METADATA_LOADED, self._duration)
        self.playing = True
        if self.announce_start:
            self.emit(MediaSignal.STARTED)

    def pause(self):
        self.pause_calls += 1
        self.playing = False
        self.emit(MediaSignal.PAUSED)

    def set_position(self, seconds):
        self.positions.append(seconds)
        self._position = seconds

    def set_volume(self, volume):
        self.volumes.append(volume)

    def set_speed(self, speed):
        self.speeds.append(speed)

    def close(self):
        self.closed = True
        self.playing = False

    # Test drivers

    def finish(self):
        """Play the current source to its end."""
        self.playing = False
        self._ended = True
        self._position = self._duration
        self.emit(MediaSignal.ENDED)

    def tick(self, seconds):
        self._position = seconds
        self.emit(MediaSignal.TIME_UPDATE, seconds)

    def fail(self, message):
        self.playing = False
        self.emit(MediaSignal.ERROR, message=message)


class FakeResolver(ContentResolver):
    """
    Resolver returning predictable URLs.

    ``hold(surah, verse)`` makes resolution of that verse wait until
    ``release(surah, verse)``; ``errors`` maps verses to exceptions to raise.
    """

    def __init__(self):
        self.calls = []
        self.errors = {}
        self._gates = {}

    @staticmethod
    def url_for(surah_number, verse_number, reciter_id=7):
        return f"fake://{reciter_id}/{surah_number:03d}{verse_number:03d}.mp3"

    def hold(self, surah_number, verse_number):
        self._gates[(surah_number, verse_number)] = asyncio.Event()

    def release(self, surah_number, verse_number):
        self._gates[(surah_number, verse_number)].set()

    async def resolve_audio_source(self, surah_number, verse_number, reciter_id):
        self.calls.append((surah_number, verse_number, reciter_id))
        gate = self._gates.get((surah_number, verse_number))
        if gate is not None:
            await gate.wait()
        error = self.errors.get((surah_number, verse_number))
        if error is not None:
            raise error
        return self.url_for(surah_number, verse_number, reciter_id)


class ManualTimer:
    def __init__(self, due, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler(Scheduler):
    """Scheduler whose clock only moves when a test calls ``advance()``."""

    def __init__(self):
        self.now = 0.0
        self.timers = []

    def call_later(self, delay, callback):
        timer = ManualTimer(self.now + delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self):
        return [t for t in self.timers if not t.cancelled]

    def advance(self, seconds):
        self.now += seconds
        for timer in list(self.timers):
            if not timer.cancelled and timer.due <= self.now:
                self.timers.remove(timer)
                timer.callback()


async def settle(rounds=5):
    """Let spawned controller tasks run to completion."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def settings(tmp_path):
    """Settings pointing every file into a temporary directory."""
    return MurattalSettings(
        preferences_path=tmp_path / "preferences.json",
        progress_db_path=tmp_path / "progress.db",
        audio_cache_dir=tmp_path / "cache",
        verify_audio_sources=False,
    )


@pytest.fixture
def preference_store(settings):
    return PreferenceStore(settings=settings)


@pytest.fixture
def adapter():
    return FakeMediaAdapter()


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def make_controller(adapter, resolver, preference_store, scheduler, settings):
    """Factory building controllers wired to the shared fakes."""

    def factory(**kwargs):
        kwargs.setdefault("adapter", adapter)
        kwargs.setdefault("resolver", resolver)
        kwargs.setdefault("preferences", preference_store)
        kwargs.setdefault("scheduler", scheduler)
        kwargs.setdefault("settings", settings)
        return PlaybackController(**kwargs)

    return factory


@pytest.fixture
def controller(make_controller):
    return make_controller()


@pytest.fixture(name="settle")
def settle_fixture():
    return settle
