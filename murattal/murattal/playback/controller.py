"""
Verse-by-verse playback controller.

The controller owns one media adapter and drives it through the playback
phases (idle, loading, playing, paused, error). It resolves verse audio,
repeats verses, advances through a surah, and persists the user's playback
preferences.

All methods must be called from the thread running the asyncio event loop.
``play()`` and the methods built on it return an ``asyncio.Task``: callers can
ignore it (fire and forget) or await it to know the start attempt finished.
Neither the call nor the task raises; failures end up in ``phase`` and the
``on_error`` callback.
"""

import asyncio
import logging
import math
from typing import Callable, Coroutine, Optional

from murattal._logging import log_playback_error, log_playback_start, log_verse_ended
from murattal.config import MurattalSettings, get_settings
from murattal.data import is_known_reciter
from murattal.exceptions import MurattalError, PlaybackError, PreferencesError, SourceResolutionError
from murattal.models import PlaybackPhase, PlaybackSelection, RepeatMode
from murattal.models.preferences import REPEAT_COUNT_RANGE, SPEED_RANGE, VOLUME_RANGE, clamp
from murattal.playback.base import MediaAdapter, MediaEvent, MediaSignal
from murattal.playback.policy import AfterVerseAction, decide_after_verse, next_verse, previous_verse
from murattal.playback.preferences import PreferenceStore
from murattal.playback.resolver import ContentResolver, EveryAyahResolver
from murattal.playback.scheduler import AsyncioScheduler, Scheduler, TimerHandle
from murattal.playback.utils import format_time

logger = logging.getLogger(__name__)


class PlaybackController:
    """
    Playback state machine for verse-by-verse Quran recitation.

    Example:
        controller = PlaybackController(PygameMediaAdapter(), on_error=show_toast)
        controller.set_repeat_mode("verse")
        await controller.play(1, 1)

    Callbacks:
        on_play(surah, verse): the backend confirmed playback started
        on_pause(): the backend confirmed a pause
        on_error(error): resolution or playback failed (a MurattalError)
        on_time_update(current_time, duration): position changed
        on_phase_change(phase): the playback phase changed
    """

    format_time = staticmethod(format_time)

    def __init__(
        self,
        adapter: MediaAdapter,
        resolver: ContentResolver | None = None,
        preferences: PreferenceStore | None = None,
        scheduler: Scheduler | None = None,
        settings: MurattalSettings | None = None,
        reciter_id: int | None = None,
        total_verses: int | None = None,
        on_play: Callable[[int, int], None] | None = None,
        on_pause: Callable[[], None] | None = None,
        on_error: Callable[[MurattalError], None] | None = None,
        on_time_update: Callable[[float, float], None] | None = None,
        on_phase_change: Callable[[PlaybackPhase], None] | None = None,
    ):
        """
        Initialize the controller and load stored preferences.

        Args:
            adapter: Media backend the controller will own
            resolver: Audio source resolver (EveryAyahResolver by default)
            preferences: Preference store (JSON file from settings by default)
            scheduler: Timer factory for the start fallback
            settings: Settings instance to use
            reciter_id: Reciter for this session, overriding the stored one (not persisted)
            total_verses: Fixed verse count for next/previous bounds
                (defaults to the resolver's count for the current surah)
        """
        self._settings = settings or get_settings()
        self._adapter = adapter
        self._resolver = resolver or EveryAyahResolver(self._settings)
        self._preferences = preferences or PreferenceStore(settings=self._settings)
        self._scheduler = scheduler or AsyncioScheduler()

        self.on_play = on_play
        self.on_pause = on_pause
        self.on_error = on_error
        self.on_time_update = on_time_update
        self.on_phase_change = on_phase_change

        prefs = self._preferences.load()
        self._volume = prefs.volume
        self._speed = prefs.speed
        self._repeat_mode = prefs.repeat_mode
        self._repeat_count = prefs.repeat_count
        self._reciter_id = prefs.reciter_id
        if reciter_id is not None:
            if is_known_reciter(reciter_id):
                self._reciter_id = reciter_id
            else:
                logger.warning(f"Ignoring unknown reciter {reciter_id}")

        self._phase = PlaybackPhase.IDLE
        self._selection: Optional[PlaybackSelection] = None
        self._loaded_selection: Optional[PlaybackSelection] = None
        self._current_time = 0.0
        self._duration = 0.0
        self._repeat_iteration = 0
        self._total_verses = total_verses

        # Bumped by play/pause/stop; continuations holding an older value are stale.
        self._request_id = 0
        self._start_fallback: Optional[TimerHandle] = None
        self._tasks: set[asyncio.Task] = set()

        self._adapter.set_event_handler(self._handle_media_event)
        self._adapter.set_volume(self._volume)
        self._adapter.set_speed(self._speed)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def phase(self) -> PlaybackPhase:
        return self._phase

    @property
    def selection(self) -> Optional[PlaybackSelection]:
        return self._selection

    @property
    def current_surah(self) -> Optional[int]:
        return self._selection.surah_number if self._selection else None

    @property
    def current_verse(self) -> Optional[int]:
        return self._selection.verse_number if self._selection else None

    @property
    def current_time(self) -> float:
        return self._current_time

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def volume(self) -> float:
        return self._volume

    @property
    def speed(self) -> float:
        return self._speed

    @property
    def repeat_mode(self) -> RepeatMode:
        return self._repeat_mode

    @property
    def repeat_count(self) -> int:
        return self._repeat_count

    @property
    def repeat_iteration(self) -> int:
        """Completed repeats of the current verse in verse-repeat mode."""
        return self._repeat_iteration

    @property
    def reciter_id(self) -> int:
        return self._reciter_id

    @property
    def total_verses(self) -> Optional[int]:
        return self._total_verses

    @total_verses.setter
    def total_verses(self, value: Optional[int]) -> None:
        self._total_verses = value

    def is_playing(self) -> bool:
        return self._phase == PlaybackPhase.PLAYING

    def can_play_next(self, total_verses: int | None = None) -> bool:
        """Whether ``play_next`` would start another verse."""
        if self._selection is None:
            return False
        total = self._bound(total_verses)
        return next_verse(self._selection.verse_number, total, self._repeat_mode) is not None

    def can_play_previous(self) -> bool:
        if self._selection is None:
            return False
        return previous_verse(self._selection.verse_number) is not None

    # ------------------------------------------------------------------
    # Controls
    # ------------------------------------------------------------------

    def play(self, surah_number: int, verse_number: int) -> asyncio.Task:
        """
        Load and play a verse.

        The selection, phase ('loading') and repeat iteration change before
        this returns; resolving and starting the audio happen in the returned
        task. A later ``play()`` supersedes this one even if this one has not
        finished resolving.

        Args:
            surah_number: Surah number (1-114)
            verse_number: Verse number within the surah

        Returns:
            Task completing once the start attempt has succeeded or failed
        """
        request_id = self._begin_request()
        self._selection = PlaybackSelection(surah_number=surah_number, verse_number=verse_number)
        self._repeat_iteration = 0
        self._current_time = 0.0
        self._duration = 0.0
        self._set_phase(PlaybackPhase.LOADING)

        reciter_id = self._reciter_id
        log_playback_start(surah_number, verse_number, reciter_id)
        return self._spawn(self._load_and_start(request_id, self._selection, reciter_id))

    def pause(self) -> None:
        """Pause playback. Abandons a verse that is still loading."""
        self._begin_request()
        self._adapter.pause()

    def toggle_play_pause(self) -> Optional[asyncio.Task]:
        """
        Pause when playing; otherwise resume or restart the current verse.

        Returns:
            The start task when playback was (re)started, else None
        """
        if self._phase == PlaybackPhase.PLAYING:
            self.pause()
            return None

        if self._selection is None:
            return None

        if (
            self._adapter.source
            and not self._adapter.ended
            and self._loaded_selection == self._selection
        ):
            request_id = self._begin_request()
            return self._spawn(self._start_adapter(request_id))

        return self.play(self._selection.surah_number, self._selection.verse_number)

    def seek(self, seconds: float) -> None:
        """Move the playhead, clamped to [0, duration]. No-op without a selection."""
        if self._selection is None:
            return
        target = clamp(float(seconds), 0.0, self._duration)
        self._adapter.set_position(target)
        self._current_time = target

    def stop(self) -> None:
        """
        Stop playback and rewind.

        The selection is kept so the last verse can still be shown or replayed.
        """
        self._begin_request()
        self._adapter.pause()
        self._adapter.set_position(0.0)
        self._current_time = 0.0
        self._repeat_iteration = 0
        self._set_phase(PlaybackPhase.IDLE)

    def play_next(self, total_verses: int | None = None) -> Optional[asyncio.Task]:
        """
        Play the following verse.

        At the last verse, surah-repeat wraps to verse 1 and any other mode
        stops playback.
        """
        if self._selection is None:
            return None
        following = next_verse(self._selection.verse_number, self._bound(total_verses), self._repeat_mode)
        if following is None:
            self.stop()
            return None
        return self.play(self._selection.surah_number, following)

    def play_previous(self) -> Optional[asyncio.Task]:
        """Play the preceding verse. No-op at verse 1."""
        if self._selection is None:
            return None
        preceding = previous_verse(self._selection.verse_number)
        if preceding is None:
            return None
        return self.play(self._selection.surah_number, preceding)

    # ------------------------------------------------------------------
    # Preferences
    # ------------------------------------------------------------------

    def set_volume(self, volume: float) -> None:
        self._volume = clamp(float(volume), *VOLUME_RANGE)
        self._adapter.set_volume(self._volume)
        self._persist(volume=self._volume)

    def set_speed(self, speed: float) -> None:
        self._speed = clamp(float(speed), *SPEED_RANGE)
        self._adapter.set_speed(self._speed)
        self._persist(speed=self._speed)

    def set_repeat_mode(self, mode: RepeatMode | str) -> None:
        """Change the repeat mode; any in-progress verse repeat starts over."""
        try:
            mode = RepeatMode(mode)
        except ValueError:
            logger.warning(f"Ignoring unknown repeat mode {mode!r}")
            return
        if mode == RepeatMode.RANGE:
            logger.warning("Range repeat is not supported, keeping current mode")
            return
        self._repeat_mode = mode
        self._repeat_iteration = 0
        self._persist(repeat_mode=mode.value)

    def set_repeat_count(self, count: int) -> None:
        self._repeat_count = int(clamp(float(count), *REPEAT_COUNT_RANGE))
        self._persist(repeat_count=self._repeat_count)

    def set_reciter_id(self, reciter_id: int) -> None:
        """Change the preferred reciter. Takes effect from the next verse loaded."""
        if not is_known_reciter(reciter_id):
            logger.warning(f"Ignoring unknown reciter {reciter_id}")
            return
        self._reciter_id = reciter_id
        self._persist(reciter_id=reciter_id)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Stop playback, cancel pending work and release the adapter."""
        self._begin_request()
        for task in list(self._tasks):
            task.cancel()
        self._adapter.set_event_handler(None)
        self._adapter.close()
        self._loaded_selection = None
        self._set_phase(PlaybackPhase.IDLE)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _begin_request(self) -> int:
        self._cancel_start_fallback()
        self._request_id += 1
        return self._request_id

    def _is_current(self, request_id: int) -> bool:
        return request_id == self._request_id

    def _spawn(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _set_phase(self, phase: PlaybackPhase) -> None:
        if phase == self._phase:
            return
        self._phase = phase
        self._notify(self.on_phase_change, phase)

    def _notify(self, callback: Optional[Callable], *args) -> None:
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            logger.exception(f"Playback callback {callback!r} raised")

    def _persist(self, **changes) -> None:
        try:
            self._preferences.save(**changes)
        except PreferencesError as e:
            logger.warning(f"Preference not saved: {e}")

    def _bound(self, total_verses: int | None) -> int:
        """Verse count limiting next/previous for the current surah."""
        if total_verses is not None:
            return total_verses
        if self._total_verses is not None:
            return self._total_verses
        try:
            return self._resolver.total_verses(self._selection.surah_number)
        except ValueError:
            # Unknown surah: nothing follows the current verse.
            return self._selection.verse_number

    async def _load_and_start(self, request_id: int, selection: PlaybackSelection, reciter_id: int) -> None:
        try:
            url = await self._resolver.resolve_audio_source(
                selection.surah_number, selection.verse_number, reciter_id
            )
        except MurattalError as e:
            self._fail(request_id, e)
            return
        except Exception as e:
            self._fail(
                request_id,
                SourceResolutionError(
                    f"Failed to resolve audio: {e}",
                    surah_number=selection.surah_number,
                    verse_number=selection.verse_number,
                    reciter_id=reciter_id,
                ),
            )
            return

        if not self._is_current(request_id):
            logger.debug(f"Discarding source for superseded request {selection}")
            return

        self._adapter.load(url)
        self._loaded_selection = selection
        # A freshly loaded source does not inherit rate and volume.
        self._adapter.set_volume(self._volume)
        self._adapter.set_speed(self._speed)
        await self._start_adapter(request_id)

    async def _start_adapter(self, request_id: int) -> None:
        try:
            await self._adapter.play()
        except MurattalError as e:
            self._fail(request_id, e)
            return
        except Exception as e:
            self._fail(request_id, PlaybackError(f"Failed to play audio: {e}", source=self._adapter.source))
            return

        if self._is_current(request_id):
            self._arm_start_fallback(request_id)

    def _replay(self) -> None:
        self._adapter.set_position(0.0)
        self._current_time = 0.0
        self._spawn(self._start_adapter(self._request_id))

    def _fail(self, request_id: int, error: MurattalError) -> None:
        if not self._is_current(request_id):
            logger.debug(f"Ignoring failure of superseded request: {error}")
            return
        self._cancel_start_fallback()
        log_playback_error(str(error))
        self._set_phase(PlaybackPhase.ERROR)
        self._notify(self.on_error, error)

    def _arm_start_fallback(self, request_id: int) -> None:
        """
        Force 'playing' shortly after a successful start.

        Some backends start output without ever reporting it. The timer is
        cancelled by the real start signal and by every new request.
        """
        self._cancel_start_fallback()
        if self._phase not in (PlaybackPhase.LOADING, PlaybackPhase.PAUSED):
            return

        def fire() -> None:
            self._start_fallback = None
            if self._is_current(request_id) and self._phase in (PlaybackPhase.LOADING, PlaybackPhase.PAUSED):
                logger.debug("No start signal from media backend, assuming playback started")
                self._set_phase(PlaybackPhase.PLAYING)

        self._start_fallback = self._scheduler.call_later(self._settings.start_fallback_ms / 1000.0, fire)

    def _cancel_start_fallback(self) -> None:
        if self._start_fallback is not None:
            self._start_fallback.cancel()
            self._start_fallback = None

    def _handle_media_event(self, event: MediaEvent) -> None:
        signal = event.signal

        if signal == MediaSignal.LOAD_START:
            if self._selection is not None:
                self._set_phase(PlaybackPhase.LOADING)

        elif signal == MediaSignal.STARTED:
            self._cancel_start_fallback()
            self._set_phase(PlaybackPhase.PLAYING)
            self._adapter.set_volume(self._volume)
            self._adapter.set_speed(self._speed)
            if self._selection is not None:
                self._notify(self.on_play, self._selection.surah_number, self._selection.verse_number)

        elif signal == MediaSignal.PAUSED:
            self._set_phase(PlaybackPhase.PAUSED)
            self._notify(self.on_pause)

        elif signal == MediaSignal.ENDED:
            self._handle_ended()

        elif signal == MediaSignal.TIME_UPDATE:
            if event.value is not None and not math.isnan(event.value):
                self._current_time = event.value
            self._notify(self.on_time_update, self._current_time, self._duration)

        elif signal == MediaSignal.METADATA_LOADED:
            if event.value is not None and math.isfinite(event.value):
                self._duration = max(0.0, event.value)

        elif signal == MediaSignal.ERROR:
            self._cancel_start_fallback()
            error = PlaybackError(
                f"Audio error: {event.message}" if event.message else "Unknown audio error",
                source=self._adapter.source,
            )
            log_playback_error(str(error))
            self._set_phase(PlaybackPhase.ERROR)
            self._notify(self.on_error, error)

    def _handle_ended(self) -> None:
        # An old source finishing while a newer verse loads must not advance anything.
        if self._selection is None or self._phase in (
            PlaybackPhase.LOADING,
            PlaybackPhase.IDLE,
            PlaybackPhase.ERROR,
        ):
            return

        selection = self._selection
        log_verse_ended(selection.surah_number, selection.verse_number, self._repeat_iteration)

        decision = decide_after_verse(
            self._repeat_mode,
            self._repeat_count,
            self._repeat_iteration,
            selection.verse_number,
            self._bound(None),
        )

        if decision.action == AfterVerseAction.REPLAY:
            self._repeat_iteration = decision.iteration
            self._replay()
        elif decision.action == AfterVerseAction.ADVANCE:
            self._repeat_iteration = 0
            self.play(selection.surah_number, decision.verse_number)
        else:
            self._repeat_iteration = 0
            self.stop()
