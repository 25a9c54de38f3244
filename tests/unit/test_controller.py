"""
Unit tests for the playback controller.
"""

import asyncio
import logging

import pytest

from conftest import FakeMediaAdapter, FakeResolver
from murattal.exceptions import PlaybackError, SourceResolutionError
from murattal.models import PlaybackPhase, RepeatMode
from murattal.playback import MediaSignal, PreferenceStore


def run(coro):
    return asyncio.run(coro)


class TestInitialState:
    """Test a freshly constructed controller."""

    def test_starts_idle(self, controller):
        assert controller.phase == PlaybackPhase.IDLE
        assert controller.selection is None
        assert controller.current_surah is None
        assert controller.current_verse is None
        assert controller.repeat_iteration == 0
        assert not controller.is_playing()

    def test_defaults_from_empty_store(self, controller):
        assert controller.volume == 1.0
        assert controller.speed == 1.0
        assert controller.repeat_mode == RepeatMode.NONE
        assert controller.repeat_count == 3
        assert controller.reciter_id == 7

    def test_applies_volume_and_speed_to_adapter(self, controller, adapter):
        assert adapter.volumes[-1] == 1.0
        assert adapter.speeds[-1] == 1.0

    def test_session_reciter_overrides_store(self, make_controller, preference_store):
        controller = make_controller(reciter_id=4)
        assert controller.reciter_id == 4
        assert preference_store.load().reciter_id == 7

    def test_unknown_session_reciter_ignored(self, make_controller):
        controller = make_controller(reciter_id=999)
        assert controller.reciter_id == 7

    def test_format_time_exposed(self, controller):
        assert controller.format_time(125) == "2:05"


class TestPlay:
    """Test starting playback."""

    def test_play_sets_loading_synchronously(self, controller):
        async def scenario():
            task = controller.play(1, 1)
            assert controller.phase == PlaybackPhase.LOADING
            assert controller.current_surah == 1
            assert controller.current_verse == 1
            await task

        run(scenario())

    def test_play_reaches_playing(self, controller, adapter, resolver):
        played = []
        controller.on_play = lambda surah, verse: played.append((surah, verse))

        async def scenario():
            await controller.play(1, 3)

        run(scenario())

        assert controller.phase == PlaybackPhase.PLAYING
        assert controller.is_playing()
        assert adapter.loads == [FakeResolver.url_for(1, 3)]
        assert resolver.calls == [(1, 3, 7)]
        assert played == [(1, 3)]
        assert controller.duration == 10.0

    def test_play_uses_current_reciter(self, controller, resolver):
        controller.set_reciter_id(4)

        async def scenario():
            await controller.play(2, 255)

        run(scenario())
        assert resolver.calls == [(2, 255, 4)]

    def test_play_resets_repeat_iteration(self, controller, adapter, settle):
        controller.set_repeat_mode("verse")

        async def scenario():
            await controller.play(1, 1)
            adapter.finish()
            assert controller.repeat_iteration == 1
            await settle()
            await controller.play(1, 4)

        run(scenario())
        assert controller.repeat_iteration == 0

    def test_volume_and_speed_reapplied_after_load(self, controller, adapter):
        controller.set_volume(0.4)
        controller.set_speed(1.5)
        adapter.volumes.clear()
        adapter.speeds.clear()

        async def scenario():
            await controller.play(1, 1)

        run(scenario())
        assert adapter.volumes and all(v == 0.4 for v in adapter.volumes)
        assert adapter.speeds and all(s == 1.5 for s in adapter.speeds)


class TestStaleRequests:
    """Test that only the most recent request takes effect."""

    def test_second_play_wins(self, controller, adapter, resolver):
        resolver.hold(1, 1)

        async def scenario():
            first = controller.play(1, 1)
            second = controller.play(1, 2)
            await second
            resolver.release(1, 1)
            await first

        run(scenario())

        assert controller.current_verse == 2
        assert controller.phase == PlaybackPhase.PLAYING
        assert adapter.loads == [FakeResolver.url_for(1, 2)]

    def test_stale_failure_does_not_surface(self, controller, resolver):
        errors = []
        controller.on_error = errors.append
        resolver.hold(1, 1)
        resolver.errors[(1, 1)] = SourceResolutionError("gone", surah_number=1, verse_number=1)

        async def scenario():
            first = controller.play(1, 1)
            await controller.play(1, 2)
            resolver.release(1, 1)
            await first

        run(scenario())

        assert errors == []
        assert controller.phase == PlaybackPhase.PLAYING

    def test_pause_abandons_loading_verse(self, controller, adapter, resolver):
        resolver.hold(1, 1)

        async def scenario():
            task = controller.play(1, 1)
            await asyncio.sleep(0)
            controller.pause()
            resolver.release(1, 1)
            await task

        run(scenario())

        assert adapter.loads == []
        assert controller.phase == PlaybackPhase.PAUSED

    def test_ended_while_loading_is_ignored(self, controller, adapter, resolver):
        resolver.hold(1, 2)

        async def scenario():
            await controller.play(1, 1)
            task = controller.play(1, 2)
            adapter.finish()
            assert controller.current_verse == 2
            assert controller.phase == PlaybackPhase.LOADING
            resolver.release(1, 2)
            await task

        run(scenario())
        assert resolver.calls == [(1, 1, 7), (1, 2, 7)]
        assert controller.current_verse == 2


class TestPauseAndToggle:
    """Test pause, resume and toggle."""

    def test_pause_twice(self, controller, adapter):
        paused = []
        controller.on_pause = lambda: paused.append(True)

        async def scenario():
            await controller.play(1, 1)
            controller.pause()
            controller.pause()

        run(scenario())

        assert controller.phase == PlaybackPhase.PAUSED
        assert len(paused) == 2

    def test_toggle_pauses_when_playing(self, controller):
        async def scenario():
            await controller.play(1, 1)
            assert controller.toggle_play_pause() is None

        run(scenario())
        assert controller.phase == PlaybackPhase.PAUSED

    def test_toggle_resumes_without_reloading(self, controller, adapter, resolver):
        async def scenario():
            await controller.play(1, 1)
            controller.toggle_play_pause()
            task = controller.toggle_play_pause()
            assert task is not None
            await task

        run(scenario())

        assert controller.phase == PlaybackPhase.PLAYING
        assert len(adapter.loads) == 1
        assert len(resolver.calls) == 1
        assert adapter.play_calls == 2

    def test_toggle_without_selection(self, controller):
        assert controller.toggle_play_pause() is None
        assert controller.phase == PlaybackPhase.IDLE

    def test_toggle_after_stop_replays(self, controller, adapter):
        async def scenario():
            await controller.play(1, 5)
            controller.stop()
            await controller.toggle_play_pause()

        run(scenario())
        assert controller.phase == PlaybackPhase.PLAYING
        assert controller.current_verse == 5


class TestStopAndSeek:
    """Test stop and seek."""

    def test_stop_rewinds_and_keeps_selection(self, controller, adapter):
        async def scenario():
            await controller.play(3, 10)
            adapter.tick(4.0)
            controller.stop()

        run(scenario())

        assert controller.phase == PlaybackPhase.IDLE
        assert controller.current_time == 0.0
        assert controller.current_surah == 3
        assert controller.current_verse == 10
        assert adapter.positions[-1] == 0.0

    def test_seek_clamps_to_duration(self, controller, adapter):
        async def scenario():
            await controller.play(1, 1)
            controller.seek(50)
            assert controller.current_time == 10.0
            controller.seek(-5)
            assert controller.current_time == 0.0
            controller.seek(4.5)

        run(scenario())
        assert adapter.positions == [10.0, 0.0, 4.5]

    def test_seek_without_selection_is_noop(self, controller, adapter):
        controller.seek(5)
        assert adapter.positions == []

    def test_time_update_callback(self, controller, adapter):
        updates = []
        controller.on_time_update = lambda t, d: updates.append((t, d))

        async def scenario():
            await controller.play(1, 1)
            adapter.tick(3.5)

        run(scenario())
        assert controller.current_time == 3.5
        assert updates == [(3.5, 10.0)]


class TestAutoAdvance:
    """Test what happens when a verse ends."""

    def test_none_mode_advances(self, controller, adapter, settle):
        async def scenario():
            await controller.play(1, 1)
            adapter.finish()
            assert controller.current_verse == 2
            await settle()

        run(scenario())
        assert controller.phase == PlaybackPhase.PLAYING
        assert adapter.loads[-1] == FakeResolver.url_for(1, 2)

    def test_none_mode_stops_after_last_verse(self, make_controller, adapter):
        controller = make_controller(total_verses=7)
        errors = []
        controller.on_error = errors.append

        async def scenario():
            await controller.play(1, 7)
            adapter.finish()

        run(scenario())

        assert controller.phase == PlaybackPhase.IDLE
        assert errors == []
        assert controller.current_verse == 7

    def test_surah_mode_wraps(self, make_controller, adapter, settle):
        controller = make_controller(total_verses=7)
        controller.set_repeat_mode(RepeatMode.SURAH)

        async def scenario():
            await controller.play(1, 7)
            adapter.finish()
            await settle()

        run(scenario())
        assert controller.current_verse == 1
        assert controller.phase == PlaybackPhase.PLAYING

    def test_verse_mode_repeats_then_advances(self, make_controller, adapter, resolver, settle):
        controller = make_controller(total_verses=7)
        controller.set_repeat_mode("verse")
        controller.set_repeat_count(3)

        async def scenario():
            await controller.play(1, 1)

            adapter.finish()
            await settle()
            assert controller.current_verse == 1
            assert controller.repeat_iteration == 1

            adapter.finish()
            await settle()
            assert controller.current_verse == 1
            assert controller.repeat_iteration == 2

            adapter.finish()
            await settle()

        run(scenario())

        assert controller.current_verse == 2
        assert controller.repeat_iteration == 0
        assert controller.phase == PlaybackPhase.PLAYING
        # Repeats reuse the loaded source
        assert resolver.calls == [(1, 1, 7), (1, 2, 7)]
        assert adapter.play_calls == 4

    def test_verse_mode_count_one_advances(self, controller, adapter, settle):
        controller.set_repeat_mode("verse")
        controller.set_repeat_count(1)

        async def scenario():
            await controller.play(1, 1)
            adapter.finish()
            await settle()

        run(scenario())
        assert controller.current_verse == 2

    def test_default_bound_uses_surah_length(self, controller, adapter):
        async def scenario():
            await controller.play(112, 4)
            adapter.finish()

        run(scenario())
        assert controller.phase == PlaybackPhase.IDLE

    def test_changing_mode_resets_iteration(self, controller, adapter, settle):
        controller.set_repeat_mode("verse")

        async def scenario():
            await controller.play(1, 1)
            adapter.finish()
            await settle()

        run(scenario())
        assert controller.repeat_iteration == 1
        controller.set_repeat_mode("none")
        assert controller.repeat_iteration == 0


class TestNavigation:
    """Test next/previous controls."""

    def test_can_play_next_at_last_verse(self, controller):
        async def scenario():
            await controller.play(1, 7)

        run(scenario())

        assert controller.can_play_next(7) is False
        controller.set_repeat_mode("surah")
        assert controller.can_play_next(7) is True

    def test_can_play_without_selection(self, controller):
        assert controller.can_play_next() is False
        assert controller.can_play_previous() is False

    def test_play_next_and_previous(self, controller):
        async def scenario():
            await controller.play(2, 10)
            await controller.play_next()
            assert controller.current_verse == 11
            await controller.play_previous()
            await controller.play_previous()

        run(scenario())
        assert controller.current_verse == 9

    def test_play_previous_at_first_verse(self, controller):
        async def scenario():
            await controller.play(1, 1)
            assert controller.can_play_previous() is False
            assert controller.play_previous() is None

        run(scenario())
        assert controller.current_verse == 1

    def test_play_next_at_end_stops(self, controller):
        async def scenario():
            await controller.play(1, 7)
            assert controller.play_next(7) is None

        run(scenario())
        assert controller.phase == PlaybackPhase.IDLE

    def test_total_verses_property(self, controller):
        async def scenario():
            await controller.play(2, 5)

        run(scenario())
        controller.total_verses = 5
        assert controller.can_play_next() is False


class TestErrors:
    """Test error reporting."""

    def test_resolution_error(self, controller, resolver):
        errors = []
        controller.on_error = errors.append
        resolver.errors[(1, 1)] = SourceResolutionError("No playable audio source found", 1, 1, 7)

        async def scenario():
            await controller.play(1, 1)

        run(scenario())

        assert controller.phase == PlaybackPhase.ERROR
        assert len(errors) == 1
        assert isinstance(errors[0], SourceResolutionError)

    def test_unexpected_resolver_exception_is_wrapped(self, controller, resolver):
        errors = []
        controller.on_error = errors.append
        resolver.errors[(1, 1)] = RuntimeError("boom")

        async def scenario():
            await controller.play(1, 1)

        run(scenario())
        assert isinstance(errors[0], SourceResolutionError)
        assert "boom" in str(errors[0])

    def test_adapter_play_failure(self, controller, adapter):
        errors = []
        controller.on_error = errors.append
        adapter.fail_play = True

        async def scenario():
            await controller.play(1, 1)

        run(scenario())
        assert controller.phase == PlaybackPhase.ERROR
        assert isinstance(errors[0], PlaybackError)

    def test_media_error_event(self, controller, adapter):
        errors = []
        controller.on_error = errors.append

        async def scenario():
            await controller.play(1, 1)
            adapter.fail("decode failed")

        run(scenario())
        assert controller.phase == PlaybackPhase.ERROR
        assert "decode failed" in str(errors[0])

    def test_invalid_verse_reports_error(self, controller, resolver):
        async def scenario():
            await controller.play(200, 1)

        resolver.errors[(200, 1)] = SourceResolutionError("Verse does not exist", 200, 1)
        run(scenario())
        assert controller.phase == PlaybackPhase.ERROR

    def test_play_after_error_recovers(self, controller, resolver):
        resolver.errors[(1, 1)] = SourceResolutionError("gone", 1, 1)

        async def scenario():
            await controller.play(1, 1)
            assert controller.phase == PlaybackPhase.ERROR
            await controller.play(1, 2)

        run(scenario())
        assert controller.phase == PlaybackPhase.PLAYING

    def test_callback_exception_is_logged(self, controller, caplog):
        def broken(surah, verse):
            raise RuntimeError("listener bug")

        controller.on_play = broken

        async def scenario():
            await controller.play(1, 1)

        with caplog.at_level(logging.ERROR, logger="murattal"):
            run(scenario())

        assert controller.phase == PlaybackPhase.PLAYING
        assert "listener bug" in caplog.text


class TestStartFallback:
    """Test the timer forcing 'playing' for silent backends."""

    def test_fallback_marks_playing(self, make_controller, scheduler):
        adapter = FakeMediaAdapter(announce_start=False)
        controller = make_controller(adapter=adapter)

        async def scenario():
            await controller.play(1, 1)

        run(scenario())

        assert controller.phase == PlaybackPhase.LOADING
        assert len(scheduler.pending) == 1
        scheduler.advance(0.01)
        assert controller.phase == PlaybackPhase.PLAYING

    def test_fallback_cancelled_by_pause(self, make_controller, scheduler):
        adapter = FakeMediaAdapter(announce_start=False)
        controller = make_controller(adapter=adapter)

        async def scenario():
            await controller.play(1, 1)
            controller.pause()

        run(scenario())

        assert scheduler.pending == []
        scheduler.advance(1.0)
        assert controller.phase == PlaybackPhase.PAUSED

    def test_fallback_ignored_for_superseded_request(self, make_controller, scheduler, resolver):
        adapter = FakeMediaAdapter(announce_start=False)
        controller = make_controller(adapter=adapter)
        resolver.hold(1, 2)

        async def scenario():
            await controller.play(1, 1)
            task = controller.play(1, 2)
            scheduler.advance(1.0)
            assert controller.phase == PlaybackPhase.LOADING
            resolver.release(1, 2)
            await task

        run(scenario())

    def test_not_armed_when_start_reported(self, controller, scheduler):
        async def scenario():
            await controller.play(1, 1)

        run(scenario())
        assert scheduler.pending == []

    def test_real_start_cancels_timer(self, make_controller, scheduler):
        adapter = FakeMediaAdapter(announce_start=False)
        controller = make_controller(adapter=adapter)

        async def scenario():
            await controller.play(1, 1)
            adapter.emit(MediaSignal.STARTED)

        run(scenario())
        assert controller.phase == PlaybackPhase.PLAYING
        assert scheduler.pending == []


class TestPreferences:
    """Test preference setters and persistence."""

    @pytest.mark.parametrize("value,expected", [(5, 1.0), (-1, 0.0), (0.3, 0.3)])
    def test_set_volume_clamps(self, controller, adapter, value, expected):
        controller.set_volume(value)
        assert controller.volume == expected
        assert adapter.volumes[-1] == expected

    @pytest.mark.parametrize("value,expected", [(0.1, 0.5), (3, 2.0), (1.25, 1.25)])
    def test_set_speed_clamps(self, controller, value, expected):
        controller.set_speed(value)
        assert controller.speed == expected

    @pytest.mark.parametrize("value,expected", [(99, 10), (0, 1), (4, 4)])
    def test_set_repeat_count_clamps(self, controller, value, expected):
        controller.set_repeat_count(value)
        assert controller.repeat_count == expected

    def test_range_mode_rejected(self, controller):
        controller.set_repeat_mode("verse")
        controller.set_repeat_mode("range")
        assert controller.repeat_mode == RepeatMode.VERSE

    def test_unknown_mode_rejected(self, controller):
        controller.set_repeat_mode("shuffle")
        assert controller.repeat_mode == RepeatMode.NONE

    def test_unknown_reciter_rejected(self, controller):
        controller.set_reciter_id(999)
        assert controller.reciter_id == 7

    def test_round_trip(self, make_controller):
        first = make_controller()
        first.set_volume(0.5)
        first.set_reciter_id(4)

        second = make_controller(adapter=FakeMediaAdapter())
        assert second.reciter_id == 4
        assert second.volume == 0.5
        assert second.speed == 1.0
        assert second.repeat_count == 3

    def test_save_failure_keeps_value(self, make_controller, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        store = PreferenceStore(path=blocker / "prefs.json")
        controller = make_controller(preferences=store)

        controller.set_volume(0.2)
        assert controller.volume == 0.2


class TestClose:
    """Test releasing the controller."""

    def test_close_releases_adapter(self, controller, adapter):
        async def scenario():
            await controller.play(1, 1)
            controller.close()

        run(scenario())

        assert adapter.closed
        assert controller.phase == PlaybackPhase.IDLE

    def test_events_after_close_ignored(self, controller, adapter):
        async def scenario():
            await controller.play(1, 1)
            controller.close()
            adapter.finish()

        run(scenario())
        assert controller.current_verse == 1
        assert controller.phase == PlaybackPhase.IDLE

    def test_close_abandons_pending_start(self, controller, adapter, resolver):
        resolver.hold(1, 1)

        async def scenario():
            task = controller.play(1, 1)
            await asyncio.sleep(0)
            controller.close()
            with pytest.raises(asyncio.CancelledError):
                await task

        run(scenario())
        assert adapter.loads == []


class TestPhaseChanges:
    def test_phase_callback_sequence(self, controller, adapter):
        phases = []
        controller.on_phase_change = phases.append

        async def scenario():
            await controller.play(1, 1)
            controller.pause()
            controller.stop()

        run(scenario())
        assert phases == [
            PlaybackPhase.LOADING,
            PlaybackPhase.PLAYING,
            PlaybackPhase.PAUSED,
            PlaybackPhase.IDLE,
        ]

    def test_waiting_for_idle_covers_every_verse(self, make_controller, adapter, settle):
        """is_playing() drops during loading between verses; the end is the idle phase."""
        done = asyncio.Event()
        controller = make_controller(
            total_verses=2,
            on_phase_change=lambda phase: phase in ("idle", "error") and done.set(),
        )

        async def scenario():
            await controller.play(1, 1)
            adapter.finish()
            assert controller.phase == PlaybackPhase.LOADING
            assert not controller.is_playing()
            assert not done.is_set()
            await settle()
            adapter.finish()
            await asyncio.wait_for(done.wait(), timeout=1)

        run(scenario())
        assert adapter.loads == [FakeResolver.url_for(1, 1), FakeResolver.url_for(1, 2)]
        assert controller.phase == PlaybackPhase.IDLE
