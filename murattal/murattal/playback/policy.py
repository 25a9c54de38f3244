"""
Auto-advance and repeat rules.

Pure functions: they look at the repeat settings and the position in the surah
and say what to play next. The controller carries the decisions out.
"""

from dataclasses import dataclass
from enum import Enum

from murattal.data import get_next_ayah, get_previous_ayah
from murattal.models import RepeatMode


class AfterVerseAction(str, Enum):
    """What to do once a verse has played to its end."""

    REPLAY = "replay"  # same source again, no re-resolution
    ADVANCE = "advance"  # play another verse of the same surah
    STOP = "stop"


@dataclass(frozen=True)
class AfterVerse:
    action: AfterVerseAction
    verse_number: int | None = None
    iteration: int = 0


def next_verse(verse_number: int, total_verses: int, repeat_mode: RepeatMode) -> int | None:
    """
    The verse that follows ``verse_number``.

    Past the last verse, surah-repeat wraps to verse 1; every other mode
    returns None.
    """
    following = get_next_ayah(verse_number, total_verses)
    if following is None and repeat_mode == RepeatMode.SURAH:
        return 1
    return following


def previous_verse(verse_number: int) -> int | None:
    return get_previous_ayah(verse_number)


def decide_after_verse(
    repeat_mode: RepeatMode,
    repeat_count: int,
    iteration: int,
    verse_number: int,
    total_verses: int,
) -> AfterVerse:
    """
    Decide what happens when a verse ends.

    Verse-repeat is exhausted first: with ``repeat_count`` plays per verse,
    the verse replays while ``iteration < repeat_count - 1``. Only then is
    moving to another verse considered, and the iteration starts over at 0.

    Args:
        repeat_mode: Active repeat mode
        repeat_count: Plays per verse in verse-repeat mode
        iteration: Completed repeats of the current verse
        verse_number: Verse that just ended
        total_verses: Verses in the current surah

    Returns:
        AfterVerse describing the next step
    """
    if repeat_mode == RepeatMode.VERSE and iteration < repeat_count - 1:
        return AfterVerse(AfterVerseAction.REPLAY, verse_number, iteration + 1)

    following = next_verse(verse_number, total_verses, repeat_mode)
    if following is None:
        return AfterVerse(AfterVerseAction.STOP)
    return AfterVerse(AfterVerseAction.ADVANCE, following)
