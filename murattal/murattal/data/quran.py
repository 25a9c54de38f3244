"""
Quran reference data helpers.

Surah metadata comes from the built-in tables in ``murattal.models.surah``;
the verse helpers work on plain integers and verse keys ("2:255").
"""

from functools import lru_cache

from murattal.exceptions import QuranDataError
from murattal.models import Surah
from murattal.models.surah import SURAH_NAMES, SURAH_AYAH_COUNTS

TOTAL_SURAHS = 114
TOTAL_AYAHS = 6236


def _check_surah_id(surah_id: int) -> None:
    if surah_id < 1 or surah_id > TOTAL_SURAHS:
        raise ValueError(f"Invalid surah_id: {surah_id}. Must be 1-{TOTAL_SURAHS}.")


def get_ayah_count(surah_id: int) -> int:
    """
    Get the total number of ayahs in a surah.

    Args:
        surah_id: Surah number (1-114)

    Returns:
        Number of ayahs in the surah
    """
    _check_surah_id(surah_id)
    return SURAH_AYAH_COUNTS[surah_id]


def get_surah_name(surah_id: int) -> str:
    """Arabic name of a surah."""
    _check_surah_id(surah_id)
    return SURAH_NAMES[surah_id]


def get_surah(surah_id: int) -> Surah:
    """
    Get metadata for a specific surah.

    Args:
        surah_id: Surah number (1-114)

    Returns:
        Surah object with metadata
    """
    return Surah.from_id(surah_id)


@lru_cache(maxsize=1)
def get_all_surahs() -> tuple[Surah, ...]:
    """
    Get metadata for all 114 surahs.

    Returns:
        Tuple of Surah objects, ordered by surah number

    Raises:
        QuranDataError: If the built-in tables are inconsistent
    """
    surahs = tuple(Surah.from_id(i) for i in range(1, TOTAL_SURAHS + 1))
    total = sum(s.total_ayahs for s in surahs)
    if total != TOTAL_AYAHS:
        raise QuranDataError(f"Surah table holds {total} ayahs, expected {TOTAL_AYAHS}")
    return surahs


def parse_verse_key(verse_key: str) -> tuple[int, int]:
    """
    Split a verse key into surah and ayah numbers.

    Args:
        verse_key: Key in "surah:ayah" form, e.g. "2:255"

    Returns:
        (surah_number, ayah_number)

    Raises:
        ValueError: If the key is not two integers separated by ':'
    """
    parts = verse_key.strip().split(":")
    if len(parts) != 2:
        raise ValueError(f"Invalid verse key: {verse_key!r}")
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        raise ValueError(f"Invalid verse key: {verse_key!r}") from None


def create_verse_key(surah_number: int, ayah_number: int) -> str:
    """Create a "surah:ayah" key."""
    return f"{surah_number}:{ayah_number}"


def is_valid_ayah(ayah_number: int, surah_number: int, verse_count: int | None = None) -> bool:
    """
    Check that a surah/ayah pair exists.

    Args:
        ayah_number: Ayah number within the surah
        surah_number: Surah number
        verse_count: Verses in the surah (defaults to the built-in count)
    """
    if surah_number < 1 or surah_number > TOTAL_SURAHS:
        return False
    if verse_count is None:
        verse_count = SURAH_AYAH_COUNTS[surah_number]
    return 1 <= ayah_number <= verse_count


def get_next_ayah(current_ayah: int, verse_count: int) -> int | None:
    """Next ayah number, or None at the end of the surah."""
    return current_ayah + 1 if current_ayah < verse_count else None


def get_previous_ayah(current_ayah: int) -> int | None:
    """Previous ayah number, or None at the first ayah."""
    return current_ayah - 1 if current_ayah > 1 else None


def get_ayah_range(start_ayah: int, end_ayah: int) -> list[int]:
    """Ayah numbers from start to end, inclusive. Empty when start > end."""
    return list(range(start_ayah, end_ayah + 1))
