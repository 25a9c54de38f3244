"""
Quran data module for Murattal library.

Provides access to built-in Quran reference data (surah metadata, verse
counts) and the reciter catalog.
"""

from murattal.data.quran import (
    TOTAL_AYAHS,
    TOTAL_SURAHS,
    get_ayah_count,
    get_all_surahs,
    get_surah,
    get_surah_name,
    parse_verse_key,
    create_verse_key,
    is_valid_ayah,
    get_next_ayah,
    get_previous_ayah,
    get_ayah_range,
)
from murattal.data.reciters import (
    DEFAULT_RECITER_ID,
    FALLBACK_RECITER_ID,
    RECITERS,
    list_reciters,
    is_known_reciter,
    get_reciter,
    get_reciter_or_default,
)

__all__ = [
    "TOTAL_AYAHS",
    "TOTAL_SURAHS",
    "get_ayah_count",
    "get_all_surahs",
    "get_surah",
    "get_surah_name",
    "parse_verse_key",
    "create_verse_key",
    "is_valid_ayah",
    "get_next_ayah",
    "get_previous_ayah",
    "get_ayah_range",
    "DEFAULT_RECITER_ID",
    "FALLBACK_RECITER_ID",
    "RECITERS",
    "list_reciters",
    "is_known_reciter",
    "get_reciter",
    "get_reciter_or_default",
]
