"""
Reciter catalog.

The catalog is the single source of truth for reciter ids: preference loading,
URL building and the controller all validate ids through ``get_reciter`` /
``is_known_reciter``.
"""

from types import MappingProxyType

from murattal.exceptions import QuranDataError
from murattal.models import Reciter

DEFAULT_RECITER_ID = 7  # Mishary Rashid Alafasy
FALLBACK_RECITER_ID = 7  # complete coverage of all 6236 verses

RECITERS: tuple[Reciter, ...] = (
    Reciter(
        id=7,
        name="Mishary Rashid Alafasy",
        name_arabic="مشاري راشد العفاسي",
        cdn_folder="Alafasy_128kbps",
    ),
    Reciter(
        id=4,
        name="Abdul Rahman As-Sudais",
        name_arabic="عبد الرحمن السديس",
        cdn_folder="Sudais_128kbps",
    ),
    Reciter(
        id=3,
        name="Sa`d al-Ghamdi",
        name_arabic="سعد الغامدي",
        cdn_folder="Ghamadi_40kbps",
    ),
    Reciter(
        id=5,
        name="Abdullah Basfar",
        name_arabic="عبدالله بصفر",
        cdn_folder="Basfar_128kbps",
    ),
    Reciter(
        id=9,
        name="Minshawy",
        name_arabic="محمد صديق المنشاوي",
        cdn_folder="Minshawy_128kbps",
    ),
    Reciter(
        id=6,
        name="Mahmoud Khalil Al-Husary",
        name_arabic="محمود خليل الحصري",
        cdn_folder="Husary_128kbps",
    ),
    Reciter(
        id=10,
        name="Muhammad Ayyoub",
        name_arabic="محمد أيوب",
        cdn_folder="Ayoub_128kbps",
    ),
    Reciter(
        id=11,
        name="Sudais & Shuraim",
        name_arabic="السديس والشريم",
        cdn_folder="Sudais_Shuraim_128kbps",
    ),
    Reciter(
        id=2,
        name="Abdul Basit",
        name_arabic="عبد الباسط",
        style="mujawwad",
        cdn_folder="Abdul_Basit_Mujawwad_128kbps",
    ),
    Reciter(
        id=12,
        name="Abdul Basit (Murattal)",
        name_arabic="عبد الباسط (مرتل)",
        cdn_folder="Abdul_Basit_Murattal_64kbps",
    ),
)


def _build_index(reciters: tuple[Reciter, ...]) -> MappingProxyType:
    index = {}
    folders = set()
    for reciter in reciters:
        if reciter.id in index:
            raise QuranDataError(f"Duplicate reciter id in catalog: {reciter.id}")
        if reciter.cdn_folder in folders:
            raise QuranDataError(f"Duplicate CDN folder in catalog: {reciter.cdn_folder}")
        index[reciter.id] = reciter
        folders.add(reciter.cdn_folder)
    for required in (DEFAULT_RECITER_ID, FALLBACK_RECITER_ID):
        if required not in index:
            raise QuranDataError(f"Reciter {required} missing from catalog")
    return MappingProxyType(index)


_RECITERS_BY_ID = _build_index(RECITERS)


def list_reciters() -> tuple[Reciter, ...]:
    """All reciters, in display order."""
    return RECITERS


def is_known_reciter(reciter_id: int) -> bool:
    return reciter_id in _RECITERS_BY_ID


def get_reciter(reciter_id: int) -> Reciter | None:
    """
    Look up a reciter by id.

    Args:
        reciter_id: Reciter identifier

    Returns:
        The Reciter, or None if the id is not in the catalog
    """
    return _RECITERS_BY_ID.get(reciter_id)


def get_reciter_or_default(reciter_id: int) -> Reciter:
    """Look up a reciter, falling back to the default reciter for unknown ids."""
    return _RECITERS_BY_ID.get(reciter_id) or _RECITERS_BY_ID[DEFAULT_RECITER_ID]
