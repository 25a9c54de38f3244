"""
Audio source resolution.

Turns (surah, verse, reciter) into a playable URL. The EveryAyah CDN hosts one
MP3 per verse at ``{base}/{folder}/{SSS}{VVV}.mp3``; not every reciter covers
every verse, so the preferred reciter is checked first and a reciter with full
coverage is used as the fallback.
"""

import asyncio
import logging
from abc import ABC, abstractmethod

import requests

from murattal._logging import log_source_resolved
from murattal.config import MurattalSettings, get_settings
from murattal.data import get_ayah_count, get_reciter, get_reciter_or_default, is_known_reciter, is_valid_ayah
from murattal.exceptions import ConfigurationError, SourceResolutionError

logger = logging.getLogger(__name__)


class ContentResolver(ABC):
    """
    Abstract source of playable audio and verse metadata.

    Example:
        class LocalFilesResolver(ContentResolver):
            async def resolve_audio_source(self, surah, verse, reciter_id):
                return f"file:///recitations/{surah:03d}{verse:03d}.mp3"
    """

    @abstractmethod
    async def resolve_audio_source(self, surah_number: int, verse_number: int, reciter_id: int) -> str:
        """
        Find a playable URL for a verse.

        Args:
            surah_number: Surah number (1-114)
            verse_number: Verse number within the surah
            reciter_id: Preferred reciter

        Returns:
            A URL the media backend can play

        Raises:
            SourceResolutionError: If no playable source exists
        """
        pass

    def total_verses(self, surah_number: int) -> int:
        """Number of verses in a surah. Default uses the built-in surah table."""
        return get_ayah_count(surah_number)


def build_audio_url(surah_number: int, verse_number: int, reciter_id: int, base_url: str) -> str:
    """
    Build the CDN URL of a verse recording.

    Unknown reciter ids map to the default reciter's folder.

    Example:
        >>> build_audio_url(1, 1, 7, "https://everyayah.com/data")
        'https://everyayah.com/data/Alafasy_128kbps/001001.mp3'
    """
    reciter = get_reciter_or_default(reciter_id)
    return f"{base_url.rstrip('/')}/{reciter.cdn_folder}/{surah_number:03d}{verse_number:03d}.mp3"


class EveryAyahResolver(ContentResolver):
    """
    Resolver for the EveryAyah per-verse audio CDN.

    Example:
        resolver = EveryAyahResolver()
        url = await resolver.resolve_audio_source(2, 255, reciter_id=4)
    """

    def __init__(
        self,
        settings: MurattalSettings | None = None,
        session: requests.Session | None = None,
    ):
        """
        Initialize the resolver.

        Args:
            settings: Settings instance to use
            session: HTTP session for existence checks (one is created if omitted)

        Raises:
            ConfigurationError: If the fallback reciter is not in the catalog
        """
        self._settings = settings or get_settings()
        self._session = session or requests.Session()

        if not is_known_reciter(self._settings.fallback_reciter_id):
            raise ConfigurationError(
                f"Fallback reciter {self._settings.fallback_reciter_id} is not in the catalog",
                setting_name="fallback_reciter_id",
            )

    @property
    def fallback_reciter_id(self) -> int:
        return self._settings.fallback_reciter_id

    def audio_url(self, surah_number: int, verse_number: int, reciter_id: int) -> str:
        return build_audio_url(surah_number, verse_number, reciter_id, self._settings.audio_cdn_base)

    def check_audio_exists(self, url: str) -> bool:
        """
        Check a URL with a HEAD request.

        Returns:
            True if the server answers with a success status and an audio content type
        """
        try:
            response = self._session.head(url, timeout=self._settings.check_timeout, allow_redirects=True)
        except requests.RequestException as e:
            logger.debug(f"Audio check failed for {url}: {e}")
            return False
        content_type = response.headers.get("content-type", "")
        return response.ok and "audio" in content_type

    async def audio_exists(self, url: str) -> bool:
        """Run the blocking check in the default executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.check_audio_exists, url)

    async def resolve_audio_source(self, surah_number: int, verse_number: int, reciter_id: int) -> str:
        if not is_valid_ayah(verse_number, surah_number):
            raise SourceResolutionError(
                "Verse does not exist",
                surah_number=surah_number,
                verse_number=verse_number,
            )

        if get_reciter(reciter_id) is None:
            logger.warning(f"Unknown reciter {reciter_id}, using fallback reciter")
            reciter_id = self.fallback_reciter_id

        preferred_url = self.audio_url(surah_number, verse_number, reciter_id)
        if not self._settings.verify_audio_sources:
            log_source_resolved(preferred_url)
            return preferred_url

        if await self.audio_exists(preferred_url):
            log_source_resolved(preferred_url)
            return preferred_url

        if reciter_id != self.fallback_reciter_id:
            fallback_url = self.audio_url(surah_number, verse_number, self.fallback_reciter_id)
            if await self.audio_exists(fallback_url):
                log_source_resolved(fallback_url, fallback=True)
                return fallback_url

        raise SourceResolutionError(
            "No playable audio source found",
            surah_number=surah_number,
            verse_number=verse_number,
            reciter_id=reciter_id,
        )

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()
