"""
pygame-based media backend.

Verse audio is downloaded into a local cache with requests, measured with
pydub and played through ``pygame.mixer.music``. pygame reports neither
progress nor the end of a track, so a polling task turns mixer state into
``time_update`` and ``ended`` events.

pygame cannot change the playback rate; the speed is kept so it can be
reported back, but output always plays at 1.0x.
"""

import asyncio
import logging
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import urlparse

import requests

from murattal.config import MurattalSettings, get_settings
from murattal.exceptions import PlaybackError
from murattal.playback.base import MediaAdapter, MediaSignal

logger = logging.getLogger(__name__)


def read_duration(path: str | Path) -> float:
    """
    Read the duration of an audio file with pydub.

    Returns:
        Duration in seconds, or 0.0 if the file cannot be decoded
    """
    from pydub import AudioSegment
    from pydub.exceptions import CouldntDecodeError

    try:
        return len(AudioSegment.from_file(str(path))) / 1000.0
    except (CouldntDecodeError, OSError) as e:
        logger.warning(f"Could not read duration of {path}: {e}")
        return 0.0


class PygameMediaAdapter(MediaAdapter):
    """
    Media adapter playing through pygame's streaming music channel.

    Example:
        adapter = PygameMediaAdapter()
        controller = PlaybackController(adapter)

    Args:
        settings: Settings instance to use (cache dir, poll interval)
        mixer: Object with the ``pygame.mixer.music`` interface; pygame's own
            is initialized on first use when omitted
        session: HTTP session used to download remote sources
        duration_reader: Callable returning a file's duration in seconds
    """

    def __init__(
        self,
        settings: MurattalSettings | None = None,
        mixer=None,
        session: requests.Session | None = None,
        duration_reader: Callable[[Path], float] | None = None,
    ):
        super().__init__()
        self._settings = settings or get_settings()
        self._mixer = mixer
        self._session = session or requests.Session()
        self._duration_reader = duration_reader or read_duration

        self._source: Optional[str] = None
        self._local_path: Optional[Path] = None
        self._duration = 0.0
        self._offset = 0.0  # position at the last mixer.play() or pause
        self._volume = 1.0
        self._speed = 1.0

        self._playing = False
        self._paused = False
        self._ended = False
        self._load_id = 0  # bumped by load(); a play() started before a newer load is stale
        self._poll_task: Optional[asyncio.Task] = None

    # ---------------------------------------------------------------- mixer

    def _get_mixer(self):
        if self._mixer is None:
            import pygame

            if not pygame.mixer.get_init():
                pygame.mixer.init()
            self._mixer = pygame.mixer.music
        return self._mixer

    # ----------------------------------------------------------- properties

    @property
    def source(self) -> Optional[str]:
        return self._source

    @property
    def position(self) -> float:
        if self._playing and self._mixer is not None:
            elapsed_ms = self._mixer.get_pos()
            if elapsed_ms >= 0:
                return self._offset + elapsed_ms / 1000.0
        return self._offset

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def ended(self) -> bool:
        return self._ended

    @property
    def speed(self) -> float:
        return self._speed

    # -------------------------------------------------------------- control

    def load(self, url: str) -> None:
        if self._playing or self._paused:
            self._get_mixer().stop()
        self._load_id += 1
        self._source = url
        self._local_path = None
        self._duration = 0.0
        self._offset = 0.0
        self._playing = False
        self._paused = False
        self._ended = False
        self.emit(MediaSignal.LOAD_START)

    async def play(self) -> None:
        if self._source is None:
            raise PlaybackError("No audio source loaded")

        load_id = self._load_id
        source = self._source
        loop = asyncio.get_running_loop()
        if self._local_path is None:
            local_path = await loop.run_in_executor(None, self._fetch, source)
            if self._superseded(load_id, source):
                return
            duration = await loop.run_in_executor(None, self._duration_reader, local_path)
            if self._superseded(load_id, source):
                return
            self._local_path = local_path
            self._duration = duration
            self.emit(MediaSignal.METADATA_LOADED, self._duration)

        mixer = self._get_mixer()
        if self._ended:
            self._offset = 0.0
            self._ended = False

        # Resume by restarting at the saved offset: get_pos() counts from the last play().
        try:
            mixer.load(str(self._local_path))
            mixer.set_volume(self._volume)
            mixer.play(start=self._offset)
        except Exception as e:
            raise PlaybackError(f"Mixer failed to play: {e}", source=self._source) from e

        self._playing = True
        self._paused = False
        self._ensure_polling()
        self.emit(MediaSignal.STARTED)

    def _superseded(self, load_id: int, source: str) -> bool:
        if load_id == self._load_id:
            return False
        logger.debug(f"Dropping {source}: a newer source was loaded while it downloaded")
        return True

    def pause(self) -> None:
        if self._playing:
            self._offset = self.position
            self._get_mixer().pause()
            self._playing = False
            self._paused = True
        self.emit(MediaSignal.PAUSED)

    def set_position(self, seconds: float) -> None:
        self._offset = max(0.0, seconds)
        self._ended = False
        if self._playing:
            try:
                self._get_mixer().play(start=self._offset)
            except Exception as e:
                self.emit(MediaSignal.ERROR, message=f"Seek failed: {e}")

    def set_volume(self, volume: float) -> None:
        self._volume = volume
        if self._mixer is not None:
            self._mixer.set_volume(volume)

    def set_speed(self, speed: float) -> None:
        if speed != 1.0:
            logger.debug(f"pygame cannot change playback rate, ignoring speed {speed}")
        self._speed = speed

    def close(self) -> None:
        if self._poll_task is not None:
            self._poll_task.cancel()
            self._poll_task = None
        if self._mixer is not None:
            self._mixer.stop()
        self._playing = False
        self._paused = False
        self._session.close()

    # -------------------------------------------------------------- polling

    def poll_once(self) -> None:
        """Report progress, or the end of the track once the mixer goes quiet."""
        if not self._playing or self._mixer is None:
            return
        if not self._mixer.get_busy():
            self._playing = False
            self._ended = True
            self._offset = self._duration
            self.emit(MediaSignal.ENDED)
            return
        self.emit(MediaSignal.TIME_UPDATE, self.position)

    def _ensure_polling(self) -> None:
        if self._poll_task is None or self._poll_task.done():
            self._poll_task = asyncio.get_running_loop().create_task(self._poll_loop())

    async def _poll_loop(self) -> None:
        while True:
            await asyncio.sleep(self._settings.poll_interval)
            self.poll_once()

    # ------------------------------------------------------------ download

    def _cache_path(self, url: str) -> Path:
        parts = [p for p in urlparse(url).path.split("/") if p]
        # {folder}/{SSSVVV}.mp3 keeps reciters apart in the cache
        return self._settings.audio_cache_dir.joinpath(*parts[-2:])

    def _fetch(self, url: str) -> Path:
        parsed = urlparse(url)
        if parsed.scheme in ("", "file"):
            path = Path(parsed.path if parsed.scheme == "file" else url)
            if not path.exists():
                raise PlaybackError("Audio file not found", source=url)
            return path

        target = self._cache_path(url)
        if target.exists():
            return target

        try:
            response = self._session.get(url, timeout=self._settings.check_timeout * 6)
            response.raise_for_status()
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(response.content)
        except requests.RequestException as e:
            raise PlaybackError(f"Download failed: {e}", source=url) from e
        except OSError as e:
            raise PlaybackError(f"Could not cache audio: {e}", source=url) from e

        logger.debug(f"Cached {url} at {target}")
        return target
