"""
Abstract base class for media backends.

This module defines the interface every audio output used by the playback
controller must follow, and the events a backend reports back.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional


class MediaSignal(str, Enum):
    """Signals a media backend reports to its owner."""

    LOAD_START = "load_start"
    METADATA_LOADED = "metadata_loaded"  # value: duration in seconds
    STARTED = "started"
    PAUSED = "paused"
    ENDED = "ended"
    TIME_UPDATE = "time_update"  # value: position in seconds
    ERROR = "error"  # message: description


@dataclass(frozen=True)
class MediaEvent:
    """A single notification from a media backend."""

    signal: MediaSignal
    value: Optional[float] = None
    message: Optional[str] = None


MediaEventHandler = Callable[[MediaEvent], None]


class MediaAdapter(ABC):
    """
    Abstract interface for a single playable audio handle.

    The adapter wraps exactly one source at a time. Loading a new source
    replaces the previous one; volume and speed are not guaranteed to carry
    over, so owners re-apply them after every load.

    Events are delivered synchronously to the handler registered with
    ``set_event_handler``. Backends may omit ``STARTED`` after a successful
    ``play()``; owners must not rely on receiving it.

    Example:
        class MyAdapter(MediaAdapter):
            async def play(self) -> None:
                # Start or resume output
                ...
    """

    def __init__(self) -> None:
        self._event_handler: Optional[MediaEventHandler] = None

    def set_event_handler(self, handler: Optional[MediaEventHandler]) -> None:
        """Register (or with None, remove) the receiver of media events."""
        self._event_handler = handler

    def emit(self, signal: MediaSignal, value: Optional[float] = None, message: Optional[str] = None) -> None:
        """Deliver an event to the registered handler, if any."""
        if self._event_handler is not None:
            self._event_handler(MediaEvent(signal, value, message))

    @property
    @abstractmethod
    def source(self) -> Optional[str]:
        """URL of the loaded source, or None when nothing is loaded."""
        pass

    @property
    @abstractmethod
    def position(self) -> float:
        """Current playback position in seconds."""
        pass

    @property
    @abstractmethod
    def duration(self) -> float:
        """Duration of the loaded source in seconds (0.0 while unknown)."""
        pass

    @property
    @abstractmethod
    def ended(self) -> bool:
        """Whether the loaded source has played to its end."""
        pass

    @abstractmethod
    def load(self, url: str) -> None:
        """
        Replace the current source.

        Args:
            url: Audio URL to load

        Loading is not playing: call ``play()`` afterwards.
        """
        pass

    @abstractmethod
    async def play(self) -> None:
        """
        Start or resume playback of the loaded source.

        Playing a source that has ended restarts it from the beginning. A
        call overtaken by a newer ``load()`` returns without starting output.

        Raises:
            PlaybackError: If playback cannot start
        """
        pass

    @abstractmethod
    def pause(self) -> None:
        """Pause output. Safe to call when nothing is loaded."""
        pass

    @abstractmethod
    def set_position(self, seconds: float) -> None:
        """Move the playhead."""
        pass

    @abstractmethod
    def set_volume(self, volume: float) -> None:
        """Set output volume (0.0-1.0)."""
        pass

    @abstractmethod
    def set_speed(self, speed: float) -> None:
        """Set playback rate (0.5-2.0)."""
        pass

    def close(self) -> None:
        """Release the underlying output. Default implementation pauses."""
        self.pause()
