"""
Custom exceptions for Murattal library.

All exceptions inherit from MurattalError for easy catching of library-specific errors.
"""

from typing import Any


class MurattalError(Exception):
    """Base exception for all Murattal errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message


class SourceResolutionError(MurattalError):
    """Raised when no playable audio source exists for a verse."""

    def __init__(
        self,
        message: str,
        surah_number: int | None = None,
        verse_number: int | None = None,
        reciter_id: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        if surah_number is not None:
            ctx["surah"] = surah_number
        if verse_number is not None:
            ctx["verse"] = verse_number
        if reciter_id is not None:
            ctx["reciter_id"] = reciter_id
        super().__init__(message, ctx)
        self.surah_number = surah_number
        self.verse_number = verse_number
        self.reciter_id = reciter_id


class PlaybackError(MurattalError):
    """Raised when the media backend cannot start or continue playback."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        if source:
            ctx["source"] = source
        super().__init__(message, ctx)
        self.source = source


class PreferencesError(MurattalError):
    """Raised when playback preferences cannot be persisted."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message, {"path": path} if path else None)
        self.path = path


class ConfigurationError(MurattalError):
    """Raised when configuration is invalid."""

    def __init__(
        self,
        message: str,
        setting_name: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        if setting_name:
            ctx["setting"] = setting_name
        super().__init__(message, ctx)
        self.setting_name = setting_name


class QuranDataError(MurattalError):
    """Raised when Quran reference data is inconsistent or a lookup fails."""

    def __init__(self, message: str = "Invalid Quran reference data.") -> None:
        super().__init__(message)


class ProgressError(MurattalError):
    """Raised when the memorization progress store fails."""

    def __init__(self, message: str, db_path: str | None = None) -> None:
        super().__init__(message, {"db_path": db_path} if db_path else None)
        self.db_path = db_path
