"""
Configuration management for Murattal library.

Uses Pydantic Settings for type-safe configuration with environment variable support.
All settings can be overridden via environment variables with the MURATTAL_ prefix.
"""

from typing import Literal
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MurattalSettings(BaseSettings):
    """
    Configuration settings for Murattal library.

    All settings can be overridden via environment variables with MURATTAL_ prefix.

    Example:
        export MURATTAL_AUDIO_CDN_BASE="https://everyayah.com/data"
        export MURATTAL_VERIFY_AUDIO_SOURCES="false"
        export MURATTAL_PREFERENCES_PATH="~/.config/murattal/preferences.json"
    """

    model_config = SettingsConfigDict(
        env_prefix="MURATTAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ============ Audio Sources ============

    audio_cdn_base: str = Field(
        default="https://everyayah.com/data",
        description="Base URL of the per-verse audio CDN",
    )

    default_reciter_id: int = Field(
        default=7,
        description="Reciter used when no preference is stored (Mishary Rashid Alafasy)",
    )

    fallback_reciter_id: int = Field(
        default=7,
        description="Reciter with complete coverage, used when the preferred one has no audio",
    )

    verify_audio_sources: bool = Field(
        default=True,
        description="Check audio URLs with an HTTP HEAD request before playing",
    )

    check_timeout: float = Field(
        default=5.0,
        description="Timeout in seconds for the audio existence check",
        gt=0.0,
        le=60.0,
    )

    # ============ Playback ============

    start_fallback_ms: int = Field(
        default=10,
        description="Delay before forcing 'playing' when the backend never reports a start",
        ge=1,
        le=1000,
    )

    poll_interval: float = Field(
        default=0.25,
        description="Position polling interval in seconds for polled backends",
        ge=0.05,
        le=1.0,
    )

    audio_cache_dir: Path = Field(
        default=Path("~/.murattal/cache"),
        description="Directory where downloaded verse audio is cached",
    )

    # ============ Persistence ============

    preferences_path: Path = Field(
        default=Path("~/.murattal/preferences.json"),
        description="JSON file holding playback preferences",
    )

    preferences_key: str = Field(
        default="quran-audio-preferences",
        description="Key under which preferences are stored in the JSON document",
        min_length=1,
    )

    progress_db_path: Path = Field(
        default=Path("~/.murattal/progress.db"),
        description="SQLite database for memorization progress",
    )

    # ============ Logging ============

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Default level used by configure_logging()",
    )

    # ============ Validators ============

    @field_validator("audio_cdn_base")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the CDN base so URL joins never double the slash."""
        return v.rstrip("/")

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator("audio_cache_dir", "preferences_path", "progress_db_path", mode="before")
    @classmethod
    def convert_to_path(cls, v: str | Path) -> Path:
        """Convert string paths to Path objects and expand '~'."""
        if isinstance(v, str):
            v = Path(v)
        return v.expanduser()


# Default settings instance
_default_settings: MurattalSettings | None = None


def get_settings() -> MurattalSettings:
    """
    Get the default settings instance (lazily created).

    Returns:
        MurattalSettings: The default settings
    """
    global _default_settings
    if _default_settings is None:
        _default_settings = MurattalSettings()
    return _default_settings


def configure(**kwargs) -> MurattalSettings:
    """
    Create and set new default settings.

    Args:
        **kwargs: Settings to override

    Returns:
        MurattalSettings: The new settings instance
    """
    global _default_settings
    _default_settings = MurattalSettings(**kwargs)
    return _default_settings
