"""
Structured logging utilities for Murattal library.

Provides a configured logger and helper functions for consistent logging.
"""

import logging
import sys
from typing import Optional


# Default format for Murattal logs
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str = "murattal") -> logging.Logger:
    """
    Get a logger instance for the given name.

    Args:
        name: Logger name (default: "murattal")

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


def configure_logging(
    level: Optional[int] = None,
    format_string: Optional[str] = None,
    date_format: Optional[str] = None,
    stream: Optional[object] = None,
) -> logging.Logger:
    """
    Configure logging for the Murattal library.

    Args:
        level: Logging level (default: MURATTAL_LOG_LEVEL, else INFO)
        format_string: Log format string (default: DEFAULT_FORMAT)
        date_format: Date format string (default: DEFAULT_DATE_FORMAT)
        stream: Output stream (default: sys.stderr)

    Returns:
        Configured root logger for murattal
    """
    if level is None:
        from murattal.config import get_settings

        level = logging.getLevelName(get_settings().log_level)

    logger = logging.getLogger("murattal")
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)

    formatter = logging.Formatter(
        format_string or DEFAULT_FORMAT,
        datefmt=date_format or DEFAULT_DATE_FORMAT,
    )
    handler.setFormatter(formatter)

    logger.addHandler(handler)

    return logger


def enable_debug_logging() -> None:
    """Enable debug-level logging for the Murattal library."""
    configure_logging(level=logging.DEBUG)


def disable_logging() -> None:
    """Disable all Murattal logging."""
    logger = logging.getLogger("murattal")
    logger.handlers.clear()
    logger.addHandler(logging.NullHandler())


_logger = get_logger("murattal.playback")


def log_playback_start(surah_number: int, verse_number: int, reciter_id: int) -> None:
    """Log that a verse has been requested."""
    _logger.info(f"Playing {surah_number}:{verse_number} (reciter {reciter_id})")


def log_source_resolved(url: str, fallback: bool = False) -> None:
    """Log the audio URL a verse resolved to."""
    if fallback:
        _logger.info(f"Preferred reciter unavailable, falling back to {url}")
    else:
        _logger.debug(f"Resolved audio source: {url}")


def log_verse_ended(surah_number: int, verse_number: int, iteration: int) -> None:
    """Log the end of a verse."""
    _logger.debug(f"Verse {surah_number}:{verse_number} ended (iteration={iteration})")


def log_playback_error(message: str, exc_info: bool = False, **context) -> None:
    """Log a playback error with optional context and exception info."""
    if context:
        ctx_str = ", ".join(f"{k}={v}" for k, v in context.items())
        _logger.error(f"{message} ({ctx_str})", exc_info=exc_info)
    else:
        _logger.error(message, exc_info=exc_info)
