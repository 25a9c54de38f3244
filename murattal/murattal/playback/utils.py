"""
Small playback helpers.
"""

import math


def format_time(seconds: float) -> str:
    """
    Format a duration for display.

    Args:
        seconds: Time in seconds

    Returns:
        "M:SS" below one hour, "H:MM:SS" otherwise; "0:00" for NaN or infinity

    Example:
        >>> format_time(125)
        '2:05'
        >>> format_time(3661)
        '1:01:01'
    """
    if math.isnan(seconds) or math.isinf(seconds):
        return "0:00"

    total = max(0, int(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
