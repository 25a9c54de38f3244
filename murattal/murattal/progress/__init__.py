"""
Memorization progress tracking for Murattal library.

Primary API:
    from murattal.progress import ProgressStore

    with ProgressStore("progress.db") as store:
        store.update_progress("user-1", 1, 1, "memorized")
        stats = store.get_user_progress_stats("user-1")
"""

from murattal.progress.store import ProgressStore

__all__ = ["ProgressStore"]
