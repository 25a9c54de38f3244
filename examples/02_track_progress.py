"""
Progress Tracking Example for Murattal

Records which verses have been memorized and prints a summary.
"""

from murattal.data import get_ayah_count, get_surah_name
from murattal.models import VerseStatus
from murattal.progress import ProgressStore


def main():
    user_id = "demo-user"

    with ProgressStore() as store:
        # Al-Ikhlas fully memorized, Al-Falaq started
        store.batch_update_progress(user_id, [(112, ayah, VerseStatus.MEMORIZED) for ayah in range(1, 5)])
        store.update_progress(user_id, 113, 1, VerseStatus.IN_PROGRESS)

        for surah in (112, 113):
            records = store.get_surah_progress(user_id, surah)
            done = sum(1 for r in records if r.status.is_complete)
            print(f"{get_surah_name(surah)}: {done}/{get_ayah_count(surah)} ayahs")

        stats = store.get_user_progress_stats(user_id)
        print("\nSummary:")
        print(f"  Tracked ayahs:    {stats.total_ayahs}")
        print(f"  Memorized:        {stats.memorized}")
        print(f"  In progress:      {stats.in_progress}")
        print(f"  Surahs completed: {stats.surahs_completed}")


if __name__ == "__main__":
    main()
