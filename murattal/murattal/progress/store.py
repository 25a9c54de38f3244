"""
SQLite store for per-verse memorization progress.

One row per (user, surah, ayah) in the ``ayah_progress`` table. Updates are
upserts: the first write sets ``created_at``, later writes only move the
status and ``updated_at``.
"""

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from murattal.config import MurattalSettings, get_settings
from murattal.data import TOTAL_SURAHS, get_ayah_count, is_valid_ayah
from murattal.exceptions import ProgressError
from murattal.models import ProgressStats, VerseProgress, VerseStatus

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS ayah_progress (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    surah_number INTEGER NOT NULL,
    ayah_number INTEGER NOT NULL,
    status TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    UNIQUE (user_id, surah_number, ayah_number)
)
"""

_UPSERT = """
INSERT INTO ayah_progress
    (user_id, surah_number, ayah_number, status, created_at, updated_at)
VALUES (?, ?, ?, ?, ?, ?)
ON CONFLICT (user_id, surah_number, ayah_number)
DO UPDATE SET status = excluded.status, updated_at = excluded.updated_at
"""

_COLUMNS = "user_id, surah_number, ayah_number, status, created_at, updated_at"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _check_verse(surah_number: int, ayah_number: int) -> None:
    if not 1 <= surah_number <= TOTAL_SURAHS:
        raise ValueError(f"Invalid surah number: {surah_number}. Must be 1-{TOTAL_SURAHS}")
    if not is_valid_ayah(ayah_number, surah_number):
        raise ValueError(f"Invalid ayah number {ayah_number} for surah {surah_number}")


def _check_user(user_id: str) -> None:
    if not isinstance(user_id, str) or not user_id:
        raise ValueError(f"Invalid user id: {user_id!r}. Must be a non-empty string")


def _row_to_progress(row: sqlite3.Row) -> VerseProgress:
    return VerseProgress(
        user_id=row["user_id"],
        surah_number=row["surah_number"],
        ayah_number=row["ayah_number"],
        status=VerseStatus(row["status"]),
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


class ProgressStore:
    """
    Memorization progress backed by a SQLite database.

    Example:
        with ProgressStore() as store:
            store.update_progress("user-1", 67, 1, VerseStatus.IN_PROGRESS)
            for record in store.get_surah_progress("user-1", 67):
                print(record.verse_key, record.status.value)
    """

    def __init__(self, db_path: str | Path | None = None, settings: MurattalSettings | None = None):
        """
        Open (and create if needed) the progress database.

        Args:
            db_path: SQLite file, or ":memory:" (overrides settings.progress_db_path)
            settings: Settings instance to use

        Raises:
            ProgressError: If the database cannot be opened
        """
        settings = settings or get_settings()
        if db_path is None:
            db_path = settings.progress_db_path
        self._db_path = str(db_path)

        try:
            if self._db_path != ":memory:":
                Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(self._db_path)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute(_SCHEMA)
            self._conn.commit()
        except (sqlite3.Error, OSError) as e:
            raise ProgressError(f"Failed to open progress database: {e}", db_path=self._db_path) from e

    @property
    def db_path(self) -> str:
        return self._db_path

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "ProgressStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ------------------------------------------------------------ queries

    def _select(self, where: str, params: tuple) -> list[VerseProgress]:
        try:
            rows = self._conn.execute(
                f"SELECT {_COLUMNS} FROM ayah_progress WHERE {where} "
                "ORDER BY surah_number, ayah_number",
                params,
            ).fetchall()
        except sqlite3.Error as e:
            raise ProgressError(f"Failed to read progress: {e}", db_path=self._db_path) from e
        return [_row_to_progress(row) for row in rows]

    def get_progress(self, user_id: str, surah_number: int, ayah_number: int) -> VerseProgress | None:
        _check_verse(surah_number, ayah_number)
        records = self._select(
            "user_id = ? AND surah_number = ? AND ayah_number = ?",
            (user_id, surah_number, ayah_number),
        )
        return records[0] if records else None

    def get_surah_progress(self, user_id: str, surah_number: int) -> list[VerseProgress]:
        if not 1 <= surah_number <= TOTAL_SURAHS:
            raise ValueError(f"Invalid surah number: {surah_number}. Must be 1-{TOTAL_SURAHS}")
        return self._select("user_id = ? AND surah_number = ?", (user_id, surah_number))

    def get_user_progress(self, user_id: str) -> list[VerseProgress]:
        return self._select("user_id = ?", (user_id,))

    def get_user_progress_by_status(self, user_id: str, status: VerseStatus | str) -> list[VerseProgress]:
        status = VerseStatus(status)
        return self._select("user_id = ? AND status = ?", (user_id, status.value))

    # ------------------------------------------------------------ updates

    def update_progress(
        self,
        user_id: str,
        surah_number: int,
        ayah_number: int,
        status: VerseStatus | str,
    ) -> VerseProgress:
        """
        Set the status of one verse.

        Returns:
            The stored record

        Raises:
            ValueError: If the user id, verse or status is invalid
            ProgressError: If the write fails
        """
        return self.batch_update_progress(user_id, [(surah_number, ayah_number, status)])[0]

    def batch_update_progress(
        self,
        user_id: str,
        updates: Iterable[tuple[int, int, VerseStatus | str]],
    ) -> list[VerseProgress]:
        """
        Set the status of several verses in a single transaction.

        Args:
            user_id: Owner of the records
            updates: (surah_number, ayah_number, status) triples

        Returns:
            The stored records, in the order given

        Raises:
            ValueError: If the user id, any verse or any status is invalid
                (nothing is written)
            ProgressError: If the write fails (nothing is written)
        """
        _check_user(user_id)
        rows = []
        for surah_number, ayah_number, status in updates:
            _check_verse(surah_number, ayah_number)
            rows.append((surah_number, ayah_number, VerseStatus(status)))

        now = _now()
        try:
            with self._conn:
                self._conn.executemany(
                    _UPSERT,
                    [(user_id, s, a, status.value, now, now) for s, a, status in rows],
                )
        except sqlite3.Error as e:
            raise ProgressError(f"Failed to save progress: {e}", db_path=self._db_path) from e

        logger.debug(f"Saved {len(rows)} progress record(s) for {user_id}")
        return [self.get_progress(user_id, s, a) for s, a, _ in rows]

    def delete_progress(self, user_id: str, surah_number: int, ayah_number: int) -> bool:
        """Remove one record. Returns True if a record existed."""
        try:
            with self._conn:
                cursor = self._conn.execute(
                    "DELETE FROM ayah_progress WHERE user_id = ? AND surah_number = ? AND ayah_number = ?",
                    (user_id, surah_number, ayah_number),
                )
        except sqlite3.Error as e:
            raise ProgressError(f"Failed to delete progress: {e}", db_path=self._db_path) from e
        return cursor.rowcount > 0

    # -------------------------------------------------------------- stats

    def get_user_progress_stats(self, user_id: str) -> ProgressStats:
        """
        Summarize a user's progress.

        A surah counts as completed when every one of its verses is memorized
        or revised.
        """
        records = self.get_user_progress(user_id)

        counts = {status: 0 for status in VerseStatus}
        complete_per_surah: dict[int, int] = {}
        for record in records:
            counts[record.status] += 1
            if record.status.is_complete:
                complete_per_surah[record.surah_number] = complete_per_surah.get(record.surah_number, 0) + 1

        surahs_completed = sum(
            1 for surah, done in complete_per_surah.items() if done == get_ayah_count(surah)
        )

        return ProgressStats(
            total_ayahs=len(records),
            memorized=counts[VerseStatus.MEMORIZED],
            in_progress=counts[VerseStatus.IN_PROGRESS],
            revised=counts[VerseStatus.REVISED],
            not_started=counts[VerseStatus.NOT_STARTED],
            surahs_completed=surahs_completed,
        )
