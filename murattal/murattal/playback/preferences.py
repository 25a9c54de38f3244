"""
Durable storage for playback preferences.

Preferences live in a JSON document under a single key, so the same file can
hold other application state. Reads never fail: a missing, unreadable or
malformed file yields defaults. Writes merge the given fields onto what is
already stored.
"""

import json
import logging
import os
from pathlib import Path

from murattal.config import MurattalSettings, get_settings
from murattal.data import is_known_reciter
from murattal.exceptions import PreferencesError
from murattal.models import PlaybackPreferences

logger = logging.getLogger(__name__)

PREFERENCE_FIELDS = frozenset(PlaybackPreferences.model_fields)


class PreferenceStore:
    """
    JSON-file backed preference store.

    Example:
        store = PreferenceStore()
        prefs = store.load()
        store.save(volume=0.5)
    """

    def __init__(
        self,
        path: str | Path | None = None,
        key: str | None = None,
        settings: MurattalSettings | None = None,
    ):
        """
        Initialize the store.

        Args:
            path: JSON file (overrides settings.preferences_path)
            key: Key inside the document (overrides settings.preferences_key)
            settings: Settings instance to use
        """
        self._settings = settings or get_settings()
        self._path = Path(path).expanduser() if path is not None else self._settings.preferences_path
        self._key = key or self._settings.preferences_key

    @property
    def path(self) -> Path:
        return self._path

    def defaults(self) -> PlaybackPreferences:
        return PlaybackPreferences(reciter_id=self._settings.default_reciter_id)

    def _read_document(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            document = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable preferences file {self._path}: {e}")
            return {}
        if not isinstance(document, dict):
            logger.warning(f"Ignoring preferences file {self._path}: not a JSON object")
            return {}
        return document

    def load(self) -> PlaybackPreferences:
        """
        Load preferences, filling gaps with defaults.

        Returns:
            PlaybackPreferences with every field clamped into range
        """
        stored = self._read_document().get(self._key)
        merged = self.defaults().model_dump(mode="json")
        if isinstance(stored, dict):
            merged.update({k: v for k, v in stored.items() if k in PREFERENCE_FIELDS and v is not None})

        reciter_id = merged.get("reciter_id")
        if not isinstance(reciter_id, int) or not is_known_reciter(reciter_id):
            if reciter_id != self._settings.default_reciter_id:
                logger.warning(f"Unknown stored reciter {reciter_id!r}, using default")
            merged["reciter_id"] = self._settings.default_reciter_id

        return PlaybackPreferences(**merged)

    def save(self, **changes) -> PlaybackPreferences:
        """
        Merge changes onto the stored preferences and write them back.

        Args:
            **changes: Any subset of PlaybackPreferences fields

        Returns:
            The preferences as written

        Raises:
            ValueError: If a field name is unknown
            PreferencesError: If the file cannot be written
        """
        unknown = set(changes) - PREFERENCE_FIELDS
        if unknown:
            raise ValueError(f"Unknown preference fields: {sorted(unknown)}")

        current = self.load().model_dump(mode="json")
        current.update(changes)
        updated = PlaybackPreferences(**current)

        document = self._read_document()
        document[self._key] = updated.model_dump(mode="json")

        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(document, indent=2), encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise PreferencesError(f"Failed to save preferences: {e}", path=str(self._path)) from e

        logger.debug(f"Saved preferences: {changes}")
        return updated
