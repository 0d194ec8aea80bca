"""
Settings repository for per-identity playback configuration.
"""

from typing import Optional
import sqlite3

from joinsound.config import DEFAULT_MODE
from joinsound.models.settings import Settings, SettingsPatch
from joinsound.repositories.base import BaseRepository


class SettingsRepository(BaseRepository[Settings]):
    """
    Repository for Settings rows.

    A row is created lazily the first time an identity's settings are read.
    Callers are responsible for validating the patch (mode allow-list,
    sound ownership) before calling update().
    """

    def _row_to_entity(self, row: sqlite3.Row) -> Settings:
        return Settings(
            identity_id=row["identity_id"],
            active_sound_id=row["active_sound_id"],
            mode=row["mode"] or DEFAULT_MODE,
        )

    def get_by_id(self, id: str) -> Optional[Settings]:
        """Get settings by identity ID without creating them."""
        row = self._execute_one("SELECT * FROM settings WHERE identity_id = ?", (id,))
        return self._row_to_entity(row) if row else None

    def get_by_active_sound(self, sound_id: str) -> Optional[Settings]:
        row = self._execute_one("SELECT * FROM settings WHERE active_sound_id = ?", (sound_id,))
        return self._row_to_entity(row) if row else None

    def get_or_create(self, identity_id: str) -> Settings:
        """
        Get an identity's settings, creating the default row on a miss.

        Concurrent misses both try to insert; the primary key rejects the
        second one, which then reloads the row the first one wrote.
        """
        existing = self.get_by_id(identity_id)
        if existing:
            return existing

        try:
            self._execute_write(
                "INSERT INTO settings (identity_id, active_sound_id, mode) VALUES (?, NULL, ?)",
                (identity_id, DEFAULT_MODE),
            )
        except sqlite3.IntegrityError:
            existing = self.get_by_id(identity_id)
            if existing is None:
                raise
            return existing
        return Settings(identity_id=identity_id, active_sound_id=None, mode=DEFAULT_MODE)

    def update(self, identity_id: str, patch: SettingsPatch) -> Settings:
        """
        Apply the non-empty fields of a patch.

        Creating the default row on a miss and writing the patch happen in
        one transaction, so a rejected patch leaves no row behind.

        Returns:
            The settings after the update
        """
        with self._transaction() as conn:
            row = conn.execute("SELECT * FROM settings WHERE identity_id = ?", (identity_id,)).fetchone()
            if row is None:
                conn.execute(
                    "INSERT INTO settings (identity_id, active_sound_id, mode) VALUES (?, NULL, ?)",
                    (identity_id, DEFAULT_MODE),
                )
                settings = Settings(identity_id=identity_id, active_sound_id=None, mode=DEFAULT_MODE)
            else:
                settings = self._row_to_entity(row)

            if patch.has_active_sound:
                settings.active_sound_id = patch.active_sound_id
            if patch.has_mode:
                settings.mode = patch.mode

            conn.execute(
                "UPDATE settings SET active_sound_id = ?, mode = ? WHERE identity_id = ?",
                (settings.active_sound_id, settings.mode, identity_id),
            )
        return settings
