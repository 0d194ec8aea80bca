"""
Sound repository for sound-related database operations.
"""

from datetime import datetime, timezone
from typing import Optional, List, Tuple
import sqlite3
import uuid

from joinsound.errors import NotFoundError
from joinsound.models.sound import Sound
from joinsound.repositories.base import BaseRepository, parse_timestamp, utc_now


class SoundRepository(BaseRepository[Sound]):
    """
    Repository for Sound entities.

    Handles all database operations related to sounds, including:
    - Creating and looking up sounds
    - Listing an identity's library, newest first
    - Deleting a sound while repairing any settings that point at it
    """

    def _row_to_entity(self, row: sqlite3.Row) -> Sound:
        """Convert a database row to a Sound entity."""
        return Sound(
            id=row["id"],
            identity_id=row["identity_id"],
            original_name=row["original_name"],
            internal_filename=row["internal_filename"],
            mime_type=row["mime_type"],
            created_at=parse_timestamp(row["created_at"]),
        )

    def get_by_id(self, id: str) -> Optional[Sound]:
        """Get a sound by its ID."""
        row = self._execute_one("SELECT * FROM sounds WHERE id = ?", (id,))
        return self._row_to_entity(row) if row else None

    def list_by_identity(self, identity_id: str) -> List[Sound]:
        """Get all sounds of an identity, newest first."""
        rows = self._execute(
            "SELECT * FROM sounds WHERE identity_id = ? ORDER BY created_at DESC, rowid DESC",
            (identity_id,),
        )
        return [self._row_to_entity(row) for row in rows]

    def count_by_identity(self, identity_id: str) -> int:
        row = self._execute_one(
            "SELECT COUNT(*) AS count FROM sounds WHERE identity_id = ?",
            (identity_id,),
        )
        return row["count"] if row else 0

    def create(self, identity_id: str, original_name: str, internal_filename: str,
               mime_type: str, sound_id: Optional[str] = None,
               created_at: Optional[datetime] = None) -> Sound:
        """
        Insert a new sound.

        Args:
            identity_id: Owning identity
            original_name: Filename as uploaded
            internal_filename: Name of the stored file
            mime_type: Canonical content type
            sound_id: Pre-generated ID (the storage filename is derived from it)
            created_at: Upload time (defaults to now, UTC)

        Returns:
            The stored Sound
        """
        sound = Sound(
            id=sound_id or uuid.uuid4().hex,
            identity_id=identity_id,
            original_name=original_name,
            internal_filename=internal_filename,
            mime_type=mime_type,
            created_at=created_at or utc_now(),
        )
        if sound.created_at.tzinfo is None:
            sound.created_at = sound.created_at.replace(tzinfo=timezone.utc)

        self._execute_write(
            """
            INSERT INTO sounds (id, identity_id, original_name, internal_filename, mime_type, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                sound.id,
                sound.identity_id,
                sound.original_name,
                sound.internal_filename,
                sound.mime_type,
                sound.created_at.isoformat(timespec="microseconds"),
            ),
        )
        return sound

    def delete(self, sound_id: str) -> Tuple[Sound, Optional[Sound]]:
        """
        Delete a sound and repair the settings row that uses it, atomically.

        Steps, all inside one transaction:
        1. Load the sound (NotFoundError if missing)
        2. Find the settings row whose active sound is this one
        3. Pick the owner's most recently created remaining sound, if any
        4. Point the settings at it, or clear the active sound
        5. Delete the sound row

        Removing the stored file is left to the caller, after commit.

        Returns:
            (deleted sound, replacement active sound or None)
        """
        with self._transaction() as conn:
            row = conn.execute("SELECT * FROM sounds WHERE id = ?", (sound_id,)).fetchone()
            if row is None:
                raise NotFoundError("Sound not found")
            deleted = self._row_to_entity(row)

            replacement = None
            setting = conn.execute(
                "SELECT identity_id FROM settings WHERE active_sound_id = ?",
                (deleted.id,),
            ).fetchone()

            if setting is not None:
                next_row = conn.execute(
                    """
                    SELECT * FROM sounds
                    WHERE identity_id = ? AND id <> ?
                    ORDER BY created_at DESC, rowid DESC
                    LIMIT 1
                    """,
                    (deleted.identity_id, deleted.id),
                ).fetchone()
                replacement = self._row_to_entity(next_row) if next_row else None

                conn.execute(
                    "UPDATE settings SET active_sound_id = ? WHERE identity_id = ?",
                    (replacement.id if replacement else None, setting["identity_id"]),
                )

            conn.execute("DELETE FROM sounds WHERE id = ?", (deleted.id,))

        return deleted, replacement
