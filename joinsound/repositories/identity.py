"""
Identity repository: maps (guild, member) pairs to internal identities.
"""

from typing import Optional
import sqlite3
import uuid

from joinsound.models.identity import Identity
from joinsound.repositories.base import BaseRepository


class IdentityRepository(BaseRepository[Identity]):
    """Repository for Identity entities."""

    def _row_to_entity(self, row: sqlite3.Row) -> Identity:
        return Identity(
            id=row["id"],
            guild_id=int(row["guild_id"]),
            member_id=int(row["member_id"]),
        )

    def get_by_id(self, id: str) -> Optional[Identity]:
        row = self._execute_one("SELECT * FROM identities WHERE id = ?", (id,))
        return self._row_to_entity(row) if row else None

    def get_by_pair(self, guild_id: int, member_id: int) -> Optional[Identity]:
        row = self._execute_one(
            "SELECT * FROM identities WHERE guild_id = ? AND member_id = ?",
            (int(guild_id), int(member_id)),
        )
        return self._row_to_entity(row) if row else None

    def resolve(self, guild_id: int, member_id: int) -> Identity:
        """
        Get the identity for a (guild, member) pair, creating it on first sight.

        Two requests may both miss and race to insert; the loser hits the
        UNIQUE(guild_id, member_id) constraint and reloads the winner's row.
        """
        existing = self.get_by_pair(guild_id, member_id)
        if existing:
            return existing

        identity = Identity(id=uuid.uuid4().hex, guild_id=int(guild_id), member_id=int(member_id))
        try:
            self._execute_write(
                "INSERT INTO identities (id, guild_id, member_id) VALUES (?, ?, ?)",
                (identity.id, identity.guild_id, identity.member_id),
            )
        except sqlite3.IntegrityError:
            existing = self.get_by_pair(guild_id, member_id)
            if existing is None:
                raise
            return existing
        return identity
