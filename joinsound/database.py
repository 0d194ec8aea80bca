"""
Database module - connection setup and schema.

CRUD lives in the repositories (joinsound.repositories); this module only
knows how to open a connection with the pragmas every caller needs and how
to create the three tables.
"""

import logging
import os
import sqlite3
import time
from typing import Optional

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS identities (
    id TEXT PRIMARY KEY NOT NULL,
    guild_id INTEGER NOT NULL,
    member_id INTEGER NOT NULL,
    UNIQUE (guild_id, member_id)
);

CREATE TABLE IF NOT EXISTS sounds (
    id TEXT PRIMARY KEY NOT NULL,
    identity_id TEXT NOT NULL REFERENCES identities(id),
    original_name TEXT NOT NULL,
    internal_filename TEXT NOT NULL,
    mime_type TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_sounds_identity ON sounds(identity_id);

CREATE TABLE IF NOT EXISTS settings (
    identity_id TEXT PRIMARY KEY NOT NULL REFERENCES identities(id),
    active_sound_id TEXT REFERENCES sounds(id),
    mode TEXT NOT NULL DEFAULT 'single' CHECK (mode IN ('single', 'random'))
);

CREATE INDEX IF NOT EXISTS idx_settings_active_sound ON settings(active_sound_id);
"""


def connect(db_path: str, check_same_thread: bool = True) -> sqlite3.Connection:
    """Open a connection with foreign keys enforced and dict-style rows."""
    conn = sqlite3.connect(db_path, check_same_thread=check_same_thread, timeout=5.0)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


def create_tables(conn: sqlite3.Connection) -> None:
    """Create the schema if it does not exist yet."""
    conn.executescript(SCHEMA)
    conn.commit()


class Database:
    """
    Owns database initialization for a file-backed deployment.

    Repositories open their own short-lived connections against db_path, so
    this class only has to make sure the file, the schema and WAL mode exist.
    """

    def __init__(self, db_path: str):
        self.db_path = str(db_path)
        self._conn: Optional[sqlite3.Connection] = None

    def initialize(self) -> "Database":
        directory = os.path.dirname(os.path.abspath(self.db_path))
        os.makedirs(directory, exist_ok=True)

        self._conn = connect(self.db_path, check_same_thread=False)

        # Retry enabling WAL mode
        for attempt in range(3):
            try:
                self._conn.execute("PRAGMA journal_mode=WAL;")
                break
            except sqlite3.OperationalError as e:
                if attempt < 2:
                    logger.warning("Could not set journal_mode=WAL (attempt %d): %s. Retrying...", attempt + 1, e)
                    time.sleep(1)
                else:
                    logger.warning("Could not set journal_mode=WAL after 3 attempts: %s", e)

        create_tables(self._conn)
        logger.info("Database ready at %s", self.db_path)
        return self

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
