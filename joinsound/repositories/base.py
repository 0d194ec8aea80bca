"""
Base repository class providing common database operations.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, TypeVar, Generic, Optional, List
import sqlite3

from joinsound.config import Config
from joinsound.database import connect

T = TypeVar('T')


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored ISO timestamp, treating naive values as UTC."""
    if not value:
        return None
    parsed = datetime.fromisoformat(str(value).replace(" ", "T"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base class for all repositories.

    Provides common database connection handling and defines
    the interface that all repositories must implement.

    Two connection modes are supported:
    - shared: every repository uses one connection (tests, in-memory DBs)
    - per-call: each operation opens and closes its own connection, which
      lets concurrent requests rely on SQLite's own locking
    """

    _shared_connection: Optional[sqlite3.Connection] = None
    _shared_db_path: Optional[str] = None

    @classmethod
    def set_shared_connection(cls, conn: sqlite3.Connection, db_path: str):
        """Set a shared connection for all repositories."""
        BaseRepository._shared_connection = conn
        BaseRepository._shared_db_path = db_path

    @classmethod
    def clear_shared_connection(cls):
        BaseRepository._shared_connection = None
        BaseRepository._shared_db_path = None

    def __init__(self, db_path: Optional[str] = None, use_shared: bool = True):
        """
        Initialize the repository with a database path.

        Args:
            db_path: Path to SQLite database. If None, uses the configured one.
            use_shared: If True and shared connection exists, use it.
        """
        self._use_shared = use_shared and BaseRepository._shared_connection is not None

        if db_path is None:
            if self._use_shared and BaseRepository._shared_db_path:
                db_path = BaseRepository._shared_db_path
            else:
                db_path = Config.DB_PATH
        self._db_path = str(db_path)

    @property
    def db_path(self) -> str:
        """Get the database path."""
        return self._db_path

    def _get_connection(self) -> sqlite3.Connection:
        """
        Get a database connection.

        If shared connection is available and enabled, returns it.
        Otherwise creates a new connection.
        """
        if self._use_shared and BaseRepository._shared_connection is not None:
            return BaseRepository._shared_connection
        return connect(self._db_path)

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        conn = self._get_connection()
        try:
            yield conn
        finally:
            if conn is not BaseRepository._shared_connection:
                conn.close()

    def _execute(self, query: str, params: tuple = ()) -> List[sqlite3.Row]:
        """
        Execute a query and return all results.

        Args:
            query: SQL query string
            params: Query parameters

        Returns:
            List of Row objects
        """
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()

    def _execute_one(self, query: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        """
        Execute a query and return the first result.

        Args:
            query: SQL query string
            params: Query parameters

        Returns:
            Single Row or None
        """
        results = self._execute(query, params)
        return results[0] if results else None

    def _execute_write(self, query: str, params: tuple = ()) -> int:
        """
        Execute a write query (INSERT, UPDATE, DELETE) and commit it.

        A failed statement is rolled back before the error propagates.

        Returns:
            Rows affected
        """
        with self._connection() as conn:
            try:
                cursor = conn.cursor()
                cursor.execute(query, params)
                conn.commit()
                return cursor.rowcount
            except sqlite3.Error:
                conn.rollback()
                raise

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Run a block as one write transaction.

        Takes the write lock up front (BEGIN IMMEDIATE) so two transactions
        touching the same rows are serialized by SQLite. Commits when the
        block finishes, rolls back on any exception.
        """
        with self._connection() as conn:
            if conn.in_transaction:
                conn.commit()
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.rollback()
                raise
            else:
                conn.commit()

    # Abstract methods that subclasses must implement

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[T]:
        """Get an entity by its ID."""
        pass

    @abstractmethod
    def _row_to_entity(self, row: sqlite3.Row) -> T:
        """Convert a database row to an entity object."""
        pass
