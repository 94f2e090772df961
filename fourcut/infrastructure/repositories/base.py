"""Base repository protocol and utilities.

This module defines the interface that all repositories must implement.
"""
from contextlib import contextmanager
from typing import Iterator, Protocol
import sqlite3

from ...database import transaction


class ConnectionProtocol(Protocol):
    """Protocol for database connection."""

    def execute(self, sql: str, parameters: tuple = ...) -> sqlite3.Cursor: ...
    def executemany(self, sql: str, parameters: list = ...) -> sqlite3.Cursor: ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...


class Repository:
    """Base repository class.

    All repositories should inherit from this class. Repositories never
    commit on their own: writes are grouped by the calling service with
    :meth:`transaction`, which also covers every other repository built
    on the same connection.

    Example:
        class AlbumRepository(Repository):
            def get_by_id(self, album_id: str) -> Album | None:
                cursor = self._execute("SELECT * FROM albums WHERE id = ?", (album_id,))
                return self._row_to_dict(cursor.fetchone())
    """

    def __init__(self, connection: ConnectionProtocol):
        """Initialize repository with database connection.

        Args:
            connection: Database connection (sqlite3.Connection or compatible)
        """
        self._conn = connection

    @contextmanager
    def transaction(self, immediate: bool = True) -> Iterator[None]:
        """Run the enclosed repository calls as one atomic unit."""
        with transaction(self._conn, immediate=immediate):
            yield

    def _execute(self, sql: str, parameters: tuple = ()) -> sqlite3.Cursor:
        """Execute SQL query with parameters.

        Args:
            sql: SQL query string
            parameters: Query parameters (prevents SQL injection)

        Returns:
            sqlite3.Cursor with results
        """
        return self._conn.execute(sql, parameters)

    def _execute_many(self, sql: str, parameters_list: list[tuple]) -> sqlite3.Cursor:
        """Execute SQL query multiple times.

        Args:
            sql: SQL query string
            parameters_list: List of parameter tuples

        Returns:
            sqlite3.Cursor
        """
        return self._conn.executemany(sql, parameters_list)

    def _row_to_dict(self, row: sqlite3.Row | None) -> dict | None:
        """Convert sqlite3.Row to dictionary.

        Args:
            row: Database row or None

        Returns:
            Dictionary representation or None
        """
        return dict(row) if row else None
