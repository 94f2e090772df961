"""SQLite connection management and schema."""
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator

from .config import DATABASE_PATH, DATABASE_TIMEOUT


# =============================================================================
# SQLite3 datetime adapter (Python 3.12 compatibility)
# =============================================================================
def _adapt_datetime(dt: datetime) -> str:
    """Adapt datetime to ISO 8601 string for SQLite."""
    return dt.isoformat()


def _convert_datetime(val: bytes) -> datetime:
    """Convert ISO 8601 string from SQLite to datetime."""
    return datetime.fromisoformat(val.decode())


sqlite3.register_adapter(datetime, _adapt_datetime)
sqlite3.register_converter("DATETIME", _convert_datetime)
sqlite3.register_converter("TIMESTAMP", _convert_datetime)

def create_connection(db_path: Path | None = None) -> sqlite3.Connection:
    """Open a new connection configured for the album schema.

    Connections run in autocommit mode; multi-statement units of work
    are wrapped explicitly with :func:`transaction`.
    """
    conn = sqlite3.connect(
        db_path or DATABASE_PATH,
        timeout=DATABASE_TIMEOUT,
        detect_types=sqlite3.PARSE_DECLTYPES,
        isolation_level=None,
        check_same_thread=False,
    )
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def transaction(conn: sqlite3.Connection, immediate: bool = True) -> Iterator[sqlite3.Connection]:
    """Run the enclosed statements as one atomic unit.

    ``BEGIN IMMEDIATE`` takes the database write lock up front, so every
    check made inside the block still holds when the block commits.
    Concurrent writers wait up to ``DATABASE_TIMEOUT`` for the lock.
    Read-only units pass ``immediate=False`` and get a consistent
    snapshot without blocking other readers.
    """
    conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
    try:
        yield conn
    except BaseException:
        conn.rollback()
        raise
    else:
        conn.commit()


def init_db(db: sqlite3.Connection):
    """Initialize database schema"""

    # Readers keep a snapshot while a writer holds the lock
    db.execute("PRAGMA journal_mode = WAL")

    # Albums: owner is stored inline, collaborators in album_members
    db.execute("""
        CREATE TABLE IF NOT EXISTS albums (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            owner_id INTEGER NOT NULL,
            slot_count INTEGER NOT NULL CHECK(slot_count > 0),
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)

    # One row per collaborator; the primary key keeps members and guests disjoint
    db.execute("""
        CREATE TABLE IF NOT EXISTS album_members (
            album_id TEXT NOT NULL,
            user_id INTEGER NOT NULL,
            role TEXT NOT NULL CHECK(role IN ('member', 'guest')),
            added_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            PRIMARY KEY (album_id, user_id),
            FOREIGN KEY (album_id) REFERENCES albums(id) ON DELETE CASCADE
        )
    """)

    # Pictures: the unique (album_id, slot_id) pair is the slot occupancy lock
    db.execute("""
        CREATE TABLE IF NOT EXISTS pictures (
            id TEXT PRIMARY KEY,
            album_id TEXT NOT NULL,
            slot_id INTEGER NOT NULL CHECK(slot_id > 0),
            image_ref TEXT NOT NULL,
            content TEXT,
            pictured_at TIMESTAMP,
            uploader_id INTEGER NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            UNIQUE(album_id, slot_id),
            FOREIGN KEY (album_id) REFERENCES albums(id) ON DELETE CASCADE
        )
    """)

    # Tag index, scoped per album
    db.execute("""
        CREATE TABLE IF NOT EXISTS picture_tags (
            album_id TEXT NOT NULL,
            picture_id TEXT NOT NULL,
            tag TEXT NOT NULL,
            PRIMARY KEY (picture_id, tag),
            FOREIGN KEY (album_id) REFERENCES albums(id) ON DELETE CASCADE,
            FOREIGN KEY (picture_id) REFERENCES pictures(id) ON DELETE CASCADE
        )
    """)

    db.execute("CREATE INDEX IF NOT EXISTS idx_album_members_user ON album_members(user_id)")
    db.execute("CREATE INDEX IF NOT EXISTS idx_picture_tags_album_tag ON picture_tags(album_id, tag)")
