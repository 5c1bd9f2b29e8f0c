"""
SQLite database integration and simple migration system.

The ``Database`` object owns the single SQLite connection used by the
application.  It is created by the application lifespan, stored on
the ``AppContext`` and closed on shutdown, so nothing in the service
layer reaches for a module-level connection.  Records are stored as
documents: scalar fields live in their own columns (so they can be
indexed), set-valued fields are JSON arrays.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import logging
import os
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from .errors import UpstreamError

logger = logging.getLogger(__name__)

MEMORY_URL = ":memory:"

MIGRATIONS: List[Tuple[int, str]] = [
    # Migration 1: initial schema
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS pages (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            description TEXT NOT NULL,
            image_url TEXT NOT NULL,
            thumbnail_url TEXT NOT NULL,
            "groups" TEXT NOT NULL DEFAULT '[]',
            editor_type TEXT NOT NULL DEFAULT 'markdown',
            slug TEXT NOT NULL UNIQUE,
            content TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS tracks (
            id TEXT PRIMARY KEY,
            title TEXT,
            author TEXT,
            description TEXT,
            duration TEXT,
            listeners TEXT NOT NULL DEFAULT '0',
            date TEXT,
            thumbnail TEXT,
            category TEXT,
            audio_url TEXT,
            playlists TEXT NOT NULL DEFAULT '[]',
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS playlists (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            description TEXT,
            thumbnail TEXT,
            tracks TEXT NOT NULL DEFAULT '[]',
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        """,
    ),
    # Migration 2: secondary indexes for filtered listing
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_pages_created_at ON pages(created_at DESC);
        CREATE INDEX IF NOT EXISTS idx_tracks_category ON tracks(category);
        CREATE INDEX IF NOT EXISTS idx_tracks_author ON tracks(author);
        CREATE INDEX IF NOT EXISTS idx_tracks_created_at ON tracks(created_at DESC);
        CREATE INDEX IF NOT EXISTS idx_playlists_created_at ON playlists(created_at DESC);
        """,
    ),
]


def resolve_database_path(database_url: str) -> str:
    """Compute the path to the SQLite database file.

    ``:memory:`` and absolute paths are returned unchanged.  Relative
    paths are resolved against the project root (the directory that
    contains the ``pages_api`` package).
    """
    if database_url == MEMORY_URL or os.path.isabs(database_url):
        return database_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / database_url).resolve())


def _icontains(haystack: Optional[str], needle: Optional[str]) -> int:
    """Case-insensitive substring test registered as an SQL function.

    SQLite's ``LIKE`` and ``lower()`` only fold ASCII; ``casefold``
    handles the rest of Unicode.
    """
    if haystack is None or needle is None:
        return 0
    return int(needle.casefold() in str(haystack).casefold())


class Database:
    """Owner of the SQLite connection.

    A single connection is shared by every request and guarded by a
    re-entrant lock.  :meth:`transaction` opens an ``IMMEDIATE``
    transaction so a read followed by a write on one document cannot
    interleave with another writer, including writers in other
    processes using the same file.
    """

    def __init__(self, database_url: str) -> None:
        self.database_url = database_url
        self.path = resolve_database_path(database_url)
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def open(self) -> "Database":
        if self._conn is not None:
            return self
        if self.path != MEMORY_URL:
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        try:
            # Autocommit mode; transactions are opened explicitly.
            conn = sqlite3.connect(self.path, check_same_thread=False, isolation_level=None)
        except sqlite3.Error as exc:
            raise UpstreamError("Database unavailable", detail=str(exc)) from exc
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        conn.create_function("icontains", 2, _icontains, deterministic=True)
        self._conn = conn
        logger.info("Opened database %s", self.path)
        return self

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
                logger.info("Closed database %s", self.path)

    def __enter__(self) -> "Database":
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise UpstreamError("Database unavailable", detail="connection is not open")
        return self._conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor inside a transaction; commit on success.

        ``sqlite3.IntegrityError`` is re-raised untouched so callers
        can map constraint violations to validation errors.  Any other
        SQLite failure becomes an :class:`UpstreamError`.
        """
        with self._lock:
            conn = self._connection()
            cursor = conn.cursor()
            try:
                cursor.execute("BEGIN IMMEDIATE")
                yield cursor
                conn.commit()
            except sqlite3.IntegrityError:
                conn.rollback()
                raise
            except sqlite3.Error as exc:
                conn.rollback()
                logger.error("Database error: %s", exc)
                raise UpstreamError("Database operation failed", detail=str(exc)) from exc
            except BaseException:
                conn.rollback()
                raise
            finally:
                cursor.close()

    def init(self) -> None:
        """Apply pending migrations.

        Creates the ``migrations`` table if it does not exist, checks
        the current schema version, and applies any new migrations
        defined in ``MIGRATIONS`` in order.
        """
        with self._lock:
            conn = self._connection()
            conn.execute("CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)")
            row = conn.execute("SELECT MAX(version) AS version FROM migrations").fetchone()
            current_version = row["version"] if row and row["version"] is not None else 0
            for version, sql in MIGRATIONS:
                if version > current_version:
                    conn.executescript(sql)
                    conn.execute("INSERT INTO migrations (version) VALUES (?)", (version,))
                    logger.info("Applied migration %s", version)
                    current_version = version

    def ping(self) -> bool:
        """Return ``True`` when a trivial query succeeds."""
        try:
            with self._lock:
                self._connection().execute("SELECT 1").fetchone()
            return True
        except (sqlite3.Error, UpstreamError):
            return False
