"""Reading list storage: the ListStore interface and a SQLite implementation.

The workflow only talks to the ``ListStore`` protocol. ``SqliteListStore``
keeps every list and its member pages in a single SQLite file; all methods
open a short-lived connection, run in a worker thread via
``asyncio.to_thread`` and close the connection before returning.

Membership is re-checked inside the write transaction, so concurrent writers
(another picker, a sync job) cannot cause duplicate members.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from collections.abc import Iterator
from contextlib import closing, contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol, runtime_checkable

from reading_lists.models import DEFAULT_LIST_NAME, PageRef, ReadingList

logger = logging.getLogger(__name__)


class ReadingListError(Exception):
    """Base class for storage-level reading list failures."""


class StorageError(ReadingListError):
    """The underlying storage could not be read or written."""


class DuplicateListNameError(ReadingListError):
    """A list with the same (case-insensitive) name already exists."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Reading list {name!r} already exists")
        self.name = name


@runtime_checkable
class ListStore(Protocol):
    """Storage operations consumed by the add-to-list workflow."""

    async def get_all_lists(self) -> list[ReadingList]:
        """Return every list; the default list comes first."""
        ...

    async def create_list(self, name: str, description: str = "") -> ReadingList:
        """Create a list or raise DuplicateListNameError."""
        ...

    async def add_pages_if_absent(
        self, reading_list: ReadingList, pages: list[PageRef]
    ) -> list[PageRef]:
        """Add pages that are not yet members; return those added, in input order."""
        ...


def _now() -> str:
    return datetime.now(UTC).isoformat()


def _name_key(name: str) -> str:
    return name.strip().casefold()


# ============================================================================
# SQLite implementation
# ============================================================================


class SqliteListStore:
    """ListStore persisted in a SQLite database file."""

    def __init__(self, db_path: Path, default_list_name: str = DEFAULT_LIST_NAME) -> None:
        self.db_path = Path(db_path)
        self.default_list_name = default_list_name
        self._initialized = False

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Open an autocommit connection that is always closed afterwards."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.db_path), timeout=10, isolation_level=None)
        except (sqlite3.Error, OSError) as e:
            raise StorageError(f"Could not open {self.db_path}: {e}") from e
        with closing(conn):
            conn.execute("PRAGMA foreign_keys = ON")
            yield conn

    @contextmanager
    def _transaction(self, conn: sqlite3.Connection) -> Iterator[None]:
        """Run a write transaction that holds the write lock from the start."""
        conn.execute("BEGIN IMMEDIATE")
        try:
            yield
        except BaseException:
            conn.execute("ROLLBACK")
            raise
        conn.execute("COMMIT")

    def _init_db(self, conn: sqlite3.Connection) -> None:
        """Create tables and the default list if they don't exist."""
        if self._initialized:
            return
        conn.execute(
            "CREATE TABLE IF NOT EXISTS reading_lists ("
            "  id INTEGER PRIMARY KEY AUTOINCREMENT,"
            "  name TEXT NOT NULL,"
            "  name_key TEXT NOT NULL UNIQUE,"
            "  description TEXT NOT NULL DEFAULT '',"
            "  is_default INTEGER NOT NULL DEFAULT 0,"
            "  created TEXT NOT NULL,"
            "  modified TEXT NOT NULL"
            ")"
        )
        conn.execute(
            "CREATE TABLE IF NOT EXISTS reading_list_pages ("
            "  list_id INTEGER NOT NULL REFERENCES reading_lists(id) ON DELETE CASCADE,"
            "  position INTEGER NOT NULL,"
            "  page_key TEXT NOT NULL,"
            "  site TEXT NOT NULL,"
            "  namespace TEXT NOT NULL,"
            "  title TEXT NOT NULL,"
            "  added TEXT NOT NULL,"
            "  PRIMARY KEY (list_id, page_key)"
            ")"
        )
        with self._transaction(conn):
            row = conn.execute("SELECT id FROM reading_lists WHERE is_default = 1").fetchone()
            if row is None:
                now = _now()
                conn.execute(
                    "INSERT INTO reading_lists "
                    "(name, name_key, description, is_default, created, modified) "
                    "VALUES (?, ?, '', 1, ?, ?)",
                    (self.default_list_name, _name_key(self.default_list_name), now, now),
                )
                logger.debug("Created default reading list %r", self.default_list_name)
        self._initialized = True

    @staticmethod
    def _load_pages(conn: sqlite3.Connection, list_id: int) -> list[PageRef]:
        rows = conn.execute(
            "SELECT title, site, namespace FROM reading_list_pages "
            "WHERE list_id = ? ORDER BY position",
            (list_id,),
        ).fetchall()
        return [
            PageRef(title=title, site=site, namespace=namespace) for title, site, namespace in rows
        ]

    def _row_to_list(self, conn: sqlite3.Connection, row: tuple) -> ReadingList:
        list_id, name, description, is_default, created, modified = row
        return ReadingList(
            id=list_id,
            name=name,
            description=description,
            pages=self._load_pages(conn, list_id),
            is_default=bool(is_default),
            created=created,
            modified=modified,
        )

    # -- synchronous operations (run in a worker thread) --------------------

    def load_all_lists(self) -> list[ReadingList]:
        """Return all lists, default list first, then in creation order."""
        try:
            with self._connect() as conn:
                self._init_db(conn)
                rows = conn.execute(
                    "SELECT id, name, description, is_default, created, modified "
                    "FROM reading_lists ORDER BY is_default DESC, id"
                ).fetchall()
                return [self._row_to_list(conn, row) for row in rows]
        except sqlite3.Error as e:
            raise StorageError(f"Failed to load reading lists: {e}") from e

    def load_list(self, list_id: int) -> ReadingList | None:
        """Return a fresh copy of one list, or None if it no longer exists."""
        try:
            with self._connect() as conn:
                self._init_db(conn)
                row = conn.execute(
                    "SELECT id, name, description, is_default, created, modified "
                    "FROM reading_lists WHERE id = ?",
                    (list_id,),
                ).fetchone()
                if row is None:
                    return None
                return self._row_to_list(conn, row)
        except sqlite3.Error as e:
            raise StorageError(f"Failed to load reading list {list_id}: {e}") from e

    def insert_list(self, name: str, description: str = "") -> ReadingList:
        """Create a list; names are unique ignoring case."""
        name = name.strip()
        key = _name_key(name)
        try:
            with self._connect() as conn:
                self._init_db(conn)
                with self._transaction(conn):
                    exists = conn.execute(
                        "SELECT 1 FROM reading_lists WHERE name_key = ?", (key,)
                    ).fetchone()
                    if exists is not None:
                        raise DuplicateListNameError(name)
                    now = _now()
                    cursor = conn.execute(
                        "INSERT INTO reading_lists "
                        "(name, name_key, description, is_default, created, modified) "
                        "VALUES (?, ?, ?, 0, ?, ?)",
                        (name, key, description, now, now),
                    )
                    list_id = cursor.lastrowid
        except sqlite3.IntegrityError as e:
            raise DuplicateListNameError(name) from e
        except sqlite3.Error as e:
            raise StorageError(f"Failed to create reading list {name!r}: {e}") from e
        logger.debug("Created reading list %r (id=%s)", name, list_id)
        return ReadingList(
            id=list_id,
            name=name,
            description=description,
            created=now,
            modified=now,
        )

    def insert_pages_if_absent(self, list_id: int, pages: list[PageRef]) -> list[PageRef]:
        """Insert the pages that are not members yet; return them in input order."""
        try:
            with self._connect() as conn:
                self._init_db(conn)
                with self._transaction(conn):
                    if (
                        conn.execute("SELECT 1 FROM reading_lists WHERE id = ?", (list_id,))
                        .fetchone()
                        is None
                    ):
                        raise StorageError(f"Reading list {list_id} no longer exists")
                    existing = {
                        key
                        for (key,) in conn.execute(
                            "SELECT page_key FROM reading_list_pages WHERE list_id = ?",
                            (list_id,),
                        )
                    }
                    (position,) = conn.execute(
                        "SELECT COALESCE(MAX(position), -1) + 1 FROM reading_list_pages "
                        "WHERE list_id = ?",
                        (list_id,),
                    ).fetchone()
                    now = _now()
                    added: list[PageRef] = []
                    for page in pages:
                        key = page.key
                        if key in existing:
                            continue
                        conn.execute(
                            "INSERT INTO reading_list_pages "
                            "(list_id, position, page_key, site, namespace, title, added) "
                            "VALUES (?, ?, ?, ?, ?, ?, ?)",
                            (list_id, position, key, page.site, page.namespace, page.title, now),
                        )
                        existing.add(key)
                        added.append(page)
                        position += 1
                    if added:
                        conn.execute(
                            "UPDATE reading_lists SET modified = ? WHERE id = ?",
                            (now, list_id),
                        )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to add pages to reading list {list_id}: {e}") from e
        return added

    # -- ListStore protocol ------------------------------------------------

    async def get_all_lists(self) -> list[ReadingList]:
        return await asyncio.to_thread(self.load_all_lists)

    async def get_list(self, list_id: int) -> ReadingList | None:
        return await asyncio.to_thread(self.load_list, list_id)

    async def create_list(self, name: str, description: str = "") -> ReadingList:
        return await asyncio.to_thread(self.insert_list, name, description)

    async def add_pages_if_absent(
        self, reading_list: ReadingList, pages: list[PageRef]
    ) -> list[PageRef]:
        return await asyncio.to_thread(self.insert_pages_if_absent, reading_list.id, list(pages))


__all__ = [
    "DuplicateListNameError",
    "ListStore",
    "ReadingListError",
    "SqliteListStore",
    "StorageError",
]
