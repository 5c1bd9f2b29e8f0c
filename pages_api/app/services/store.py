"""
Document store on top of SQLite.

A :class:`Collection` maps one entity type to a table.  Documents are
plain ``dict`` objects keyed by snake_case field names; set-valued
fields are stored as JSON arrays and decoded back to lists.  The
collection offers the primitives the services need: insert, get,
find-one, partial update, delete, predicate search with
sort/skip/limit, count, and per-document atomic ``add_to_set`` /
``pull`` on a set-valued field.

Predicates are built with :class:`Query`; column names always come
from code, user input only ever reaches the parameter list.
"""

from __future__ import annotations

import json
import re
import secrets
import sqlite3
import time
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..core.db import Database

_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")


def new_id() -> str:
    """Return a new 24-hex-digit identifier.

    The first four bytes are the creation time in seconds, the rest is
    random, which keeps identifiers roughly time ordered.
    """
    return f"{int(time.time()):08x}{secrets.token_hex(8)}"


def is_valid_id(value: Any) -> bool:
    return isinstance(value, str) and bool(_ID_RE.match(value))


def normalize_id(value: str) -> str:
    return value.lower()


def utcnow() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _quote(column: str) -> str:
    return f'"{column}"'


class Query:
    """Conjunction of SQL predicates.

    Every method appends one clause; all clauses are AND-ed together.
    ``any_icontains`` produces a single OR group, which is how a free
    text search across several fields is expressed.
    """

    def __init__(self) -> None:
        self._clauses: List[str] = []
        self._params: List[Any] = []

    def equals(self, column: str, value: Any) -> "Query":
        self._clauses.append(f"{_quote(column)} = ?")
        self._params.append(value)
        return self

    def icontains(self, column: str, term: str) -> "Query":
        self._clauses.append(f"icontains({_quote(column)}, ?)")
        self._params.append(term)
        return self

    def any_icontains(self, columns: Sequence[str], term: str) -> "Query":
        if not columns:
            return self
        parts = [f"icontains({_quote(column)}, ?)" for column in columns]
        self._clauses.append("(" + " OR ".join(parts) + ")")
        self._params.extend([term] * len(columns))
        return self

    def has_member(self, column: str, value: Any) -> "Query":
        """Match documents whose set-valued ``column`` contains ``value``."""
        self._clauses.append(f"EXISTS (SELECT 1 FROM json_each({_quote(column)}) WHERE json_each.value = ?)")
        self._params.append(value)
        return self

    @property
    def columns(self) -> List[str]:
        return re.findall(r'"([a-z_]+)"', " ".join(self._clauses))

    def to_sql(self) -> Tuple[str, List[Any]]:
        if not self._clauses:
            return "", []
        return " WHERE " + " AND ".join(self._clauses), list(self._params)

    def __bool__(self) -> bool:
        return bool(self._clauses)


class Collection:
    """Persistence for one entity type.

    Parameters
    ----------
    db : Database
        Open database handle.
    table : str
        Table name.
    fields : Iterable[str]
        Writable scalar fields.
    set_fields : Iterable[str]
        Writable set-valued fields, stored as JSON arrays.
    """

    SYSTEM_FIELDS = ("id", "created_at", "updated_at")

    def __init__(self, db: Database, table: str, fields: Iterable[str], set_fields: Iterable[str] = ()) -> None:
        self.db = db
        self.table = table
        self.fields = tuple(fields)
        self.set_fields = tuple(set_fields)
        self._known = set(self.fields) | set(self.set_fields) | set(self.SYSTEM_FIELDS)

    # -- encoding ---------------------------------------------------------

    def _check_columns(self, columns: Iterable[str]) -> None:
        unknown = [c for c in columns if c not in self._known]
        if unknown:
            raise KeyError(f"Unknown field(s) for {self.table}: {', '.join(unknown)}")

    def _encode(self, column: str, value: Any) -> Any:
        if column in self.set_fields:
            return json.dumps(list(value or []))
        return value

    def _decode(self, row: Optional[sqlite3.Row]) -> Optional[Dict[str, Any]]:
        if row is None:
            return None
        doc = dict(row)
        for column in self.set_fields:
            raw = doc.get(column)
            doc[column] = json.loads(raw) if raw else []
        return doc

    # -- single document --------------------------------------------------

    def insert(self, values: Dict[str, Any]) -> Dict[str, Any]:
        """Store a new document and return it with id and timestamps."""
        self._check_columns(values)
        now = utcnow()
        doc = {k: v for k, v in values.items() if k not in self.SYSTEM_FIELDS}
        doc.update(id=new_id(), created_at=now, updated_at=now)
        columns = list(doc)
        placeholders = ", ".join("?" for _ in columns)
        sql = f"INSERT INTO {self.table} ({', '.join(map(_quote, columns))}) VALUES ({placeholders})"
        with self.db.transaction() as cursor:
            cursor.execute(sql, [self._encode(c, doc[c]) for c in columns])
            row = cursor.execute(f"SELECT * FROM {self.table} WHERE id = ?", (doc["id"],)).fetchone()
        return self._decode(row)

    def get(self, doc_id: str) -> Optional[Dict[str, Any]]:
        with self.db.transaction() as cursor:
            row = cursor.execute(f"SELECT * FROM {self.table} WHERE id = ?", (doc_id,)).fetchone()
        return self._decode(row)

    def find_one(self, **criteria: Any) -> Optional[Dict[str, Any]]:
        query = Query()
        for column, value in criteria.items():
            query.equals(column, value)
        found = self.find(query, limit=1)
        return found[0] if found else None

    def update(self, doc_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply a partial update; return the new document or ``None``."""
        self._check_columns(changes)
        values = {k: v for k, v in changes.items() if k not in self.SYSTEM_FIELDS}
        values["updated_at"] = utcnow()
        assignments = ", ".join(f"{_quote(c)} = ?" for c in values)
        with self.db.transaction() as cursor:
            cursor.execute(
                f"UPDATE {self.table} SET {assignments} WHERE id = ?",
                [self._encode(c, v) for c, v in values.items()] + [doc_id],
            )
            if cursor.rowcount == 0:
                return None
            row = cursor.execute(f"SELECT * FROM {self.table} WHERE id = ?", (doc_id,)).fetchone()
        return self._decode(row)

    def delete(self, doc_id: str) -> Optional[Dict[str, Any]]:
        """Remove a document and return what was stored, or ``None``."""
        with self.db.transaction() as cursor:
            row = cursor.execute(f"SELECT * FROM {self.table} WHERE id = ?", (doc_id,)).fetchone()
            if row is None:
                return None
            cursor.execute(f"DELETE FROM {self.table} WHERE id = ?", (doc_id,))
        return self._decode(row)

    # -- set operations ---------------------------------------------------

    def _modify_set(self, doc_id: str, column: str, value: Any, add: bool) -> bool:
        if column not in self.set_fields:
            raise KeyError(f"{column} is not a set field of {self.table}")
        with self.db.transaction() as cursor:
            row = cursor.execute(f"SELECT {_quote(column)} FROM {self.table} WHERE id = ?", (doc_id,)).fetchone()
            if row is None:
                return False
            members = json.loads(row[0]) if row[0] else []
            if add and value not in members:
                members.append(value)
            elif not add:
                members = [m for m in members if m != value]
            cursor.execute(
                f"UPDATE {self.table} SET {_quote(column)} = ?, updated_at = ? WHERE id = ?",
                (json.dumps(members), utcnow(), doc_id),
            )
        return True

    def add_to_set(self, doc_id: str, column: str, value: Any) -> bool:
        """Add ``value`` to a set field unless already present.

        Returns ``False`` when the document does not exist.
        """
        return self._modify_set(doc_id, column, value, add=True)

    def pull(self, doc_id: str, column: str, value: Any) -> bool:
        """Remove every occurrence of ``value`` from a set field."""
        return self._modify_set(doc_id, column, value, add=False)

    def pull_from_all(self, column: str, value: Any) -> List[str]:
        """Remove ``value`` from ``column`` in every document that has it.

        Returns the ids of the documents that were changed.
        """
        query = Query().has_member(column, value)
        changed = []
        for doc in self.find(query, limit=None):
            if self.pull(doc["id"], column, value):
                changed.append(doc["id"])
        return changed

    # -- queries ----------------------------------------------------------

    def find(
        self,
        query: Optional[Query] = None,
        limit: Optional[int] = None,
        offset: int = 0,
        newest_first: bool = True,
    ) -> List[Dict[str, Any]]:
        """Return documents matching ``query``.

        Documents are ordered by creation time (newest first by
        default); insertion order breaks ties between documents created
        in the same millisecond.
        """
        query = query or Query()
        self._check_columns(query.columns)
        where, params = query.to_sql()
        direction = "DESC" if newest_first else "ASC"
        sql = f"SELECT * FROM {self.table}{where} ORDER BY created_at {direction}, rowid {direction}"
        if limit is not None:
            sql += " LIMIT ? OFFSET ?"
            params.extend([limit, offset])
        with self.db.transaction() as cursor:
            rows = cursor.execute(sql, params).fetchall()
        return [self._decode(row) for row in rows]

    def count(self, query: Optional[Query] = None) -> int:
        query = query or Query()
        self._check_columns(query.columns)
        where, params = query.to_sql()
        with self.db.transaction() as cursor:
            row = cursor.execute(f"SELECT COUNT(*) FROM {self.table}{where}", params).fetchone()
        return int(row[0])


PAGE_FIELDS = (
    "title",
    "description",
    "image_url",
    "thumbnail_url",
    "editor_type",
    "slug",
    "content",
)
TRACK_FIELDS = (
    "title",
    "author",
    "description",
    "duration",
    "listeners",
    "date",
    "thumbnail",
    "category",
    "audio_url",
)
PLAYLIST_FIELDS = ("title", "description", "thumbnail")


def pages_collection(db: Database) -> Collection:
    return Collection(db, "pages", PAGE_FIELDS, set_fields=("groups",))


def tracks_collection(db: Database) -> Collection:
    return Collection(db, "tracks", TRACK_FIELDS, set_fields=("playlists",))


def playlists_collection(db: Database) -> Collection:
    return Collection(db, "playlists", PLAYLIST_FIELDS, set_fields=("tracks",))
