"""SQLite-backed record store laid out like CMS posts and post meta."""
from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Mapping, Optional

from config.metadata import MetadataConfig
from core.statuses import RecordKind
from integrations.record_store import RawAttributes, coerce_record_id, load_export
from sync_logging.errors import CollaboratorQueryFailure, RecordNotFoundError


class SqliteRecordStore:
    def __init__(self, path: Path, config: MetadataConfig) -> None:
        self.path = Path(path)
        self.config = config

    @contextmanager
    def _connect(self, operation: str, record_id: Any = None) -> Iterator[sqlite3.Connection]:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.path)
        except (OSError, sqlite3.Error) as exc:
            raise CollaboratorQueryFailure(
                f"Cannot open record store {self.path}: {exc}",
                operation=operation,
                record_id=record_id,
                retryable=True,
            ) from exc
        conn.row_factory = sqlite3.Row
        try:
            _ensure_schema(conn)
            with conn:
                yield conn
        except sqlite3.Error as exc:
            raise CollaboratorQueryFailure(
                f"{operation} failed: {exc}",
                operation=operation,
                record_id=record_id,
                retryable=True,
            ) from exc
        finally:
            conn.close()

    def put_record(
        self,
        record_id: int,
        type_tag: str,
        title: str,
        attributes: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Insert or replace a record together with all of its attributes."""
        with self._connect("put_record", record_id) as conn:
            conn.execute(
                "INSERT OR REPLACE INTO records (id, type, title) VALUES (?, ?, ?)",
                (int(record_id), type_tag, title),
            )
            conn.execute("DELETE FROM record_meta WHERE record_id = ?", (int(record_id),))
            for key, values in (attributes or {}).items():
                if not isinstance(values, (list, tuple)):
                    values = [values]
                conn.executemany(
                    "INSERT INTO record_meta (record_id, meta_key, position, meta_value)"
                    " VALUES (?, ?, ?, ?)",
                    [
                        (int(record_id), key, position, json.dumps(value, ensure_ascii=False))
                        for position, value in enumerate(values)
                    ],
                )

    def import_json(self, path: Path) -> int:
        records = load_export(path)
        for item in records:
            self.put_record(item["id"], item["type"], item["title"], item.get("meta"))
        return len(records)

    def _row(self, conn: sqlite3.Connection, record_id: int, operation: str) -> sqlite3.Row:
        rid = coerce_record_id(record_id)
        row = None
        if rid is not None:
            row = conn.execute("SELECT id, type, title FROM records WHERE id = ?", (rid,)).fetchone()
        if row is None:
            raise RecordNotFoundError(record_id, operation=operation)
        return row

    def get_raw_attributes(self, record_id: int) -> RawAttributes:
        with self._connect("get_raw_attributes", record_id) as conn:
            self._row(conn, record_id, "get_raw_attributes")
            rows = conn.execute(
                "SELECT meta_key, meta_value FROM record_meta"
                " WHERE record_id = ? ORDER BY meta_key, position",
                (int(record_id),),
            ).fetchall()
        attributes: RawAttributes = {}
        for row in rows:
            attributes.setdefault(row["meta_key"], []).append(json.loads(row["meta_value"]))
        return attributes

    def get_title(self, record_id: int) -> str:
        with self._connect("get_title", record_id) as conn:
            return self._row(conn, record_id, "get_title")["title"]

    def get_kind(self, record_id: int) -> RecordKind:
        with self._connect("get_kind", record_id) as conn:
            try:
                row = self._row(conn, record_id, "get_kind")
            except RecordNotFoundError:
                return RecordKind.UNKNOWN
        return self.config.kind_for(row["type"])

    def query_children(self, parent_id: int) -> List[int]:
        with self._connect("query_children", parent_id) as conn:
            rows = conn.execute(
                "SELECT r.id, m.meta_value FROM records r"
                " JOIN record_meta m ON m.record_id = r.id"
                " WHERE r.type = ? AND m.meta_key = ? AND m.position = 0"
                " ORDER BY r.id",
                (self.config.child_kind, self.config.child_reference_key),
            ).fetchall()
        return [
            row["id"]
            for row in rows
            if coerce_record_id(json.loads(row["meta_value"])) == int(parent_id)
        ]

    def record_ids(self, kind: RecordKind | None = None) -> List[int]:
        with self._connect("record_ids") as conn:
            rows = conn.execute("SELECT id, type FROM records ORDER BY id").fetchall()
        return [
            row["id"]
            for row in rows
            if kind is None or self.config.kind_for(row["type"]) is kind
        ]


def _ensure_schema(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS records (
            id INTEGER PRIMARY KEY,
            type TEXT NOT NULL,
            title TEXT NOT NULL DEFAULT ''
        )
        """
    )
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS record_meta (
            record_id INTEGER NOT NULL,
            meta_key TEXT NOT NULL,
            position INTEGER NOT NULL DEFAULT 0,
            meta_value TEXT,
            PRIMARY KEY (record_id, meta_key, position)
        )
        """
    )
    conn.execute(
        """
        CREATE INDEX IF NOT EXISTS idx_record_meta_key
            ON record_meta(meta_key, record_id)
        """
    )


__all__ = ["SqliteRecordStore"]
