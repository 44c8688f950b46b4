"""Record store interface and an in-memory implementation.

The CMS owns record persistence; the sync only needs four read operations.
:class:`InMemoryRecordStore` backs the tests and can load a JSON export of
the CMS (``{"records": [{"id", "type", "title", "meta"}]}``).
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol

from config.metadata import MetadataConfig
from core.statuses import RecordKind
from sync_logging.errors import RecordNotFoundError

RawAttributes = Dict[str, List[Any]]


class RecordStore(Protocol):
    def get_raw_attributes(self, record_id: int) -> RawAttributes: ...

    def get_title(self, record_id: int) -> str: ...

    def get_kind(self, record_id: int) -> RecordKind: ...

    def query_children(self, parent_id: int) -> List[int]: ...


def coerce_record_id(value: Any) -> Optional[int]:
    """Coerce a stored reference value into a record id.

    Returns ``None`` for empty, non-numeric or non-positive values.
    """
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value is None or isinstance(value, bool):
        return None
    try:
        record_id = int(str(value).strip())
    except ValueError:
        return None
    return record_id if record_id > 0 else None


def child_reference(raw: Mapping[str, Any], config: MetadataConfig) -> Optional[int]:
    """Return the parent id referenced by a child record's raw attributes."""
    return coerce_record_id(raw.get(config.child_reference_key))


def _as_value_list(values: Any) -> List[Any]:
    if isinstance(values, (list, tuple)):
        return list(values)
    return [values]


@dataclass
class _StoredRecord:
    record_id: int
    type_tag: str
    title: str
    meta: RawAttributes = field(default_factory=dict)


class InMemoryRecordStore:
    def __init__(self, config: MetadataConfig) -> None:
        self.config = config
        self._records: Dict[int, _StoredRecord] = {}

    def add_record(
        self,
        record_id: int,
        type_tag: str,
        title: str,
        attributes: Optional[Mapping[str, Any]] = None,
    ) -> None:
        meta = {key: _as_value_list(values) for key, values in (attributes or {}).items()}
        self._records[int(record_id)] = _StoredRecord(int(record_id), type_tag, title, meta)

    def record_ids(self, kind: RecordKind | None = None) -> List[int]:
        return [
            rid
            for rid, rec in self._records.items()
            if kind is None or self.config.kind_for(rec.type_tag) is kind
        ]

    def _get(self, record_id: int, operation: str) -> _StoredRecord:
        try:
            return self._records[int(record_id)]
        except (KeyError, TypeError, ValueError):
            raise RecordNotFoundError(record_id, operation=operation) from None

    def get_raw_attributes(self, record_id: int) -> RawAttributes:
        record = self._get(record_id, "get_raw_attributes")
        return {key: list(values) for key, values in record.meta.items()}

    def get_title(self, record_id: int) -> str:
        return self._get(record_id, "get_title").title

    def get_kind(self, record_id: int) -> RecordKind:
        if coerce_record_id(record_id) not in self._records:
            return RecordKind.UNKNOWN
        return self.config.kind_for(self._records[int(record_id)].type_tag)

    def query_children(self, parent_id: int) -> List[int]:
        return [
            rec.record_id
            for rec in self._records.values()
            if self.config.kind_for(rec.type_tag) is RecordKind.CHILD
            and child_reference(rec.meta, self.config) == int(parent_id)
        ]


def load_export(path: Path) -> List[Dict[str, Any]]:
    """Read and validate a JSON export of CMS records."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    records = data.get("records") if isinstance(data, dict) else data
    if not isinstance(records, list):
        raise ValueError(f"{path}: expected a 'records' list")
    for index, item in enumerate(records):
        missing = [k for k in ("id", "type", "title") if k not in item]
        if missing:
            raise ValueError(f"{path}: record #{index} lacks {', '.join(missing)}")
    return records


__all__ = [
    "RecordStore",
    "InMemoryRecordStore",
    "RawAttributes",
    "child_reference",
    "coerce_record_id",
    "load_export",
]
