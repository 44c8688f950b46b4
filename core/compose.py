"""Compose the nested entity pushed for one top-level record."""
from __future__ import annotations

from typing import Any, Callable, Dict, TypeVar

from config.metadata import MetadataConfig
from core.normalize import NormalizedRecord, normalize_record
from core.statuses import RecordKind
from core.utils import log_step
from integrations.record_store import RecordStore
from sync_logging.errors import CollaboratorQueryFailure, SyncError

T = TypeVar("T")

Entity = Dict[str, Any]


def query(operation: str, record_id: Any, func: Callable[..., T], *args: Any) -> T:
    """Call a record store method, reporting failures as collaborator errors."""
    try:
        return func(*args)
    except SyncError:
        raise
    except Exception as exc:
        log_step(
            "compose",
            "query_failed",
            {"operation": operation, "record_id": record_id, "error": str(exc)},
            severity="error",
        )
        raise CollaboratorQueryFailure(
            f"{operation} failed for record {record_id!r}: {exc}",
            operation=operation,
            record_id=record_id,
            retryable=True,
        ) from exc


def _normalized(record_id: Any, kind: RecordKind, *, store: RecordStore, config: MetadataConfig) -> NormalizedRecord:
    raw = query("get_raw_attributes", record_id, store.get_raw_attributes, record_id)
    return normalize_record(record_id, raw, kind=kind, config=config)


def compose_children(parent_id: Any, *, store: RecordStore, config: MetadataConfig) -> Dict[str, NormalizedRecord]:
    """Map each child's title to its normalised record.

    Children are visited in store order; a later child with the same title
    replaces an earlier one.
    """
    children: Dict[str, NormalizedRecord] = {}
    child_ids = query("query_children", parent_id, store.query_children, parent_id)
    for child_id in child_ids:
        title = query("get_title", child_id, store.get_title, child_id)
        if title in children:
            log_step(
                "compose",
                "duplicate_child_title",
                {"parent_id": parent_id, "child_id": child_id, "title": title},
                severity="warning",
            )
        children[title] = _normalized(child_id, RecordKind.CHILD, store=store, config=config)
    return children


def compose_entity(entity_id: Any, *, store: RecordStore, config: MetadataConfig) -> Entity:
    """Build the entity for ``entity_id``: its fields, ``name`` and children."""
    kind = query("get_kind", entity_id, store.get_kind, entity_id)
    entity: Entity = _normalized(entity_id, kind, store=store, config=config)
    entity["name"] = query("get_title", entity_id, store.get_title, entity_id)

    child_count = 0
    if kind is RecordKind.PARENT:
        children = compose_children(entity_id, store=store, config=config)
        entity[config.children_field] = children
        child_count = len(children)

    log_step(
        "compose",
        "entity_composed",
        {
            "entity_id": entity_id,
            "kind": kind.value,
            "fields": len(entity),
            "children": child_count,
        },
    )
    return entity


__all__ = ["Entity", "compose_children", "compose_entity", "query"]
