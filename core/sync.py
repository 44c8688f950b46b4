"""Change-event trigger: resolve the owning entity, compose it and push it.

Each call to :func:`on_record_changed` walks one event through

    idle -> resolving_owner -> composing -> pushed

ending early in ``skipped`` (revisions, records outside the domain, children
without a valid parent) or ``failed`` (a collaborator call failed).  Failures
are logged and returned on the outcome; nothing is retried here.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple

from config.metadata import MetadataConfig
from core.compose import compose_entity, query
from core.statuses import (
    SKIP_MISSING_REFERENCE,
    SKIP_REVISION,
    SKIP_UNKNOWN_KIND,
    RecordKind,
    SyncState,
)
from core.utils import log_step
from integrations.record_store import RecordStore, child_reference, coerce_record_id
from sync_logging.errors import CollaboratorQueryFailure, PushError


class RemoteStore(Protocol):
    def push(self, key: str, value: Dict[str, Any]) -> None: ...


@dataclass
class SyncOutcome:
    record_id: Any
    state: SyncState = SyncState.IDLE
    owner_id: Optional[int] = None
    reason: Optional[str] = None
    error: Optional[CollaboratorQueryFailure] = None

    @property
    def failed(self) -> bool:
        return self.state is SyncState.FAILED

    def raise_for_failure(self) -> None:
        """Re-raise the collaborator failure of a failed event."""
        if self.failed and self.error is not None:
            raise self.error

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "record_id": self.record_id,
            "state": self.state.value,
            "owner_id": self.owner_id,
            "reason": self.reason,
        }
        if self.error is not None:
            payload["error"] = self.error.as_dict()
        return payload


def _resolve_owner(record_id: Any, *, store: RecordStore, config: MetadataConfig) -> Tuple[Optional[int], Optional[str]]:
    kind = query("get_kind", record_id, store.get_kind, record_id)
    if kind is RecordKind.PARENT:
        return coerce_record_id(record_id), None
    if kind is not RecordKind.CHILD:
        return None, SKIP_UNKNOWN_KIND

    raw = query("get_raw_attributes", record_id, store.get_raw_attributes, record_id)
    owner_id = child_reference(raw, config)
    if owner_id is None:
        return None, SKIP_MISSING_REFERENCE
    if query("get_kind", owner_id, store.get_kind, owner_id) is not RecordKind.PARENT:
        return None, SKIP_MISSING_REFERENCE
    return owner_id, None


def resolve_owner_id(record_id: Any, *, store: RecordStore, config: MetadataConfig) -> Optional[int]:
    """Return the id of the top-level entity that owns ``record_id``."""
    owner_id, _ = _resolve_owner(record_id, store=store, config=config)
    return owner_id


def _skip(outcome: SyncOutcome, reason: str) -> SyncOutcome:
    outcome.state = SyncState.SKIPPED
    outcome.reason = reason
    log_step("sync", "event_skipped", {"record_id": outcome.record_id, "reason": reason})
    return outcome


def on_record_changed(
    record_id: Any,
    is_revision: bool = False,
    *,
    store: RecordStore,
    remote: RemoteStore,
    config: MetadataConfig,
) -> SyncOutcome:
    """Recompute and push the entity affected by a change to ``record_id``."""
    outcome = SyncOutcome(record_id=record_id)
    log_step("sync", "event_received", {"record_id": record_id, "is_revision": is_revision})
    if is_revision:
        return _skip(outcome, SKIP_REVISION)

    outcome.state = SyncState.RESOLVING_OWNER
    try:
        owner_id, reason = _resolve_owner(record_id, store=store, config=config)
        if owner_id is None:
            return _skip(outcome, reason or SKIP_UNKNOWN_KIND)
        outcome.owner_id = owner_id
        log_step("sync", "owner_resolved", {"record_id": record_id, "owner_id": owner_id})

        outcome.state = SyncState.COMPOSING
        entity = compose_entity(owner_id, store=store, config=config)
        remote.push(str(owner_id), entity)
    except CollaboratorQueryFailure as exc:
        outcome.state = SyncState.FAILED
        outcome.error = exc
        log_step(
            "sync",
            "push_failed" if isinstance(exc, PushError) else "event_failed",
            {"record_id": record_id, "owner_id": outcome.owner_id, **exc.as_dict()},
            severity="error",
        )
        return outcome

    outcome.state = SyncState.PUSHED
    log_step("sync", "entity_pushed", {"record_id": record_id, "owner_id": owner_id})
    return outcome


def resync_all(
    parent_ids: Iterable[int],
    *,
    store: RecordStore,
    remote: RemoteStore,
    config: MetadataConfig,
) -> List[SyncOutcome]:
    """Push every entity in ``parent_ids``, continuing past failures."""
    return [
        on_record_changed(parent_id, False, store=store, remote=remote, config=config)
        for parent_id in parent_ids
    ]


__all__ = [
    "RemoteStore",
    "SyncOutcome",
    "on_record_changed",
    "resolve_owner_id",
    "resync_all",
]
