"""Record kinds and sync lifecycle states."""
from __future__ import annotations

from enum import Enum


class RecordKind(str, Enum):
    """Classification of a content record, resolved once per record."""

    PARENT = "parent"
    CHILD = "child"
    UNKNOWN = "unknown"


class SyncState(str, Enum):
    """Lifecycle of a single change event."""

    IDLE = "idle"
    RESOLVING_OWNER = "resolving_owner"
    COMPOSING = "composing"
    PUSHED = "pushed"
    SKIPPED = "skipped"
    FAILED = "failed"


_TERMINAL_STATES = {SyncState.PUSHED, SyncState.SKIPPED, SyncState.FAILED}

# Reasons recorded on skipped events.
SKIP_REVISION = "revision"
SKIP_UNKNOWN_KIND = "unknown_kind"
SKIP_MISSING_REFERENCE = "missing_parent_reference"


def is_terminal(state: SyncState) -> bool:
    """Return ``True`` when no further transition will happen for an event."""

    return state in _TERMINAL_STATES
