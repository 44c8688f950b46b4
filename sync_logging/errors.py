"""Error hierarchy for the metadata sync.

Two families exist, mirroring how events are handled:

* *soft* failures describe conditions recovered locally inside the
  normalisation pipeline (a malformed live-blog entry, an unknown video host).
  They are logged and never propagated out of the pipeline.
* *hard* failures abort processing of the current change event.  The only
  runtime hard failures are collaborator failures: the record store or the
  remote store could not answer.  Whether the event is worth retrying is
  carried on the exception; the core itself never retries.

Configuration problems raise :class:`ConfigError` when the configuration is
built, before any event is processed.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class SyncError(Exception):
    """Base error for the metadata sync."""


class ConfigError(SyncError, ValueError):
    """Invalid static configuration."""


class SoftFailError(SyncError):
    """A recoverable condition that is logged but does not halt processing."""


class MalformedGroupEntry(SoftFailError):
    """A repeated group entry lacks the sub-field it should carry."""


class UnrecognizedVideoHost(SoftFailError):
    """A video host outside the configured embed templates."""


class HardFailError(SyncError):
    """An error that aborts processing of the current change event."""


class CollaboratorQueryFailure(HardFailError):
    """A call to the record store or the remote store failed."""

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        record_id: Any = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.record_id = record_id
        self.retryable = retryable

    def as_dict(self) -> Dict[str, Any]:
        return {
            "error": str(self),
            "error_type": type(self).__name__,
            "operation": self.operation,
            "record_id": self.record_id,
            "retryable": self.retryable,
        }


class RecordNotFoundError(CollaboratorQueryFailure):
    """The record store has no record with the requested id."""

    def __init__(self, record_id: Any, *, operation: str = "lookup") -> None:
        super().__init__(
            f"Record {record_id!r} not found",
            operation=operation,
            record_id=record_id,
            retryable=False,
        )


class PushError(CollaboratorQueryFailure):
    """The remote store rejected or did not answer a push."""

    def __init__(
        self,
        message: str,
        *,
        key: str,
        status_code: Optional[int] = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message, operation="push", record_id=key, retryable=retryable)
        self.key = key
        self.status_code = status_code

    def as_dict(self) -> Dict[str, Any]:
        payload = super().as_dict()
        payload["status_code"] = self.status_code
        return payload


__all__ = [
    "SyncError",
    "ConfigError",
    "SoftFailError",
    "MalformedGroupEntry",
    "UnrecognizedVideoHost",
    "HardFailError",
    "CollaboratorQueryFailure",
    "RecordNotFoundError",
    "PushError",
]
