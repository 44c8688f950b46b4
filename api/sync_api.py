from __future__ import annotations

from functools import lru_cache
from typing import Any

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from config.metadata import MetadataConfig, load_metadata_config
from config.settings import SETTINGS
from core.compose import compose_entity
from core.statuses import RecordKind
from core.sync import RemoteStore, on_record_changed
from integrations.firebase_store import FirebaseStore
from integrations.record_store import RecordStore
from integrations.sqlite_record_store import SqliteRecordStore
from sync_logging.errors import CollaboratorQueryFailure, ConfigError


class RecordChangedRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    is_revision: bool = Field(default=False)


class SyncResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    record_id: int
    state: str
    owner_id: int | None = None
    reason: str | None = None


@lru_cache()
def get_config() -> MetadataConfig:
    return load_metadata_config(SETTINGS)


def get_store(config: MetadataConfig = Depends(get_config)) -> RecordStore:
    return SqliteRecordStore(SETTINGS.record_db_path, config)


def get_remote() -> RemoteStore:
    """Build the remote store used by one request."""
    try:
        return FirebaseStore.from_settings(SETTINGS)
    except ConfigError as exc:
        raise HTTPException(
            status_code=503,
            detail={"error": str(exc), "error_type": type(exc).__name__},
        ) from exc


app = FastAPI(title="CMS Metadata Sync API", version="1.0.0")


@app.get("/healthz")
async def healthz() -> dict[str, bool]:
    """Liveness probe endpoint."""

    return {"ok": True}


@app.post("/records/{record_id}/changed", response_model=SyncResponse)
def record_changed(
    record_id: int,
    request: RecordChangedRequest | None = None,
    store: RecordStore = Depends(get_store),
    remote: RemoteStore = Depends(get_remote),
    config: MetadataConfig = Depends(get_config),
) -> SyncResponse:
    is_revision = request.is_revision if request is not None else False
    outcome = on_record_changed(
        record_id, is_revision, store=store, remote=remote, config=config
    )
    if outcome.failed and outcome.error is not None:
        status = 503 if outcome.error.retryable else 502
        raise HTTPException(status_code=status, detail=outcome.error.as_dict())
    return SyncResponse(
        record_id=record_id,
        state=outcome.state.value,
        owner_id=outcome.owner_id,
        reason=outcome.reason,
    )


@app.get("/entities/{entity_id}")
def get_entity(
    entity_id: int,
    store: RecordStore = Depends(get_store),
    config: MetadataConfig = Depends(get_config),
) -> dict[str, Any]:
    """Return the composed entity for ``entity_id`` without pushing it."""

    try:
        if store.get_kind(entity_id) is RecordKind.UNKNOWN:
            raise HTTPException(status_code=404, detail="Record not found")
        return compose_entity(entity_id, store=store, config=config)
    except CollaboratorQueryFailure as exc:
        raise HTTPException(
            status_code=503 if exc.retryable else 502, detail=exc.as_dict()
        ) from exc
