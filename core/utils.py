"""Run bookkeeping and the structured ``log_step`` helper.

Every component reports what it did through :func:`log_step`.  Each call is
appended to ``<sync_logs_dir>/<source>.jsonl`` and mirrored to the JSON console
logger; a small per-run summary is kept in memory and can be written with
:func:`finalize_summary`.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from config.settings import SETTINGS
from sync_logging.jsonl_sink import append as append_jsonl
from sync_logging.logger import get_logger

RUN_ID: str | None = None
SUMMARY: Dict[str, int] = {}

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def _empty_summary() -> Dict[str, int]:
    return {
        "events_received": 0,
        "entities_pushed": 0,
        "events_skipped": 0,
        "push_failures": 0,
        "warnings": 0,
        "errors": 0,
    }


def get_run_id() -> str:
    """Return the identifier for the current process run."""
    global RUN_ID, SUMMARY
    if RUN_ID is None:
        RUN_ID = f"sync-{datetime.now(timezone.utc).strftime('%Y%m%d-%H%M%S')}-{uuid.uuid4().hex[:6]}"
        SUMMARY = _empty_summary()
    return RUN_ID


def reset_run() -> None:
    """Forget the current run id and counters."""
    global RUN_ID, SUMMARY
    RUN_ID = None
    SUMMARY = {}


def _update_summary(stage: str, severity: str) -> None:
    if stage == "event_received":
        SUMMARY["events_received"] += 1
    elif stage == "event_skipped":
        SUMMARY["events_skipped"] += 1
    elif stage == "entity_pushed":
        SUMMARY["entities_pushed"] += 1
    elif stage == "push_failed":
        SUMMARY["push_failures"] += 1
    if severity in ("error", "critical"):
        SUMMARY["errors"] += 1
    elif severity == "warning":
        SUMMARY["warnings"] += 1


def log_step(source: str, stage: str, data: Dict[str, Any], *, severity: str = "info") -> None:
    payload = {
        "run_id": get_run_id(),
        "timestamp": datetime.now(timezone.utc).replace(microsecond=0).isoformat(),
        "source": source,
        "status": stage,
        "severity": severity,
        **data,
    }
    logger = get_logger(run_id=RUN_ID)
    logger.log(
        _LEVELS.get(severity, logging.INFO),
        stage,
        extra={"source": source, "stage": stage, "data": data},
    )
    try:
        append_jsonl(SETTINGS.sync_logs_dir / f"{source}.jsonl", payload)
    except OSError as e:  # pragma: no cover - logging shouldn't break event handling
        logger.warning("Logging to %s failed: %s", SETTINGS.sync_logs_dir, e)
    _update_summary(stage, severity)


def finalize_summary() -> Dict[str, Any]:
    """Write the counters of the current run to ``summary.json`` and return them."""
    payload: Dict[str, Any] = {"run_id": get_run_id(), **SUMMARY}
    path = SETTINGS.sync_logs_dir / "summary.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
    return payload


__all__ = ["get_run_id", "reset_run", "log_step", "finalize_summary"]
