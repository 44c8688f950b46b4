"""JSON console logging for the sync service.

:func:`get_logger` returns the ``metadata_sync`` logger configured to write one
JSON object per record to stdout.  Records carry the ``run_id`` and ``stage``
of the current process plus any structured ``data`` passed through ``extra``.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import uuid
from typing import Any, Dict, Optional

LOGGER_NAME = "metadata_sync"


class JSONFormatter(logging.Formatter):
    """Format log records as compact JSON."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "run_id": getattr(record, "run_id", None),
            "stage": getattr(record, "stage", None),
            "source": getattr(record, "source", None),
            "level": record.levelname.lower(),
            "message": record.getMessage(),
        }
        data = getattr(record, "data", None)
        if isinstance(data, dict) and data:
            payload["data"] = data

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(
            {k: v for k, v in payload.items() if v is not None},
            ensure_ascii=False,
            default=str,
        )


class _ContextFilter(logging.Filter):
    """Attach ``run_id`` and ``stage`` to every record."""

    def __init__(self, run_id: Optional[str], stage: Optional[str]) -> None:
        super().__init__()
        self.run_id = run_id
        self.stage = stage

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        record.run_id = self.run_id
        if not getattr(record, "stage", None):
            record.stage = self.stage
        return True


def get_logger(
    run_id: Optional[str] = None,
    stage: Optional[str] = None,
    level: int = logging.INFO,
) -> logging.Logger:
    """Return the process-wide JSON logger.

    The first call installs the stdout handler; later calls only refresh the
    contextual ``run_id``/``stage`` when new values are supplied.
    """

    logger = logging.getLogger(LOGGER_NAME)

    if logger.handlers:
        for flt in logger.filters:
            if isinstance(flt, _ContextFilter):
                flt.run_id = run_id or flt.run_id
                flt.stage = stage or flt.stage
        return logger

    run_id = run_id or os.getenv("RUN_ID") or str(uuid.uuid4())
    stage = stage or os.getenv("STAGE")

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JSONFormatter())

    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    logger.addFilter(_ContextFilter(run_id=run_id, stage=stage))
    return logger


__all__ = ["JSONFormatter", "get_logger", "LOGGER_NAME"]
