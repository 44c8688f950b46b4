"""Append-only JSONL sink used for per-source sync logs."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict


def append(path: Path, record: Dict[str, Any]) -> None:
    """Append ``record`` to ``path`` as a single JSON line.

    Values that are not JSON serialisable (paths, enums, exceptions) are
    written using their string representation.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as fh:
        fh.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")


__all__ = ["append"]
