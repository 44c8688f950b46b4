"""Extraction of repeated group entries (live-blog updates)."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, List

from core.richtext import autop
from core.utils import log_step
from core.values import Group, group_entries
from sync_logging.errors import MalformedGroupEntry


def extract_group(raw_group_value: Any, sub_field_key: str, *, record_id: Any = None) -> List[str]:
    """Return the paragraph-wrapped ``sub_field_key`` of every group entry.

    Entries are visited in stored order.  Entries that are not mappings or
    lack the sub-field are skipped and reported as malformed.
    """
    if isinstance(raw_group_value, Group):
        entries = list(raw_group_value.entries)
    else:
        entries = group_entries(raw_group_value)

    extracted: List[str] = []
    for position, entry in enumerate(entries):
        if not isinstance(entry, Mapping) or entry.get(sub_field_key) is None:
            err = MalformedGroupEntry(f"group entry {position} lacks {sub_field_key}")
            log_step(
                "normalize",
                "malformed_group_entry",
                {
                    "record_id": record_id,
                    "position": position,
                    "sub_field": sub_field_key,
                    "error": str(err),
                    "error_type": type(err).__name__,
                },
                severity="warning",
            )
            continue
        extracted.append(autop(entry[sub_field_key]))
    return extracted


__all__ = ["extract_group"]
