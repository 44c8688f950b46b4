"""Tagged field values used while a record moves through the pipeline.

Raw attribute maps mix plain values, lists of values and nested group
structures under one mapping.  The normaliser resolves each field into exactly
one of the variants below before any transform runs.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple, Union


@dataclass(frozen=True)
class Scalar:
    value: Any


@dataclass(frozen=True)
class ListValue:
    items: Tuple[Any, ...]


@dataclass(frozen=True)
class Group:
    entries: Tuple[Any, ...]


FieldValue = Union[Scalar, ListValue, Group]
Fields = Dict[str, FieldValue]


def _is_index_mapping(value: Any) -> bool:
    if not isinstance(value, Mapping) or not value:
        return False
    return all(
        isinstance(key, int) or (isinstance(key, str) and key.isdigit())
        for key in value
    )


def group_entries(values: Any) -> List[Any]:
    """Flatten stored group values into entries, keeping stored order.

    A stored group is a sequence of serialised arrays; each array is either a
    list of entries or an index -> entry mapping (recognised by its keys, so a
    malformed entry inside it does not hide its siblings).  A lone mapping
    that is not an index mapping counts as a single entry.  Anything else is
    passed through so the extractor can report it.
    """
    if isinstance(values, Mapping) or not isinstance(values, (list, tuple)):
        values = [values]
    entries: List[Any] = []
    for value in values:
        if isinstance(value, (list, tuple)):
            entries.extend(value)
        elif _is_index_mapping(value):
            entries.extend(value.values())
        else:
            entries.append(value)
    return entries


def first_text(value: FieldValue | None) -> str:
    """Return the first plain value of ``value`` as stripped text."""
    if isinstance(value, Scalar):
        raw = value.value
    elif isinstance(value, ListValue) and value.items:
        raw = value.items[0]
    else:
        return ""
    if raw is None or isinstance(raw, (Mapping, list, tuple)):
        return ""
    return str(raw).strip()


__all__ = [
    "Scalar",
    "ListValue",
    "Group",
    "FieldValue",
    "Fields",
    "group_entries",
    "first_text",
]
