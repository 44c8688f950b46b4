"""Record normaliser: raw CMS attribute map -> clean nested record.

The stages run in a fixed order and each one only consumes the output of the
previous stage:

1. drop keys outside the domain namespace and internal noise keys
2. resolve the video host/id pair into one embed field
3. extract the live-blog group of child records into a list of markup
4. strip namespace and kind prefixes from every key
5. collapse value lists to their first value (the group list stays a list)
6. paragraph-wrap the configured rich-text fields
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, List

from config.metadata import MetadataConfig
from core.fields import canonicalize, is_domain_field
from core.groups import extract_group
from core.richtext import format_rich_text
from core.statuses import RecordKind
from core.utils import log_step
from core.values import FieldValue, Fields, Group, ListValue, Scalar, group_entries
from core.video import resolve_video_embed

RawAttributeMap = Mapping[str, Any]
NormalizedRecord = Dict[str, Any]


def _to_field_value(key: str, values: Any, config: MetadataConfig) -> FieldValue:
    if canonicalize(key, config) == config.group_field:
        return Group(tuple(group_entries(values)))
    if isinstance(values, (list, tuple)):
        return ListValue(tuple(values))
    return Scalar(values)


def select_domain_fields(raw: RawAttributeMap, config: MetadataConfig) -> Fields:
    return {
        key: _to_field_value(key, values, config)
        for key, values in raw.items()
        if is_domain_field(key, config)
    }


def attach_group(fields: Fields, kind: RecordKind, config: MetadataConfig, *, record_id: Any = None) -> Fields:
    group_keys = [key for key, value in fields.items() if isinstance(value, Group)]
    result: Fields = {k: v for k, v in fields.items() if not isinstance(v, Group)}

    if kind is RecordKind.CHILD:
        entries: List[str] = []
        for key in group_keys:
            entries.extend(extract_group(fields[key], config.group_entry_key, record_id=record_id))
        result[config.group_field] = ListValue(tuple(entries))
    elif group_keys:
        log_step(
            "normalize",
            "group_field_ignored",
            {"record_id": record_id, "kind": kind.value, "keys": group_keys},
            severity="warning",
        )
    return result


def strip_prefixes(fields: Fields, config: MetadataConfig, *, record_id: Any = None) -> Fields:
    stripped: Fields = {}
    for key, value in fields.items():
        name = canonicalize(key, config)
        if name in stripped:
            log_step(
                "normalize",
                "canonical_key_collision",
                {"record_id": record_id, "field": name, "key": key},
                severity="warning",
            )
        stripped[name] = value
    return stripped


def flatten(fields: Fields, config: MetadataConfig) -> NormalizedRecord:
    record: NormalizedRecord = {}
    for name, value in fields.items():
        if isinstance(value, Scalar):
            record[name] = value.value
        elif isinstance(value, ListValue):
            if name == config.group_field:
                record[name] = list(value.items)
            else:
                record[name] = value.items[0] if value.items else None
        else:
            raise TypeError(f"Unresolved group field {name!r} reached flatten stage")
    return record


def format_rich_text_fields(record: NormalizedRecord, config: MetadataConfig) -> NormalizedRecord:
    return {name: format_rich_text(name, value, config) for name, value in record.items()}


def normalize_record(
    record_id: Any,
    raw: RawAttributeMap,
    *,
    kind: RecordKind,
    config: MetadataConfig,
) -> NormalizedRecord:
    """Run the normalisation stages over one record's raw attributes."""
    fields = select_domain_fields(raw, config)
    fields = resolve_video_embed(fields, config, record_id=record_id)
    fields = attach_group(fields, kind, config, record_id=record_id)
    fields = strip_prefixes(fields, config, record_id=record_id)
    record = flatten(fields, config)
    return format_rich_text_fields(record, config)


__all__ = [
    "RawAttributeMap",
    "NormalizedRecord",
    "select_domain_fields",
    "attach_group",
    "strip_prefixes",
    "flatten",
    "format_rich_text_fields",
    "normalize_record",
]
