"""Collapse the video host/id pair into one embeddable markup field."""
from __future__ import annotations

import html
from typing import Any, Optional

from config.metadata import VIDEO_ID_PLACEHOLDER, MetadataConfig
from core.fields import canonicalize
from core.utils import log_step
from core.values import Fields, Scalar, first_text
from sync_logging.errors import UnrecognizedVideoHost


def video_embed_markup(host: str, video_id: str, config: MetadataConfig) -> Optional[str]:
    """Return embed markup for ``video_id`` on ``host`` or ``None`` if unknown."""
    template = config.video_embeds.get(host)
    if template is None:
        return None
    return template.replace(VIDEO_ID_PLACEHOLDER, html.escape(video_id, quote=True))


def _find_key(fields: Fields, name: str, config: MetadataConfig) -> Optional[str]:
    for key in fields:
        if canonicalize(key, config) == name:
            return key
    return None


def resolve_video_embed(fields: Fields, config: MetadataConfig, *, record_id: Any = None) -> Fields:
    """Replace the host and id fields by a single ``video`` field.

    Both values must be present and non-empty.  An unknown host leaves the
    record untouched and no ``video`` field is produced.
    """
    host_key = _find_key(fields, config.video_host_field, config)
    id_key = _find_key(fields, config.video_id_field, config)
    if host_key is None or id_key is None:
        return fields

    host = first_text(fields[host_key])
    video_id = first_text(fields[id_key])
    if not host or not video_id:
        return fields

    markup = video_embed_markup(host, video_id, config)
    if markup is None:
        err = UnrecognizedVideoHost(f"no embed template for video host {host!r}")
        log_step(
            "normalize",
            "unrecognized_video_host",
            {"record_id": record_id, "host": host, "error": str(err), "error_type": type(err).__name__},
            severity="warning",
        )
        return fields

    resolved = {k: v for k, v in fields.items() if k not in (host_key, id_key)}
    resolved[config.video_field] = Scalar(markup)
    return resolved


__all__ = ["resolve_video_embed", "video_embed_markup"]
