"""Paragraph wrapping for rich-text (WYSIWYG) fields."""
from __future__ import annotations

import re
from typing import Any

from config.metadata import MetadataConfig

_PARAGRAPH_BREAK = re.compile(r"\n[ \t]*\n\s*")
_BLOCK_START = re.compile(
    r"^<(?:p|div|ul|ol|li|h[1-6]|blockquote|pre|table|figure|hr|iframe)\b",
    re.IGNORECASE,
)


def autop(text: Any) -> str:
    """Convert plain text into HTML paragraphs.

    Blank lines separate paragraphs and single newlines become ``<br />``.
    Chunks that already open with a block-level tag are kept as they are.
    Empty or whitespace-only input yields ``""``.
    """
    if text is None:
        return ""
    text = str(text).replace("\r\n", "\n").replace("\r", "\n")
    if not text.strip():
        return ""

    out = []
    for chunk in _PARAGRAPH_BREAK.split(text.strip()):
        chunk = chunk.strip()
        if not chunk:
            continue
        if _BLOCK_START.match(chunk):
            out.append(chunk + "\n")
            continue
        lines = [line.strip() for line in chunk.split("\n")]
        out.append("<p>" + "<br />\n".join(lines) + "</p>\n")
    return "".join(out)


def format_rich_text(field_name: str, value: Any, config: MetadataConfig) -> Any:
    """Wrap ``value`` in paragraphs if ``field_name`` is a rich-text field."""
    if field_name not in config.rich_text_fields:
        return value
    if isinstance(value, list):
        return [autop(item) for item in value]
    return autop(value)


__all__ = ["autop", "format_rich_text"]
