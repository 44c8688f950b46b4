"""Attribute key classification and canonicalisation."""
from __future__ import annotations

from config.metadata import MetadataConfig


def is_domain_field(key: str, config: MetadataConfig) -> bool:
    """Return ``True`` when ``key`` belongs to the domain model.

    Domain keys start with the namespace prefix.  Keys ending in one of the
    internal suffixes (attachment ids stored next to file fields) are noise.
    """
    if not key.startswith(config.namespace_prefix):
        return False
    return not key.endswith(config.internal_suffixes)


def _strip_kind_prefix(name: str, config: MetadataConfig) -> str:
    for prefix in config.kind_prefixes:
        if name.startswith(prefix):
            return name[len(prefix):]
    return name


def canonicalize(key: str, config: MetadataConfig) -> str:
    """Strip the namespace prefix and the first matching kind prefix.

    Keys without the namespace prefix are already canonical and are returned
    unchanged, which makes the function idempotent.
    """
    name = key
    while name.startswith(config.namespace_prefix):
        name = _strip_kind_prefix(name[len(config.namespace_prefix):], config)
    return name


__all__ = ["is_domain_field", "canonicalize"]
