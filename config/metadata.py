"""Static layout of the CMS metadata consumed by the normalisation pipeline.

The configuration is immutable and passed explicitly to every pipeline
function.  It is validated when constructed so that a bad layout fails at
startup rather than while an event is being processed.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, FrozenSet, Iterable, Mapping, Tuple

from core.statuses import RecordKind
from sync_logging.errors import ConfigError

if TYPE_CHECKING:  # pragma: no cover
    from config.settings import Settings

VIDEO_ID_PLACEHOLDER = "{video_id}"

DEFAULT_VIDEO_EMBEDS: Mapping[str, str] = MappingProxyType(
    {
        "wistia": '<iframe src="{video_id}"></iframe>',
        "livestream": '<div id="{video_id}"></div>',
    }
)


def _freeze_embeds(embeds: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(embeds))


@dataclass(frozen=True)
class MetadataConfig:
    namespace_prefix: str = "_cmb_"
    parent_kind: str = "speaker"
    child_kind: str = "presentation"
    child_reference_field: str = "speaker"
    group_field: str = "liveblog"
    group_entry_field: str = "liveblog_entry"
    rich_text_fields: FrozenSet[str] = frozenset({"title", "contact", "bio"})
    internal_suffixes: Tuple[str, ...] = ("headshot_id",)
    video_host_field: str = "video_host"
    video_id_field: str = "video_id"
    video_field: str = "video"
    video_embeds: Mapping[str, str] = field(default_factory=lambda: DEFAULT_VIDEO_EMBEDS)
    children_field: str = "children"

    def __post_init__(self) -> None:
        # Normalise container types so callers may pass plain sets/dicts.
        object.__setattr__(self, "rich_text_fields", frozenset(self.rich_text_fields))
        object.__setattr__(self, "internal_suffixes", tuple(self.internal_suffixes))
        object.__setattr__(self, "video_embeds", _freeze_embeds(self.video_embeds))
        validate_config(self)

    @property
    def kind_prefixes(self) -> Tuple[str, str]:
        return (f"{self.parent_kind}_", f"{self.child_kind}_")

    def raw_key(self, kind: str, name: str) -> str:
        """Return the stored attribute key for canonical field ``name``."""
        return f"{self.namespace_prefix}{kind}_{name}"

    @property
    def child_reference_key(self) -> str:
        return self.raw_key(self.child_kind, self.child_reference_field)

    @property
    def group_key(self) -> str:
        return self.raw_key(self.child_kind, self.group_field)

    @property
    def group_entry_key(self) -> str:
        return self.raw_key(self.child_kind, self.group_entry_field)

    def kind_for(self, type_tag: str | None) -> RecordKind:
        """Map a CMS type tag (post type) onto a :class:`RecordKind`."""
        if type_tag == self.parent_kind:
            return RecordKind.PARENT
        if type_tag == self.child_kind:
            return RecordKind.CHILD
        return RecordKind.UNKNOWN


def _problems(config: MetadataConfig) -> Iterable[str]:
    if not config.namespace_prefix:
        yield "namespace_prefix must not be empty"
    if not config.parent_kind or not config.child_kind:
        yield "parent_kind and child_kind must not be empty"
    elif config.parent_kind == config.child_kind:
        yield "parent_kind and child_kind must differ"
    for name in ("child_reference_field", "group_field", "group_entry_field", "video_field"):
        if not getattr(config, name):
            yield f"{name} must not be empty"
    for name in sorted(config.rich_text_fields):
        if not name or not name.strip():
            yield "rich_text_fields contains an empty name"
        elif config.namespace_prefix and name.startswith(config.namespace_prefix):
            yield f"rich text field {name!r} still carries the namespace prefix"
        elif config.parent_kind and config.child_kind and name.startswith(config.kind_prefixes):
            yield f"rich text field {name!r} still carries a kind prefix"
    for suffix in config.internal_suffixes:
        if not suffix:
            yield "internal_suffixes contains an empty suffix"
    for host, template in config.video_embeds.items():
        if VIDEO_ID_PLACEHOLDER not in template:
            yield f"video embed template for {host!r} lacks {VIDEO_ID_PLACEHOLDER}"


def validate_config(config: MetadataConfig) -> None:
    """Raise :class:`ConfigError` listing every problem with ``config``."""
    problems = list(_problems(config))
    if problems:
        raise ConfigError("Invalid metadata configuration: " + "; ".join(problems))


def load_metadata_config(settings: "Settings | None" = None) -> MetadataConfig:
    """Build the pipeline configuration from runtime settings."""
    if settings is None:
        from config.settings import SETTINGS

        settings = SETTINGS
    return MetadataConfig(
        namespace_prefix=settings.metadata_namespace,
        parent_kind=settings.parent_post_type,
        child_kind=settings.child_post_type,
        rich_text_fields=frozenset(settings.rich_text_fields),
        children_field=settings.children_field,
    )


__all__ = [
    "DEFAULT_VIDEO_EMBEDS",
    "MetadataConfig",
    "load_metadata_config",
    "validate_config",
]
