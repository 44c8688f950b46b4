"""Centralised runtime configuration for the metadata sync."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from config.env import load_env_file

_logger = logging.getLogger(__name__)


def _bool_env(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        _logger.warning("Invalid number for %s=%r; using default %s", name, raw, default)
        return default


def _list_env(name: str, default: str) -> List[str]:
    raw = os.environ.get(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def _default_root() -> Path:
    project_root = os.environ.get("PROJECT_ROOT")
    if project_root:
        return Path(project_root).expanduser()
    return Path(__file__).resolve().parent.parent


@dataclass
class Settings:
    env: str = field(default_factory=lambda: os.environ.get("ENV", "dev"))
    service_version: str = field(
        default_factory=lambda: os.environ.get("SERVICE_VERSION", "0.0.0")
    )

    root_dir: Path = field(default_factory=_default_root)
    logs_dir: Path = field(init=False)
    sync_logs_dir: Path = field(init=False)
    record_db_path: Path = field(init=False)

    firebase_url: str = field(default_factory=lambda: os.environ.get("FIREBASE_URL", ""))
    firebase_auth: str = field(default_factory=lambda: os.environ.get("FIREBASE_AUTH", ""))
    push_timeout: float = field(default_factory=lambda: _float_env("PUSH_TIMEOUT", 10.0))
    dry_run: bool = field(default_factory=lambda: _bool_env("SYNC_DRY_RUN", False))

    metadata_namespace: str = field(
        default_factory=lambda: os.environ.get("METADATA_NAMESPACE", "_cmb_")
    )
    parent_post_type: str = field(
        default_factory=lambda: os.environ.get("PARENT_POST_TYPE", "speaker")
    )
    child_post_type: str = field(
        default_factory=lambda: os.environ.get("CHILD_POST_TYPE", "presentation")
    )
    rich_text_fields: List[str] = field(
        default_factory=lambda: _list_env("RICH_TEXT_FIELDS", "title,contact,bio")
    )
    children_field: str = field(
        default_factory=lambda: os.environ.get("CHILDREN_FIELD", "children")
    )

    def __post_init__(self) -> None:
        self.root_dir = self._resolve_root(self.root_dir)
        self.logs_dir = self._resolve_path(os.environ.get("LOGS_DIR", "logs"))

        sync_override = os.environ.get("SYNC_LOGS_DIR")
        if sync_override:
            self.sync_logs_dir = self._resolve_path(sync_override)
        else:
            self.sync_logs_dir = self.logs_dir / "sync"

        self.record_db_path = self._resolve_path(
            os.environ.get("RECORD_DB_PATH", "data/records.db")
        )
        self.firebase_url = self.firebase_url.strip().rstrip("/")

        if self.push_timeout <= 0:
            _logger.warning(
                "PUSH_TIMEOUT must be positive (got %s); using 10s", self.push_timeout
            )
            self.push_timeout = 10.0

    def _resolve_root(self, value: Path) -> Path:
        value = value.expanduser()
        if not value.is_absolute():
            value = (Path(__file__).resolve().parent.parent / value).resolve()
        return value

    def _resolve_path(self, value: str | Path) -> Path:
        candidate = Path(value).expanduser()
        if not candidate.is_absolute():
            candidate = (self.root_dir / candidate).resolve()
        return candidate


load_env_file()
SETTINGS = Settings()

__all__ = ["SETTINGS", "Settings"]
