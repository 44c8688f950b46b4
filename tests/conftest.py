from __future__ import annotations

from pathlib import Path
import sys

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from config.metadata import MetadataConfig
from config.settings import SETTINGS
from core import utils
from integrations.record_store import InMemoryRecordStore


@pytest.fixture(autouse=True)
def _temporary_settings_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(SETTINGS, "root_dir", tmp_path)
    monkeypatch.setattr(SETTINGS, "logs_dir", tmp_path / "logs")
    monkeypatch.setattr(SETTINGS, "sync_logs_dir", tmp_path / "logs" / "sync")
    monkeypatch.setattr(SETTINGS, "record_db_path", tmp_path / "data" / "records.db")
    utils.reset_run()
    yield
    utils.reset_run()


class FakeRemote:
    """Remote store double recording every push."""

    def __init__(self, error: Exception | None = None) -> None:
        self.pushes: list[tuple[str, dict]] = []
        self.error = error

    def push(self, key: str, value: dict) -> None:
        if self.error is not None:
            raise self.error
        self.pushes.append((key, value))


@pytest.fixture
def config() -> MetadataConfig:
    return MetadataConfig()


@pytest.fixture
def ns_config() -> MetadataConfig:
    """Short layout: ``_ns_`` namespace with ``parent``/``child`` kinds."""
    return MetadataConfig(namespace_prefix="_ns_", parent_kind="parent", child_kind="child")


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def speaker_store(config: MetadataConfig) -> InMemoryRecordStore:
    store = InMemoryRecordStore(config)
    store.add_record(
        10,
        "speaker",
        "Ada Lovelace",
        {
            "_cmb_speaker_headshot": ["https://cdn.example/ada.jpg"],
            "_cmb_speaker_headshot_id": ["881"],
            "_cmb_speaker_title": ["Analyst"],
            "_cmb_speaker_contact": ["ada@example.com\n\n+44 20 7946 0000"],
            "_cmb_speaker_bio": ["First programmer.\n\nWrote notes on the engine."],
            "_edit_lock": ["1700000000:1"],
        },
    )
    store.add_record(
        21,
        "presentation",
        "Notes on the Analytical Engine",
        {
            "_cmb_presentation_speaker": ["10"],
            "_cmb_presentation_date": ["2024-01-01"],
            "_cmb_presentation_start_time": ["09:00 AM"],
            "_cmb_presentation_video_host": ["wistia"],
            "_cmb_presentation_video_id": ["abc123"],
            "_cmb_presentation_liveblog": [
                [
                    {"_cmb_presentation_liveblog_entry": "Talk starts."},
                    {"_cmb_presentation_liveblog_entry": "Q&A now."},
                ]
            ],
            "_edit_last": ["1"],
        },
    )
    store.add_record(
        22,
        "presentation",
        "Bernoulli Numbers",
        {
            "_cmb_presentation_speaker": ["10"],
            "_cmb_presentation_date": ["2024-01-02"],
        },
    )
    store.add_record(30, "page", "About", {"_cmb_page_layout": ["wide"]})
    return store


@pytest.fixture
def remote_factory():
    return FakeRemote
