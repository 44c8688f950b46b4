from __future__ import annotations

from pathlib import Path
import os
import sys

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from config.env import ensure_firebase_url, load_env_file
from config.settings import SETTINGS
from integrations.firebase_store import FirebaseStore
from sync_logging.errors import ConfigError


def test_ensure_firebase_url_returns_configured(monkeypatch):
    monkeypatch.setattr(SETTINGS, "firebase_url", "https://demo.firebaseio.com/speakers")
    assert ensure_firebase_url() == "https://demo.firebaseio.com/speakers"


def test_ensure_firebase_url_missing(monkeypatch):
    monkeypatch.setattr(SETTINGS, "firebase_url", "")
    with pytest.raises(ConfigError, match="FIREBASE_URL"):
        ensure_firebase_url()


def test_from_settings_requires_url_unless_dry_run(monkeypatch):
    monkeypatch.setattr(SETTINGS, "firebase_url", "")
    monkeypatch.setattr(SETTINGS, "dry_run", False)
    with pytest.raises(ConfigError):
        FirebaseStore.from_settings(SETTINGS)

    monkeypatch.setattr(SETTINGS, "dry_run", True)
    assert FirebaseStore.from_settings(SETTINGS).dry_run is True


def test_load_env_file_keeps_existing_variables(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text(
        "FIREBASE_AUTH=from-file\nSYNC_DOTENV_ONLY=1\n", encoding="utf-8"
    )
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("FIREBASE_AUTH", "from-env")
    monkeypatch.setenv("SYNC_DOTENV_ONLY", "")
    monkeypatch.delenv("SYNC_DOTENV_ONLY")

    assert load_env_file() is True
    assert os.environ["FIREBASE_AUTH"] == "from-env"
    assert os.environ["SYNC_DOTENV_ONLY"] == "1"
