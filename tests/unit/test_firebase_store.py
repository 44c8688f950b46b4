from pathlib import Path
import json
import sys

import pytest
import requests

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from config.settings import Settings
from integrations import firebase_store
from integrations.firebase_store import FirebaseStore
from sync_logging.errors import ConfigError, PushError

BASE = "https://demo.firebaseio.com/speakers"


class DummyResp:
    def __init__(self, data=None, status=200):
        self._data = data
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError("boom", response=self)

    def json(self):
        return self._data


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response or DummyResp({})
        self.error = error
        self.calls = []

    def put(self, url, **kwargs):
        self.calls.append(("put", url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response

    def get(self, url, **kwargs):
        self.calls.append(("get", url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


def test_push_puts_json_with_auth_and_timeout():
    session = FakeSession()
    store = FirebaseStore(BASE + "/", "secret", timeout=3, session=session)

    store.push("7", {"name": "Grace", "children": {"Compilers": {"date": "2024-01-01"}}})

    method, url, kwargs = session.calls[0]
    assert method == "put"
    assert url == f"{BASE}/7.json"
    assert kwargs["params"] == {"auth": "secret"}
    assert kwargs["timeout"] == 3
    assert json.loads(kwargs["data"].decode("utf-8"))["children"]["Compilers"]["date"] == "2024-01-01"


def test_push_without_token_sends_no_auth():
    session = FakeSession()
    FirebaseStore(BASE, session=session).push("7", {})
    assert session.calls[0][2]["params"] == {}


def test_key_is_url_quoted():
    session = FakeSession()
    FirebaseStore(BASE, session=session).push("a/b", {})
    assert session.calls[0][1] == f"{BASE}/a%2Fb.json"


def test_timeout_is_retryable():
    store = FirebaseStore(BASE, session=FakeSession(error=requests.Timeout("slow")))
    with pytest.raises(PushError) as excinfo:
        store.push("7", {})
    assert excinfo.value.retryable is True
    assert excinfo.value.key == "7"


def test_connection_error_is_retryable():
    store = FirebaseStore(BASE, session=FakeSession(error=requests.ConnectionError("down")))
    with pytest.raises(PushError) as excinfo:
        store.push("7", {})
    assert excinfo.value.retryable is True


@pytest.mark.parametrize("status,retryable", [(429, True), (500, True), (503, True), (401, False), (400, False)])
def test_error_status(status, retryable):
    store = FirebaseStore(BASE, session=FakeSession(response=DummyResp({"error": "x"}, status=status)))
    with pytest.raises(PushError) as excinfo:
        store.push("7", {})
    assert excinfo.value.status_code == status
    assert excinfo.value.retryable is retryable


def test_unserialisable_value_is_not_retryable():
    session = FakeSession()
    with pytest.raises(PushError) as excinfo:
        FirebaseStore(BASE, session=session).push("7", {"bad": object()})
    assert excinfo.value.retryable is False
    assert session.calls == []


def test_dry_run_makes_no_request():
    session = FakeSession()
    store = FirebaseStore("", dry_run=True, session=session)
    store.push("7", {"name": "Grace"})
    assert session.calls == []


def test_missing_url_fails_fast():
    with pytest.raises(ConfigError):
        FirebaseStore("")


def test_fetch_returns_json():
    session = FakeSession(response=DummyResp({"name": "Grace"}))
    assert FirebaseStore(BASE, session=session).fetch("7") == {"name": "Grace"}
    assert session.calls[0][:2] == ("get", f"{BASE}/7.json")


def test_fetch_http_error():
    session = FakeSession(response=DummyResp(None, status=403))
    with pytest.raises(PushError) as excinfo:
        FirebaseStore(BASE, session=session).fetch("7")
    assert excinfo.value.status_code == 403
    assert excinfo.value.retryable is False


def test_from_settings(monkeypatch):
    monkeypatch.setenv("FIREBASE_URL", BASE + "/")
    monkeypatch.setenv("FIREBASE_AUTH", "tok")
    monkeypatch.setenv("PUSH_TIMEOUT", "4")
    store = FirebaseStore.from_settings(Settings())
    assert store.base_url == BASE
    assert store.auth_token == "tok"
    assert store.timeout == 4.0


def test_successful_push_is_logged(monkeypatch):
    logged = []
    monkeypatch.setattr(firebase_store, "log_step", lambda *a, **k: logged.append(a))
    FirebaseStore(BASE, session=FakeSession()).push("7", {"a": 1})
    assert logged[0][:2] == ("firebase", "push_succeeded")
    assert logged[0][2]["http_status"] == 200
