# integrations/firebase_store.py
"""Firebase Realtime Database client used to publish composed entities.

Entities are written with the REST "set" operation (``PUT <node>.json``), which
replaces the whole node stored under the entity key.  A push is attempted once
with a bounded timeout; retrying is left to whoever dispatched the event.
"""
from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Dict, Optional
from urllib.parse import quote

import requests

from config.env import ensure_firebase_url
from core.utils import log_step
from sync_logging.errors import ConfigError, PushError

if TYPE_CHECKING:  # pragma: no cover
    from config.settings import Settings

DEFAULT_TIMEOUT = 10.0


def _is_retryable_status(status: int) -> bool:
    return status == 429 or 500 <= status < 600


class FirebaseStore:
    def __init__(
        self,
        base_url: str,
        auth_token: str = "",
        *,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
        dry_run: bool = False,
    ) -> None:
        if not base_url and not dry_run:
            raise ConfigError("FIREBASE_URL must be configured to push entities.")
        self.base_url = (base_url or "").rstrip("/")
        self.auth_token = auth_token
        self.timeout = timeout
        self.session = session or requests.Session()
        self.dry_run = dry_run

    @classmethod
    def from_settings(cls, settings: "Settings | None" = None) -> "FirebaseStore":
        if settings is None:
            from config.settings import SETTINGS

            settings = SETTINGS
        base_url = settings.firebase_url if settings.dry_run else ensure_firebase_url(settings)
        return cls(
            base_url,
            settings.firebase_auth,
            timeout=settings.push_timeout,
            dry_run=settings.dry_run,
        )

    def _url(self, key: str) -> str:
        return f"{self.base_url}/{quote(str(key), safe='')}.json"

    def _params(self) -> Dict[str, str]:
        return {"auth": self.auth_token} if self.auth_token else {}

    def push(self, key: str, value: Dict[str, Any]) -> None:
        """Replace the node at ``key`` with ``value``.

        Raises :class:`PushError` when the value cannot be encoded, the request
        times out or fails, or Firebase answers with an error status.
        """
        try:
            body = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise PushError(f"Entity {key!r} is not JSON serialisable: {exc}", key=key) from exc

        if self.dry_run:
            log_step("firebase", "push_dry_run", {"key": key, "bytes": len(body)})
            return

        try:
            response = self.session.put(
                self._url(key),
                params=self._params(),
                data=body.encode("utf-8"),
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.Timeout as exc:
            raise PushError(
                f"Push of {key!r} timed out after {self.timeout}s", key=key, retryable=True
            ) from exc
        except requests.RequestException as exc:
            raise PushError(f"Push of {key!r} failed: {exc}", key=key, retryable=True) from exc

        if response.status_code >= 400:
            raise PushError(
                f"Firebase rejected push of {key!r} with HTTP {response.status_code}",
                key=key,
                status_code=response.status_code,
                retryable=_is_retryable_status(response.status_code),
            )
        log_step(
            "firebase",
            "push_succeeded",
            {"key": key, "http_status": response.status_code, "bytes": len(body)},
        )

    def fetch(self, key: str) -> Any:
        """Return the value currently stored at ``key`` (``None`` if absent)."""
        if not self.base_url:
            raise ConfigError("FIREBASE_URL must be configured to fetch entities.")
        try:
            response = self.session.get(self._url(key), params=self._params(), timeout=self.timeout)
            response.raise_for_status()
        except requests.Timeout as exc:
            raise PushError(f"Fetch of {key!r} timed out", key=key, retryable=True) from exc
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            raise PushError(
                f"Fetch of {key!r} failed: {exc}",
                key=key,
                status_code=status,
                retryable=status is None or _is_retryable_status(status),
            ) from exc
        except requests.RequestException as exc:
            raise PushError(f"Fetch of {key!r} failed: {exc}", key=key, retryable=True) from exc
        return response.json()


__all__ = ["FirebaseStore", "DEFAULT_TIMEOUT"]
