"""Environment loading helpers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from dotenv import find_dotenv, load_dotenv

from sync_logging.errors import ConfigError

if TYPE_CHECKING:  # pragma: no cover
    from config.settings import Settings


def load_env_file() -> bool:
    """Load a ``.env`` file found from the working directory.

    Variables that are already present in the environment win over the file.
    Returns ``True`` when a file was found and loaded.
    """

    path = find_dotenv(usecwd=True)
    if not path:
        return False
    return load_dotenv(path, override=False)


def ensure_firebase_url(settings: "Settings | None" = None) -> str:
    """Return the configured Firebase URL or raise an explicit error."""

    if settings is None:
        from config.settings import SETTINGS

        settings = SETTINGS

    if settings.firebase_url:
        return settings.firebase_url

    raise ConfigError("FIREBASE_URL must be configured to push entities.")
