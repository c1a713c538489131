from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from qrhunt.config import Settings, settings_from_env
from qrhunt.game import Hunt
from qrhunt.storage import PersistenceBackend, create_backend


_BACKEND: PersistenceBackend | None = None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return settings_from_env()


def get_backend(settings: Settings = Depends(get_settings)) -> PersistenceBackend:
    """Create the configured backend once and reuse it for every request.

    The embedded store relies on a single in-process writer, so it must not be
    rebuilt per request.
    """

    global _BACKEND
    if _BACKEND is None:
        _BACKEND = create_backend(settings)
    return _BACKEND


def reset_backend() -> None:
    """Close and drop the cached backend (shutdown, tests)."""

    global _BACKEND
    if _BACKEND is not None:
        _BACKEND.close()
    _BACKEND = None


def get_hunt(backend: PersistenceBackend = Depends(get_backend)) -> Hunt:
    return Hunt.from_backend(backend)
