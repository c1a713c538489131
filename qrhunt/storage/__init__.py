"""Persistence backends for the code catalog and the scan ledger.

Exactly one backend is active per deployment, chosen from `Settings.mode` at startup.
"""

from __future__ import annotations

from qrhunt.config import DeploymentMode, Settings
from qrhunt.storage.base import PersistenceBackend
from qrhunt.storage.local import LocalBackend
from qrhunt.storage.redis_store import RedisBackend

__all__ = ["LocalBackend", "PersistenceBackend", "RedisBackend", "create_backend"]


def create_backend(settings: Settings) -> PersistenceBackend:
    if settings.mode == DeploymentMode.remote:
        from qrhunt.infra.redis_client import create_redis

        return RedisBackend(r=create_redis(settings.redis_url), prefix=settings.redis_prefix)
    return LocalBackend(data_dir=settings.data_dir)
