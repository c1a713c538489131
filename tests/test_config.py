from __future__ import annotations

from pathlib import Path

import pytest

from qrhunt.config import DeploymentMode, Settings, settings_from_env
from qrhunt.errors import ConfigurationError
from qrhunt.storage import LocalBackend, RedisBackend, create_backend


def test_defaults() -> None:
    s = settings_from_env()
    assert s.mode == DeploymentMode.embedded
    assert s.signing_key is None
    assert s.data_dir == Path("data")
    assert s.redis_url == "redis://localhost:6379/0"
    assert s.log_level == "INFO"


def test_values_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("QRHUNT_MODE", " Remote ")
    monkeypatch.setenv("QRHUNT_SIGNING_KEY", "s3cret")
    monkeypatch.setenv("QRHUNT_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("REDIS_URL", "redis://cache:6379/2")
    monkeypatch.setenv("QRHUNT_REDIS_PREFIX", "hunt")
    monkeypatch.setenv("QRHUNT_LOG_LEVEL", "debug")

    s = settings_from_env()
    assert s == Settings(
        mode=DeploymentMode.remote,
        signing_key="s3cret",
        data_dir=tmp_path,
        redis_url="redis://cache:6379/2",
        redis_prefix="hunt",
        log_level="DEBUG",
    )


def test_empty_signing_key_counts_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("QRHUNT_SIGNING_KEY", "")
    assert settings_from_env().signing_key is None


def test_unknown_mode_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("QRHUNT_MODE", "stackblitz")
    with pytest.raises(ConfigurationError):
        settings_from_env()


def test_create_backend_follows_mode(tmp_path: Path) -> None:
    embedded = create_backend(Settings(mode=DeploymentMode.embedded, data_dir=tmp_path))
    assert isinstance(embedded, LocalBackend)
    assert embedded.data_dir == tmp_path

    # redis-py connects lazily, so no server is needed to build the client.
    remote = create_backend(Settings(mode=DeploymentMode.remote))
    assert isinstance(remote, RedisBackend)
    remote.close()


def test_redis_client_uses_the_url_it_is_given(monkeypatch: pytest.MonkeyPatch) -> None:
    from qrhunt.infra.redis_client import create_redis

    # The environment is read once, by settings_from_env; the factory never looks at it.
    monkeypatch.setenv("REDIS_URL", "redis://elsewhere:1/0")
    client = create_redis("redis://cache:6380/3")
    kwargs = client.connection_pool.connection_kwargs
    assert (kwargs["host"], kwargs["port"], kwargs["db"]) == ("cache", 6380, 3)
    client.close()
