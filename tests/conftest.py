from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import fakeredis
import pytest
from fastapi.testclient import TestClient

from qrhunt.config import DeploymentMode, Settings
from qrhunt.game import Hunt
from qrhunt.storage import LocalBackend, PersistenceBackend, RedisBackend

SIGNING_KEY = "secret"


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's shell / .env from leaking into tests."""

    for name in (
        "QRHUNT_MODE",
        "QRHUNT_SIGNING_KEY",
        "QRHUNT_DATA_DIR",
        "QRHUNT_REDIS_PREFIX",
        "QRHUNT_LOG_LEVEL",
        "REDIS_URL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def local_backend(tmp_path: Path) -> LocalBackend:
    return LocalBackend(data_dir=tmp_path / "data")


@pytest.fixture()
def redis_backend() -> RedisBackend:
    r = fakeredis.FakeRedis(decode_responses=True)
    return RedisBackend(r=r, prefix="test")


@pytest.fixture(params=["embedded", "remote"])
def backend(request: pytest.FixtureRequest, tmp_path: Path) -> PersistenceBackend:
    """Run a test once against each backend implementation."""

    if request.param == "embedded":
        return LocalBackend(data_dir=tmp_path / "data")
    return RedisBackend(r=fakeredis.FakeRedis(decode_responses=True), prefix="test")


@pytest.fixture()
def hunt(backend: PersistenceBackend) -> Hunt:
    return Hunt.from_backend(backend)


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(mode=DeploymentMode.embedded, signing_key=SIGNING_KEY, data_dir=tmp_path / "data")


@pytest.fixture()
def client_and_backend(
    backend: PersistenceBackend, settings: Settings
) -> Generator[tuple[TestClient, PersistenceBackend], None, None]:
    """FastAPI TestClient wired to a per-test backend and settings."""

    from qrhunt.api.deps import get_backend, get_settings
    from qrhunt.main import app

    app.dependency_overrides[get_backend] = lambda: backend
    app.dependency_overrides[get_settings] = lambda: settings
    with TestClient(app) as c:
        yield c, backend
    app.dependency_overrides.clear()


@pytest.fixture()
def client(client_and_backend: tuple[TestClient, PersistenceBackend]) -> TestClient:
    return client_and_backend[0]
