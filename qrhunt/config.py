from __future__ import annotations

import os
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from qrhunt.errors import ConfigurationError


class DeploymentMode(StrEnum):
    embedded = "embedded"
    remote = "remote"


@dataclass(frozen=True, slots=True)
class Settings:
    mode: DeploymentMode = DeploymentMode.embedded
    # Shared secret used to sign and verify tokens. None means code creation is disabled.
    signing_key: str | None = None
    data_dir: Path = Path("data")
    redis_url: str = "redis://localhost:6379/0"
    redis_prefix: str = "qrhunt"
    log_level: str = "INFO"


def _parse_mode(raw: str) -> DeploymentMode:
    try:
        return DeploymentMode(raw.strip().casefold())
    except ValueError as e:
        allowed = ", ".join(m.value for m in DeploymentMode)
        raise ConfigurationError(f"QRHUNT_MODE must be one of: {allowed} (got {raw!r})") from e


def settings_from_env() -> Settings:
    """Resolve settings once from the process environment.

    The deployment mode is explicit; nothing is inferred from hostnames or URLs.
    """

    return Settings(
        mode=_parse_mode(os.environ.get("QRHUNT_MODE", DeploymentMode.embedded.value)),
        signing_key=os.environ.get("QRHUNT_SIGNING_KEY") or None,
        data_dir=Path(os.environ.get("QRHUNT_DATA_DIR", "data")),
        redis_url=os.environ.get("REDIS_URL", "redis://localhost:6379/0"),
        redis_prefix=os.environ.get("QRHUNT_REDIS_PREFIX", "qrhunt"),
        log_level=os.environ.get("QRHUNT_LOG_LEVEL", "INFO").upper(),
    )
