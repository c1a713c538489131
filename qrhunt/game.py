"""Top-level hunt workflows: creating codes and scanning tokens.

Kept free of FastAPI concerns so it can be reused by API routes, scripts, and tests.
"""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass

from qrhunt.errors import AuthorizationError, ConfigurationError
from qrhunt.ledger import ScanLedger, normalize_group_name
from qrhunt.models import Code
from qrhunt.registry import CodeRegistry
from qrhunt.scoring import ScoreAggregator
from qrhunt.storage.base import PersistenceBackend
from qrhunt.tokens import issue_token, verify_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ScanResult:
    code_found: Code | None
    scanned_first: bool


NOT_FOUND = ScanResult(code_found=None, scanned_first=False)


@dataclass(frozen=True, slots=True)
class Hunt:
    """The components of one hunt, all sharing a single backend."""

    registry: CodeRegistry
    ledger: ScanLedger
    scores: ScoreAggregator

    @staticmethod
    def from_backend(backend: PersistenceBackend) -> "Hunt":
        ledger = ScanLedger(backend=backend)
        return Hunt(
            registry=CodeRegistry(backend=backend),
            ledger=ledger,
            scores=ScoreAggregator(ledger=ledger),
        )


def scan_code(*, hunt: Hunt, token: str, group_name: str, signing_key: str | None) -> ScanResult:
    """Credit `group_name` for the code named by `token`, at most once.

    A token that fails verification and a valid token for an unknown id give the
    same answer (`NOT_FOUND`), so callers can't use this as a signature oracle.
    """

    group_name = normalize_group_name(group_name)

    verified = verify_token(token, signing_key=signing_key)
    if not verified.ok:
        logger.warning("Rejected scan from group=%r: %s", group_name, verified.failure)
        return NOT_FOUND

    code = hunt.registry.get(verified.unwrap())
    if code is None:
        logger.warning("Rejected scan from group=%r: unknown code id", group_name)
        return NOT_FOUND

    recorded = hunt.ledger.record_scan(group_name=group_name, code_id=code.id, points=code.points)
    return ScanResult(code_found=code, scanned_first=recorded.scanned_first)


def check_signing_key(*, provided_key: str, signing_key: str | None) -> None:
    if not signing_key:
        raise ConfigurationError("Server has no signing key configured")
    if not hmac.compare_digest(provided_key.encode("utf-8"), signing_key.encode("utf-8")):
        raise AuthorizationError("Signing key does not match")


def create_code(
    *,
    hunt: Hunt,
    description: str,
    points: int,
    provided_key: str,
    signing_key: str | None,
) -> tuple[Code, str]:
    """Register a new code and return it along with its signed token.

    The caller's key is checked before anything is persisted.
    """

    check_signing_key(provided_key=provided_key, signing_key=signing_key)
    code = hunt.registry.create(description=description, points=points)
    return code, issue_token(code, signing_key=signing_key)
