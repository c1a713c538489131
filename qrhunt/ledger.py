from __future__ import annotations

import logging
from dataclasses import dataclass

from qrhunt.models import ScanEvent
from qrhunt.storage.base import PersistenceBackend

logger = logging.getLogger(__name__)


def normalize_group_name(group_name: str) -> str:
    name = group_name.strip()
    if not name:
        raise ValueError("groupName must not be empty")
    return name


@dataclass(frozen=True, slots=True)
class RecordResult:
    scanned_first: bool


class ScanLedger:
    """Append-only, idempotent record of which group has claimed which code.

    Each (group, code) pair goes Unscanned -> Scanned exactly once; every later scan
    of the pair is a no-op reported as `scanned_first=False`.
    """

    def __init__(self, *, backend: PersistenceBackend) -> None:
        self._backend = backend

    def record_scan(self, *, group_name: str, code_id: int, points: int) -> RecordResult:
        event = ScanEvent(group_name=normalize_group_name(group_name), code_id=code_id, points=points)

        # The backend does the check-and-append atomically.
        appended = self._backend.append_scan_if_absent(event)
        if appended:
            logger.info("Credited group=%r code_id=%s points=%s", event.group_name, code_id, points)
        else:
            logger.debug("Group %r already claimed code_id=%s", event.group_name, code_id)
        return RecordResult(scanned_first=appended)

    def has_scanned(self, *, group_name: str, code_id: int) -> bool:
        return self._backend.has_scan(group_name=normalize_group_name(group_name), code_id=code_id)

    def events(self) -> list[ScanEvent]:
        return self._backend.list_scans()
