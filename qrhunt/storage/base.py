from __future__ import annotations

from abc import ABC, abstractmethod

from qrhunt.models import Code, ScanEvent


class PersistenceBackend(ABC):
    """Storage contract shared by the embedded and the remote store.

    Every mutating primitive is atomic on its own: callers never have to serialize
    access around a check-then-write.
    """

    @abstractmethod
    def add_code(self, *, description: str, points: int) -> Code:
        """Persist a new code with the next sequential id (count + 1)."""

    @abstractmethod
    def get_code(self, code_id: int) -> Code | None: ...

    @abstractmethod
    def list_codes(self) -> list[Code]:
        """All codes, ordered by id."""

    @abstractmethod
    def append_scan_if_absent(self, event: ScanEvent) -> bool:
        """Append `event` unless one already exists for its (group, code) pair.

        Returns True if the event was appended.
        """

    @abstractmethod
    def has_scan(self, *, group_name: str, code_id: int) -> bool: ...

    @abstractmethod
    def list_scans(self) -> list[ScanEvent]:
        """All scan events in the order they were credited."""

    def close(self) -> None:
        return None
