from __future__ import annotations

import fcntl
import json
import logging
import os
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, TypeVar

from pydantic import ValidationError

from qrhunt.errors import StorageError
from qrhunt.models import Code, ScanEvent
from qrhunt.storage.base import PersistenceBackend

logger = logging.getLogger(__name__)

CODES_FILE = "local-codes.json"
SCAN_EVENTS_FILE = "local-scan-events.json"
LOCK_FILE = ".lock"

M = TypeVar("M", Code, ScanEvent)


def _parse(model: type[M], raw: Any, source: str) -> M:
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        raise StorageError(f"Corrupt entry in {source}: {e}") from e


class LocalBackend(PersistenceBackend):
    """Embedded store: two JSON files in `data_dir`.

    Both collections are read fully and rewritten fully on every mutation (temp file +
    rename, so a crash never leaves a half-written file). Every operation runs under an
    exclusive `flock` on `data_dir/.lock` (shared for reads) plus a thread lock, and
    re-reads the files once inside it, so several backends or processes on the same
    directory never work from a stale copy.
    """

    def __init__(self, *, data_dir: Path) -> None:
        self._data_dir = Path(data_dir)
        self._lock = threading.Lock()
        self._codes: list[Code] = []
        self._scans: list[ScanEvent] = []
        self._claimed: set[tuple[str, int]] = set()
        # Fail fast on an unreadable or corrupt directory.
        with self._locked(exclusive=False):
            pass

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @contextmanager
    def _locked(self, *, exclusive: bool) -> Iterator[None]:
        with self._lock:
            lock_file = None
            try:
                if exclusive:
                    self._data_dir.mkdir(parents=True, exist_ok=True)
                # Nothing to read (or to race with) until the directory exists.
                if self._data_dir.is_dir():
                    lock_file = open(self._data_dir / LOCK_FILE, "a+b")
                    fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH)
            except OSError as e:
                if lock_file is not None:
                    lock_file.close()
                raise StorageError(f"Could not lock {self._data_dir}: {e}") from e
            try:
                self._reload()
                yield
            finally:
                if lock_file is not None:
                    # Closing the descriptor releases the flock.
                    lock_file.close()

    def _reload(self) -> None:
        codes = [_parse(Code, raw, CODES_FILE) for raw in self._load(CODES_FILE)]

        scans: list[ScanEvent] = []
        claimed: set[tuple[str, int]] = set()
        for raw in self._load(SCAN_EVENTS_FILE):
            event = _parse(ScanEvent, raw, SCAN_EVENTS_FILE)
            pair = (event.group_name, event.code_id)
            if pair in claimed:
                logger.warning("Dropping duplicate scan event on load: group=%r code_id=%s", *pair)
                continue
            claimed.add(pair)
            scans.append(event)

        self._codes = codes
        self._scans = scans
        self._claimed = claimed

    def _load(self, name: str) -> list[Any]:
        path = self._data_dir / name
        if not path.exists():
            return []
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StorageError(f"Could not read {path}: {e}") from e
        if not isinstance(data, list):
            raise StorageError(f"Expected a JSON array in {path}")
        return data

    def _store(self, name: str, items: list[dict[str, Any]]) -> None:
        path = self._data_dir / name
        tmp = path.with_name(path.name + ".tmp")
        try:
            tmp.write_text(json.dumps(items, indent=2) + "\n", encoding="utf-8")
            os.replace(tmp, path)
        except OSError as e:
            logger.exception("Failed to write %s", path)
            raise StorageError(f"Could not write {path}: {e}") from e

    def add_code(self, *, description: str, points: int) -> Code:
        with self._locked(exclusive=True):
            code = Code(id=len(self._codes) + 1, description=description, points=points)
            codes = [*self._codes, code]
            self._store(CODES_FILE, [c.model_dump() for c in codes])
            # Only publish in memory once the write succeeded.
            self._codes = codes
            return code

    def get_code(self, code_id: int) -> Code | None:
        with self._locked(exclusive=False):
            return next((c for c in self._codes if c.id == code_id), None)

    def list_codes(self) -> list[Code]:
        with self._locked(exclusive=False):
            return sorted(self._codes, key=lambda c: c.id)

    def append_scan_if_absent(self, event: ScanEvent) -> bool:
        pair = (event.group_name, event.code_id)
        with self._locked(exclusive=True):
            if pair in self._claimed:
                return False
            scans = [*self._scans, event]
            self._store(SCAN_EVENTS_FILE, [e.model_dump(by_alias=True) for e in scans])
            self._scans = scans
            self._claimed.add(pair)
            return True

    def has_scan(self, *, group_name: str, code_id: int) -> bool:
        with self._locked(exclusive=False):
            return (group_name, code_id) in self._claimed

    def list_scans(self) -> list[ScanEvent]:
        with self._locked(exclusive=False):
            return list(self._scans)
