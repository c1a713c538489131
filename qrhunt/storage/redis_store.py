from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import redis
from redis.client import Pipeline

from qrhunt.errors import StorageError
from qrhunt.models import Code, ScanEvent
from qrhunt.storage.base import PersistenceBackend

logger = logging.getLogger(__name__)


@contextmanager
def _storage_errors(op: str) -> Iterator[None]:
    try:
        yield
    except redis.RedisError as e:
        logger.exception("Redis %s failed", op)
        raise StorageError(f"Store unavailable during {op}: {e}") from e


def _claim_field(*, group_name: str, code_id: int) -> str:
    # code_id is all digits, so the first ":" always separates it from the group name.
    return f"{code_id}:{group_name}"


class RedisBackend(PersistenceBackend):
    """Remote store reached over the Redis protocol.

    Layout (all keys under `prefix`):
      - `{prefix}:codes`        hash  id -> Code JSON
      - `{prefix}:scans`        list  ScanEvent JSON, in credit order
      - `{prefix}:scans:claims` hash  "{code_id}:{group}" -> ScanEvent JSON

    Code creation and scan crediting are WATCH/MULTI transactions: concurrent writers
    for the same key retry instead of double-writing.
    """

    def __init__(self, *, r: redis.Redis, prefix: str = "qrhunt") -> None:
        self._r = r
        self._codes_key = f"{prefix}:codes"
        self._scans_key = f"{prefix}:scans"
        self._claims_key = f"{prefix}:scans:claims"

    def add_code(self, *, description: str, points: int) -> Code:
        def _insert(pipe: Pipeline) -> Code:
            code = Code(id=int(pipe.hlen(self._codes_key)) + 1, description=description, points=points)
            pipe.multi()
            pipe.hset(self._codes_key, str(code.id), code.model_dump_json())
            return code

        with _storage_errors("add_code"):
            return self._r.transaction(_insert, self._codes_key, value_from_callable=True)

    def get_code(self, code_id: int) -> Code | None:
        with _storage_errors("get_code"):
            raw = self._r.hget(self._codes_key, str(code_id))
        if not raw:
            return None
        return Code.model_validate_json(raw)

    def list_codes(self) -> list[Code]:
        with _storage_errors("list_codes"):
            raw = self._r.hgetall(self._codes_key)
        codes = [Code.model_validate_json(v) for v in raw.values()]
        codes.sort(key=lambda c: c.id)
        return codes

    def append_scan_if_absent(self, event: ScanEvent) -> bool:
        field = _claim_field(group_name=event.group_name, code_id=event.code_id)
        payload = event.model_dump_json(by_alias=True)

        def _insert_if_absent(pipe: Pipeline) -> bool:
            if pipe.hexists(self._claims_key, field):
                return False
            pipe.multi()
            pipe.hset(self._claims_key, field, payload)
            pipe.rpush(self._scans_key, payload)
            return True

        with _storage_errors("append_scan_if_absent"):
            return self._r.transaction(_insert_if_absent, self._claims_key, value_from_callable=True)

    def has_scan(self, *, group_name: str, code_id: int) -> bool:
        with _storage_errors("has_scan"):
            return bool(self._r.hexists(self._claims_key, _claim_field(group_name=group_name, code_id=code_id)))

    def list_scans(self) -> list[ScanEvent]:
        with _storage_errors("list_scans"):
            raw = self._r.lrange(self._scans_key, 0, -1)
        return [ScanEvent.model_validate_json(v) for v in raw]

    def close(self) -> None:
        try:
            self._r.close()
        except redis.RedisError:
            logger.debug("Ignoring error while closing redis client", exc_info=True)
