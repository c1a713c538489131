from __future__ import annotations

import logging

from qrhunt.models import Code
from qrhunt.storage.base import PersistenceBackend

logger = logging.getLogger(__name__)


class CodeRegistry:
    """Append-only catalog of issuable codes. There is no removal operation."""

    def __init__(self, *, backend: PersistenceBackend) -> None:
        self._backend = backend

    def create(self, *, description: str, points: int) -> Code:
        description = description.strip()
        if not description:
            raise ValueError("description must not be empty")
        if isinstance(points, bool) or not isinstance(points, int):
            raise ValueError("points must be an integer")
        if points < 0:
            raise ValueError("points must be >= 0")

        code = self._backend.add_code(description=description, points=points)
        logger.info("Registered code id=%s points=%s description=%r", code.id, code.points, code.description)
        return code

    def get(self, code_id: int) -> Code | None:
        return self._backend.get_code(code_id)

    def codes(self) -> list[Code]:
        return self._backend.list_codes()
