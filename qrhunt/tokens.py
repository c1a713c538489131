"""Signed code tokens.

A token is a compact HS256 JWT whose only claim is `jti`: the code id as a decimal
string. Point values are never embedded; they are always resolved server-side, so
an edited token can at worst name a different (real) code or fail verification.
"""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from enum import StrEnum

from jose import jws, jwt
from jose.exceptions import JWSError

from qrhunt.errors import ConfigurationError, VerificationError
from qrhunt.models import Code

ALGORITHM = "HS256"
ID_CLAIM = "jti"
# Longer ids are never issued; also keeps int() clear of the str->int digit limit.
MAX_ID_DIGITS = 18


class VerificationFailure(StrEnum):
    malformed = "malformed"
    bad_signature = "bad_signature"
    missing_id = "missing_id"
    invalid_id = "invalid_id"


@dataclass(frozen=True, slots=True)
class VerificationResult:
    code_id: int | None = None
    failure: VerificationFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def unwrap(self) -> int:
        if self.failure is not None or self.code_id is None:
            raise VerificationError(str(self.failure or VerificationFailure.malformed))
        return self.code_id

    @staticmethod
    def success(code_id: int) -> "VerificationResult":
        return VerificationResult(code_id=code_id)

    @staticmethod
    def fail(failure: VerificationFailure) -> "VerificationResult":
        return VerificationResult(failure=failure)


def _require_key(signing_key: str | None) -> str:
    if not signing_key:
        raise ConfigurationError("A non-empty signing key is required")
    return signing_key


def issue_token(code: Code, *, signing_key: str | None) -> str:
    key = _require_key(signing_key)
    return jwt.encode({ID_CLAIM: str(code.id)}, key, algorithm=ALGORITHM)


def _decode_segment(segment: str) -> bytes | None:
    """Decode unpadded base64url, or None unless `segment` re-encodes to exactly itself.

    Decoders ignore the spare low bits of the final character, so without the
    round-trip check some single-character edits to the signature would still verify.
    """

    if not segment or "=" in segment:
        return None
    try:
        raw = base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))
    except (binascii.Error, ValueError):
        return None
    if base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii") != segment:
        return None
    return raw


def _decode_json(raw: bytes) -> object:
    # Deeply nested arrays/objects blow the decoder's recursion limit.
    try:
        return json.loads(raw)
    except (ValueError, RecursionError):
        return None


def _parse_code_id(value: object) -> int | None:
    # The id travels as a decimal string; accept a bare int too, never a bool.
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 1 else None
    if isinstance(value, str) and len(value) <= MAX_ID_DIGITS and value.isascii() and value.isdigit():
        code_id = int(value)
        return code_id if code_id >= 1 else None
    return None


def verify_token(token: object, *, signing_key: str | None) -> VerificationResult:
    """Check a token's signature and extract its code id.

    Never raises for bad input: every malformed or inauthentic token comes back as a
    failed `VerificationResult`. Raises `ConfigurationError` only when the server has
    no signing key at all.
    """

    key = _require_key(signing_key)

    if not isinstance(token, str):
        return VerificationResult.fail(VerificationFailure.malformed)

    segments = token.strip().split(".")
    decoded = [_decode_segment(s) for s in segments]
    if len(segments) != 3 or any(d is None for d in decoded):
        return VerificationResult.fail(VerificationFailure.malformed)

    header = _decode_json(decoded[0])
    if not isinstance(header, dict) or header.get("alg") != ALGORITHM:
        return VerificationResult.fail(VerificationFailure.malformed)

    # Structure and header are known good here, so any JWSError is a signature mismatch.
    try:
        jws.verify(".".join(segments), key, algorithms=[ALGORITHM])
    except JWSError:
        return VerificationResult.fail(VerificationFailure.bad_signature)

    claims = _decode_json(decoded[1])
    if not isinstance(claims, dict):
        return VerificationResult.fail(VerificationFailure.malformed)
    if ID_CLAIM not in claims:
        return VerificationResult.fail(VerificationFailure.missing_id)

    code_id = _parse_code_id(claims[ID_CLAIM])
    if code_id is None:
        return VerificationResult.fail(VerificationFailure.invalid_id)

    return VerificationResult.success(code_id)
