from __future__ import annotations


class QrHuntError(Exception):
    """Base class for errors raised by the hunt core."""


class ConfigurationError(QrHuntError):
    """The server is missing (or has an invalid) piece of configuration, e.g. the signing key."""


class AuthorizationError(QrHuntError):
    """The caller supplied a signing key that does not match the server's."""


class VerificationError(QrHuntError):
    """A token failed verification.

    Only raised by `VerificationResult.unwrap()`; the scan workflow never lets this
    escape and reports "code not found" instead.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(f"Token verification failed: {reason}")
        self.reason = reason


class StorageError(QrHuntError):
    """A durable read/write or a network round-trip to the store failed. Retryable."""
