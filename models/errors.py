"""Error taxonomy shared by the client, the state container and the gateway."""

from __future__ import annotations

from typing import Optional


class WardrobeError(Exception):
    """Base class for every failure surfaced by the wardrobe stack."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AuthError(WardrobeError):
    """Raised when no valid session credential is available or the gateway rejects it."""


class TransportError(WardrobeError):
    """Raised when the gateway cannot be reached at all."""


class RemoteError(WardrobeError):
    """Raised for a non-success HTTP status, carrying the server message."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.message} (HTTP {self.status_code})"


class ServiceUnavailable(WardrobeError):
    """Raised when the advisory model is not configured or its call failed."""


class ValidationError(WardrobeError):
    """Raised for malformed request bodies or user input."""


__all__ = [
    "WardrobeError",
    "AuthError",
    "TransportError",
    "RemoteError",
    "ServiceUnavailable",
    "ValidationError",
]
