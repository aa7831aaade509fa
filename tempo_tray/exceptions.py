"""Exception hierarchy for the Tempo tray application."""

from __future__ import annotations

from typing import Optional


class TempoError(Exception):
    """Base exception for the Tempo tray application."""


class TransientFetchError(TempoError):
    """Network failure, timeout or non-success HTTP status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class DecodeError(TempoError):
    """Payload from the network or the cache could not be decoded."""


class AssetMissingError(TempoError):
    """A required icon asset is absent or empty."""


class AutostartError(TempoError):
    """Registering or unregistering the autostart entry failed."""
