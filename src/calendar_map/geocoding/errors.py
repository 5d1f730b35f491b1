"""Geocoding failure taxonomy.

Providers raise these; the orchestrator catches them, logs by kind, and turns
them into "no location" for its caller. Only `MisconfiguredError` is allowed
to escape, and only at construction time.
"""

from __future__ import annotations

from enum import Enum


class FailureKind(str, Enum):
    """Why an address could not be resolved."""

    MISCONFIGURED = "misconfigured"
    TRANSPORT = "transport"
    NOT_FOUND = "not_found"
    PROVIDER_ERROR = "provider_error"


class GeocodingError(Exception):
    """Base exception for geocoding failures."""

    kind: FailureKind = FailureKind.PROVIDER_ERROR

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status: str | None = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status = status


class MisconfiguredError(GeocodingError):
    """Raised when a provider is built without its credential."""

    kind = FailureKind.MISCONFIGURED


class TransportError(GeocodingError):
    """Network error, timeout, or non-2xx HTTP response."""

    kind = FailureKind.TRANSPORT


class NotFoundError(GeocodingError):
    """Provider answered but has no result for the address."""

    kind = FailureKind.NOT_FOUND


class ProviderStatusError(GeocodingError):
    """Provider reported a non-OK status, or returned an unexpected body."""

    kind = FailureKind.PROVIDER_ERROR
