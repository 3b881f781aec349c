from __future__ import annotations

from typing import Any, Dict, Optional


class ClientRegistryError(RuntimeError):
    """Base class for domain errors raised by the client services."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidClientData(ClientRegistryError):
    """Raised when the client payload violates one or more field constraints."""

    def __init__(self, message: str, *, violations: Optional[list[str]] = None) -> None:
        super().__init__(message, details={"violations": violations or [message]})
        self.violations = violations or [message]


class ClientAlreadyExists(ClientRegistryError):
    """Raised when an active client already uses the same email and SIN number."""


class ClientNotFound(ClientRegistryError):
    """Raised when no client matches the given id, email or SIN number."""


class GeocodingFailure(ClientRegistryError):
    """Raised when an address cannot be resolved to coordinates."""

    def __init__(self, message: str, *, address: str | None = None, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details=details)
        self.address = address


class GeocodingStatusError(GeocodingFailure):
    """The provider answered but did not return a usable result."""

    def __init__(self, message: str, *, status: str | None, address: str | None = None) -> None:
        super().__init__(message, address=address, details={"status": status})
        self.status = status


class GeocodingTransportError(GeocodingFailure):
    """The provider could not be reached or answered with an HTTP error."""

    def __init__(
        self,
        message: str,
        *,
        address: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, address=address, details={"status_code": status_code})
        self.status_code = status_code


class GeocodingResponseError(GeocodingFailure):
    """The provider body could not be parsed."""
