"""Custom exception hierarchy for the portal client."""
from __future__ import annotations

from typing import Any


class PortalClientError(RuntimeError):
    """Base error for portal client failures."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        details: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class ConfigurationError(PortalClientError):
    """Raised when the backend base URL (or other required setting) is missing."""


class AuthenticationRequiredError(PortalClientError):
    """Raised before sending when there is no signed-in session at all."""


class RefreshFailure(PortalClientError):
    """Raised when the credential source cannot mint a usable token."""


class UnauthorizedAfterRefresh(PortalClientError):
    """Raised when a request is rejected again after a successful refresh."""


class TransportError(PortalClientError):
    """Raised for non-2xx responses and network-level failures."""


class UnexpectedResponseError(PortalClientError):
    """Raised when the API returns an unexpected payload structure."""
