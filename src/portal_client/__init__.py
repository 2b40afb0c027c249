"""High-level portal client entrypoints."""
from .auth import BearerHeaders, CallbackCredentialSource, CredentialSource
from .client import PortalClient
from .config import ClientConfig
from .exceptions import (
    AuthenticationRequiredError,
    ConfigurationError,
    PortalClientError,
    RefreshFailure,
    TransportError,
    UnauthorizedAfterRefresh,
)
from .executor import AuthenticatedExecutor, RequestOptions
from .refresh import RefreshCoordinator
from .teardown import SessionTeardown

__all__ = [
    "PortalClient",
    "ClientConfig",
    "CredentialSource",
    "CallbackCredentialSource",
    "BearerHeaders",
    "AuthenticatedExecutor",
    "RequestOptions",
    "RefreshCoordinator",
    "SessionTeardown",
    "PortalClientError",
    "ConfigurationError",
    "AuthenticationRequiredError",
    "RefreshFailure",
    "UnauthorizedAfterRefresh",
    "TransportError",
]
