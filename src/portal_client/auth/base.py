"""Base abstractions for credential sources and header composers."""
from __future__ import annotations

from abc import ABC, abstractmethod


class CredentialSource(ABC):
    """Supplies bearer tokens and tears the session down when asked."""

    @abstractmethod
    async def get_token(self) -> str:
        """Return the current token, possibly cached."""

    @abstractmethod
    async def refresh_token(self) -> str:
        """Attempt to mint a new token."""

    @abstractmethod
    async def sign_out(self) -> None:
        """Invalidate the session."""

    def is_signed_in(self) -> bool:
        """Report whether a session exists before any request is sent."""
        return True


class HeaderComposer(ABC):
    """Maps a token to the headers the backend requires."""

    auth_header: str = "Authorization"

    @abstractmethod
    def compose(self, token: str) -> dict[str, str]:
        """Return the auth headers for ``token``."""
