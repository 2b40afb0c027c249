"""Token file credential source used by the CLI."""

from __future__ import annotations

import logging
from pathlib import Path

from ..exceptions import AuthenticationRequiredError, PortalClientError, RefreshFailure
from .base import CredentialSource

logger = logging.getLogger(__name__)


class TokenFileCredentialSource(CredentialSource):
    """Read a bearer token from a file; refreshing re-reads the file.

    An external login helper is expected to rewrite the file when it rotates
    the token. A token given directly is used until the first refresh.
    """

    def __init__(self, path: Path | None = None, *, token: str | None = None) -> None:
        self.path = path.expanduser() if path else None
        self._token = token

    def is_signed_in(self) -> bool:
        return bool(self._token) or (self.path is not None and self.path.exists())

    async def get_token(self) -> str:
        if self._token:
            return self._token
        if self.path is None:
            raise AuthenticationRequiredError("No token or token file supplied")
        self._token = self._read(self.path, AuthenticationRequiredError)
        return self._token

    async def refresh_token(self) -> str:
        if self.path is None:
            raise RefreshFailure("No token file to refresh from")
        token = self._read(self.path, RefreshFailure)
        if token == self._token:
            raise RefreshFailure("Token file still holds the rejected token")
        self._token = token
        return token

    async def sign_out(self) -> None:
        logger.warning("Session ended; sign in again to refresh %s", self.path or "the token")
        self._token = None

    @staticmethod
    def _read(path: Path, error: type[PortalClientError]) -> str:
        try:
            token = path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise error(f"Unable to read token file {path}: {exc}") from exc
        if not token:
            raise error(f"Token file {path} is empty")
        return token
