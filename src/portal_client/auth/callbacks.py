"""Credential source driven by callbacks registered by the hosting app."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from ..exceptions import AuthenticationRequiredError, RefreshFailure
from .base import CredentialSource

logger = logging.getLogger(__name__)

TokenCallback = Callable[[], Awaitable[str]]
SignOutCallback = Callable[[], Awaitable[None]]


class CallbackCredentialSource(CredentialSource):
    """Keep the latest token in memory and delegate refresh/sign-out to callbacks.

    The auth provider usually registers its refresh hook after the client is
    built, so ``refresh`` may be supplied late through `set_refresh_callback`.
    """

    def __init__(
        self,
        *,
        token: str | None = None,
        fetch: TokenCallback | None = None,
        refresh: TokenCallback | None = None,
        sign_out: SignOutCallback | None = None,
    ) -> None:
        self._token = token
        self._fetch = fetch
        self._refresh = refresh
        self._sign_out = sign_out

    @property
    def token(self) -> str | None:
        return self._token

    def set_token(self, token: str | None) -> None:
        self._token = token

    def set_refresh_callback(self, callback: TokenCallback | None) -> None:
        self._refresh = callback

    def is_signed_in(self) -> bool:
        return bool(self._token) or self._fetch is not None

    async def get_token(self) -> str:
        if self._token:
            return self._token
        if self._fetch is None:
            raise AuthenticationRequiredError("No signed-in session")
        self._token = await self._fetch()
        return self._token

    async def refresh_token(self) -> str:
        if self._refresh is None:
            logger.error("Token refresh callback not registered")
            raise RefreshFailure("Token refresh not available")
        logger.debug("Refreshing bearer token")
        token = await self._refresh()
        if not isinstance(token, str) or not token.strip():
            raise RefreshFailure("Failed to obtain new token")
        self._token = token
        logger.debug("Token refreshed")
        return token

    async def sign_out(self) -> None:
        self._token = None
        if self._sign_out is not None:
            await self._sign_out()
