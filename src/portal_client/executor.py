"""Authenticated request execution with one refresh-and-retry cycle."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .auth.base import CredentialSource, HeaderComposer
from .auth.bearer import BearerHeaders
from .config import ClientConfig
from .exceptions import AuthenticationRequiredError, UnauthorizedAfterRefresh
from .http import HttpResponse, Transport
from .refresh import RefreshCoordinator
from .teardown import SessionTeardown

logger = logging.getLogger(__name__)

UNAUTHORIZED = 401


@dataclass(slots=True)
class RequestOptions:
    """Caller-controlled parts of a request; the body is never interpreted."""

    method: str = "GET"
    headers: Mapping[str, str] | None = None
    params: Mapping[str, str] | None = None
    json_payload: Any | None = None
    data_payload: Any | None = None
    expect_json: bool = True


@dataclass(slots=True)
class RequestAttempt:
    target: str
    url: str
    options: RequestOptions
    attempt: int = 0


class AuthenticatedExecutor:
    """Attach a bearer token to each request and recover from one expiry.

    A 401 on the first attempt joins the shared refresh and replays the
    request once with the refreshed token. A 401 on the replay is terminal:
    the session is torn down and `UnauthorizedAfterRefresh` is raised. Any
    other status is returned untouched.
    """

    def __init__(
        self,
        *,
        config: ClientConfig,
        credential_source: CredentialSource,
        transport: Transport,
        header_composer: HeaderComposer | None = None,
        teardown: SessionTeardown | None = None,
        coordinator: RefreshCoordinator | None = None,
    ) -> None:
        self.config = config
        self._credentials = credential_source
        self._transport = transport
        self._composer = header_composer or BearerHeaders()
        self.teardown = teardown or SessionTeardown(credential_source.sign_out)
        self.coordinator = coordinator or RefreshCoordinator(
            credential_source.refresh_token, teardown=self.teardown
        )

    async def execute(
        self,
        target: str,
        options: RequestOptions | None = None,
        *,
        attempt: int = 0,
    ) -> HttpResponse:
        options = options or RequestOptions()
        url = self.config.resolve_url(target)
        if not self._credentials.is_signed_in():
            raise AuthenticationRequiredError("User must be signed in to call the portal API")
        request = RequestAttempt(target=target, url=url, options=options, attempt=attempt)

        token = await self._credentials.get_token()
        if not token or not token.strip():
            raise AuthenticationRequiredError("No bearer token available for the current session")
        response = await self._send(request, token)
        if response.status_code != UNAUTHORIZED:
            return response
        if request.attempt > 0:
            raise self._terminal_unauthorized(request, response, epoch=None)

        logger.warning(
            "Portal request %s %s unauthorized; waiting for credential refresh",
            options.method.upper(),
            url,
        )
        operation = self.coordinator.join()
        # RefreshFailure propagates as-is; the coordinator already tore the session down.
        token = await asyncio.shield(operation.future)

        request.attempt = 1
        response = await self._send(request, token)
        if response.status_code == UNAUTHORIZED:
            raise self._terminal_unauthorized(request, response, epoch=operation.epoch)
        return response

    async def _send(self, request: RequestAttempt, token: str) -> HttpResponse:
        options = request.options
        headers = merge_headers(
            self.config.resolved_headers(),
            options.headers,
            self._composer.compose(token),
            auth_header=self._composer.auth_header,
        )
        logger.info(
            "Portal request %s %s (attempt=%s)",
            options.method.upper(),
            request.url,
            request.attempt,
        )
        params = self.config.resolved_query()
        if options.params:
            params.update(options.params)
        return await self._transport.send(
            options.method.upper(),
            request.url,
            headers=headers,
            params=params or None,
            json_payload=options.json_payload,
            data_payload=options.data_payload,
            expect_json=options.expect_json,
        )

    def _terminal_unauthorized(
        self, request: RequestAttempt, response: HttpResponse, *, epoch: int | None
    ) -> UnauthorizedAfterRefresh:
        logger.warning(
            "Portal request %s %s still unauthorized after refresh; signing out",
            request.options.method.upper(),
            request.url,
        )
        self.teardown.trigger(epoch=epoch)
        return UnauthorizedAfterRefresh(
            "Unauthorized after token refresh",
            status_code=response.status_code,
            details=response.text or None,
        )


def merge_headers(
    defaults: Mapping[str, str],
    caller: Mapping[str, str] | None,
    composed: Mapping[str, str],
    *,
    auth_header: str,
) -> dict[str, str]:
    """Merge header sets; caller headers win except for the auth header.

    Header names compare case-insensitively, the last writer's spelling is kept.
    """

    auth_key = auth_header.lower()
    merged: dict[str, str] = {}
    _assign(merged, defaults)
    _assign(merged, {k: v for k, v in composed.items() if k.lower() != auth_key})
    if caller:
        _assign(merged, {k: v for k, v in caller.items() if k.lower() != auth_key})
    _assign(merged, {k: v for k, v in composed.items() if k.lower() == auth_key})
    return merged


def _assign(target: dict[str, str], source: Mapping[str, str]) -> None:
    for name, value in source.items():
        for existing in [key for key in target if key.lower() == name.lower()]:
            del target[existing]
        target[name] = value
