"""High-level portal REST client."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import requests

from .auth.base import CredentialSource, HeaderComposer
from .config import ClientConfig
from .executor import AuthenticatedExecutor, RequestOptions
from .http import HttpResponse, RequestsTransport, Transport, ensure_success
from .refresh import RefreshCoordinator
from .resources import CasesResource, ConversationsResource, ProjectsResource
from .teardown import SessionTeardown

logger = logging.getLogger(__name__)


class PortalClient:
    """Wrap portal backend endpoints behind one authenticated executor.

    Each client owns its refresh coordinator and teardown trigger, so two
    clients (for example two signed-in tenants) never share refresh state.
    """

    def __init__(
        self,
        *,
        credential_source: CredentialSource,
        base_url: str | None = None,
        config: ClientConfig | None = None,
        header_composer: HeaderComposer | None = None,
        transport: Transport | None = None,
        session: requests.Session | None = None,
        verify_ssl: bool | str = True,
        timeout: float = 30.0,
        default_headers: Mapping[str, str] | None = None,
        query_defaults: Mapping[str, str] | None = None,
    ) -> None:
        self.config = config or ClientConfig(
            base_url=base_url,
            verify_ssl=verify_ssl,
            timeout=timeout,
            default_headers=default_headers,
            query_defaults=query_defaults,
        )
        self._transport = transport or RequestsTransport(
            session, timeout=self.config.timeout, verify=self.config.verify_ssl
        )
        self._executor = AuthenticatedExecutor(
            config=self.config,
            credential_source=credential_source,
            transport=self._transport,
            header_composer=header_composer,
        )
        self.cases = CasesResource(self)
        self.conversations = ConversationsResource(self)
        self.projects = ProjectsResource(self)

    # Context manager helpers -------------------------------------------------
    async def __aenter__(self) -> PortalClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # Public API --------------------------------------------------------------
    @property
    def coordinator(self) -> RefreshCoordinator:
        return self._executor.coordinator

    @property
    def teardown(self) -> SessionTeardown:
        return self._executor.teardown

    async def execute(
        self,
        target: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
        json_payload: Any | None = None,
        data_payload: Any | None = None,
        expect_json: bool = True,
    ) -> HttpResponse:
        """Send a request and return the raw response, whatever its status."""

        options = RequestOptions(
            method=method,
            headers=headers,
            params=params,
            json_payload=json_payload,
            data_payload=data_payload,
            expect_json=expect_json,
        )
        return await self._executor.execute(target, options)

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        json_payload: Any | None = None,
        data_payload: Any | None = None,
        headers: Mapping[str, str] | None = None,
        expect_json: bool = True,
    ) -> Any:
        """Send a request and return the decoded body, raising on non-2xx."""

        response = await self.execute(
            path,
            method=method,
            headers=headers,
            params=params,
            json_payload=json_payload,
            data_payload=data_payload,
            expect_json=expect_json,
        )
        if not response.ok:
            logger.debug("Portal request %s %s failed with %s", method, path, response.status_code)
        ensure_success(response)
        return response.data

    async def close(self) -> None:
        await self.teardown.wait()
        await self._transport.aclose()
