"""HTTP utilities for portal backend access."""

from __future__ import annotations

import asyncio
import json
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import requests
import urllib3
from urllib3.exceptions import InsecureRequestWarning

from .exceptions import TransportError, UnexpectedResponseError


@dataclass(slots=True)
class HttpResponse:
    """Typed response wrapper with helper accessors."""

    status_code: int
    data: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)
    text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def error_message(response: HttpResponse) -> str:
    """Build a readable error, preferring the backend's ``message`` field."""

    data = response.data
    if isinstance(data, Mapping) and isinstance(data.get("message"), str):
        return data["message"]
    message = f"Portal API error {response.status_code}"
    if response.text:
        message += f" - {response.text[:200]}"
    return message


def ensure_success(response: HttpResponse) -> None:
    """Raise `TransportError` if the response signals a failure."""

    if response.ok:
        return
    raise TransportError(
        error_message(response), status_code=response.status_code, details=response.text
    )


def parse_json(response: requests.Response) -> Any:
    """Parse JSON with helpful error context."""

    try:
        return response.json()
    except ValueError as exc:
        raise UnexpectedResponseError(
            "Response did not contain valid JSON",
            status_code=response.status_code,
            details=response.text[:200],
        ) from exc


def _decode_body(response: requests.Response, expect_json: bool) -> Any:
    if not response.content:
        return None
    if not expect_json:
        return response.text
    if response.ok:
        return parse_json(response)
    # Error bodies are frequently plain text; keep them readable instead of failing.
    try:
        return json.loads(response.text)
    except ValueError:
        return None


class Transport(ABC):
    """Sends one HTTP request and returns the response without judging its status."""

    @abstractmethod
    async def send(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        params: Mapping[str, str] | None = None,
        json_payload: Any | None = None,
        data_payload: Any | None = None,
        expect_json: bool = True,
    ) -> HttpResponse:
        """Perform the request."""

    async def aclose(self) -> None:
        """Release any pooled connections."""


class RequestsTransport(Transport):
    """`Transport` backed by a `requests.Session` on a worker thread."""

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        timeout: float | tuple[float, float] | None = 30.0,
        verify: bool | str = True,
    ) -> None:
        self._session = session or requests.Session()
        self._timeout = timeout
        self._verify = verify
        if isinstance(verify, bool) and not verify:
            urllib3.disable_warnings(InsecureRequestWarning)

    async def send(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        params: Mapping[str, str] | None = None,
        json_payload: Any | None = None,
        data_payload: Any | None = None,
        expect_json: bool = True,
    ) -> HttpResponse:
        return await asyncio.to_thread(
            self._send_blocking,
            method,
            url,
            headers=dict(headers),
            params=params,
            json_payload=json_payload,
            data_payload=data_payload,
            expect_json=expect_json,
        )

    def _send_blocking(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        params: Mapping[str, str] | None,
        json_payload: Any | None,
        data_payload: Any | None,
        expect_json: bool,
    ) -> HttpResponse:
        try:
            response = self._session.request(
                method=method,
                url=url,
                params=params,
                headers=headers,
                json=json_payload,
                data=data_payload,
                timeout=self._timeout,
                verify=self._verify,
            )
        except requests.RequestException as exc:
            reason = str(exc).strip() or exc.__class__.__name__
            raise TransportError(
                f"Failed to communicate with portal API: {reason}", details=reason
            ) from exc
        return HttpResponse(
            status_code=response.status_code,
            data=_decode_body(response, expect_json),
            headers=dict(response.headers),
            text=response.text,
        )

    async def aclose(self) -> None:
        self._session.close()
