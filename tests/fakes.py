"""Test doubles shared by the async executor tests."""
from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from portal_client.auth.base import CredentialSource
from portal_client.http import HttpResponse, Transport


class FakeCredentialSource(CredentialSource):
    """Count every call; refreshed tokens are served in order."""

    def __init__(
        self,
        token: str = "tok-1",
        *,
        refreshed: list[str] | None = None,
        refresh_error: BaseException | None = None,
        signed_in: bool = True,
        refresh_gate: asyncio.Event | None = None,
        sign_out_error: BaseException | None = None,
    ) -> None:
        self.token = token
        self.refreshed = list(refreshed or ["tok-2"])
        self.refresh_error = refresh_error
        self.signed_in = signed_in
        self.refresh_gate = refresh_gate
        self.sign_out_error = sign_out_error
        self.get_token_calls = 0
        self.refresh_calls = 0
        self.sign_out_calls = 0

    def is_signed_in(self) -> bool:
        return self.signed_in

    async def get_token(self) -> str:
        self.get_token_calls += 1
        await asyncio.sleep(0)
        return self.token

    async def refresh_token(self) -> str:
        self.refresh_calls += 1
        if self.refresh_gate is not None:
            await self.refresh_gate.wait()
        else:
            await asyncio.sleep(0)
        if self.refresh_error is not None:
            raise self.refresh_error
        self.token = self.refreshed.pop(0)
        return self.token

    async def sign_out(self) -> None:
        self.sign_out_calls += 1
        await asyncio.sleep(0)
        if self.sign_out_error is not None:
            raise self.sign_out_error


@dataclass
class SentRequest:
    method: str
    url: str
    headers: dict[str, str]
    params: Mapping[str, str] | None = None
    json_payload: Any | None = None

    @property
    def token(self) -> str:
        return self.headers.get("Authorization", "").removeprefix("Bearer ")


@dataclass
class ScriptedTransport(Transport):
    """Answer each request with whatever ``responder`` returns for it."""

    responder: Callable[[SentRequest], int | HttpResponse]
    calls: list[SentRequest] = field(default_factory=list)
    closed: bool = False

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
        sent = SentRequest(method, url, dict(headers), params, json_payload)
        self.calls.append(sent)
        await asyncio.sleep(0)
        result = self.responder(sent)
        if isinstance(result, HttpResponse):
            return result
        return HttpResponse(status_code=result)

    async def aclose(self) -> None:
        self.closed = True


def accept_tokens(*valid: str, on_reject: Callable[[], None] | None = None):
    """Responder returning 200 for ``valid`` tokens and 401 for anything else."""

    accepted = set(valid)

    def responder(sent: SentRequest) -> int | HttpResponse:
        if sent.token in accepted:
            return HttpResponse(status_code=200, data={"ok": True}, text='{"ok": true}')
        if on_reject is not None:
            on_reject()
        return 401

    responder.accepted = accepted  # type: ignore[attr-defined]
    return responder
