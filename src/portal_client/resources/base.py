"""Common helpers for resource wrappers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

if TYPE_CHECKING:  # pragma: no cover - import-time guard
    from ..client import PortalClient


def segment(value: str | int) -> str:
    """Percent-encode one path segment."""

    return quote(str(value), safe="")


class ResourceBase:
    """Provide shared helpers for resource modules."""

    def __init__(self, client: PortalClient) -> None:
        self._client = client

    async def _get(self, path: str, *, params: Mapping[str, str] | None = None) -> Any:
        return await self._client.request("GET", path, params=params)

    async def _post(self, path: str, payload: Mapping[str, Any]) -> Any:
        return await self._client.request("POST", path, json_payload=payload)

    async def _patch(self, path: str, payload: Mapping[str, Any]) -> Any:
        return await self._client.request("PATCH", path, json_payload=payload)

    async def _delete(self, path: str) -> Any:
        return await self._client.request("DELETE", path)
