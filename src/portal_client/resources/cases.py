"""Case endpoints."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .base import ResourceBase, segment

ATTACHMENTS_PAGE_SIZE = 10


class CasesResource(ResourceBase):
    async def update(self, case_id: str, changes: Mapping[str, Any]) -> dict[str, Any]:
        return await self._patch(f"/cases/{segment(case_id)}", changes)

    async def attachments(
        self, case_id: str, *, offset: int = 0, limit: int = ATTACHMENTS_PAGE_SIZE
    ) -> dict[str, Any]:
        params = {"limit": str(limit), "offset": str(offset)}
        return await self._get(f"/cases/{segment(case_id)}/attachments", params=params)

    async def search_call_requests(
        self, case_id: str, filters: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        return await self._post(f"/cases/{segment(case_id)}/call-requests/search", filters or {})
