"""Conversation endpoints."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .base import ResourceBase, segment


class ConversationsResource(ResourceBase):
    async def create(self, project_id: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        return await self._post(f"/projects/{segment(project_id)}/conversations", payload)

    async def search(
        self, project_id: str, filters: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        return await self._post(f"/projects/{segment(project_id)}/conversations/search", filters or {})

    async def messages(self, conversation_id: str) -> Any:
        return await self._get(f"/conversations/{segment(conversation_id)}/messages")

    async def post_message(
        self, project_id: str, conversation_id: str, message: str
    ) -> dict[str, Any]:
        path = (
            f"/projects/{segment(project_id)}/conversations/"
            f"{segment(conversation_id)}/messages"
        )
        return await self._post(path, {"message": message})
