"""Project statistics and contacts."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .base import ResourceBase, segment


class ProjectsResource(ResourceBase):
    async def case_stats(self, project_id: str) -> dict[str, Any]:
        return await self._get(f"/projects/{segment(project_id)}/stats/cases")

    async def support_stats(self, project_id: str) -> dict[str, Any]:
        return await self._get(f"/projects/{segment(project_id)}/stats/support")

    async def time_card_stats(
        self, project_id: str, *, start_date: str, end_date: str
    ) -> dict[str, Any]:
        """Time tracking totals between two ISO dates (inclusive)."""

        return await self._get(
            f"/projects/{segment(project_id)}/stats/time-cards",
            params={"startDate": start_date, "endDate": end_date},
        )

    async def add_contact(self, project_id: str, contact: Mapping[str, Any]) -> dict[str, Any]:
        return await self._post(f"/projects/{segment(project_id)}/contacts", contact)

    async def remove_contact(self, project_id: str, email: str) -> Any:
        return await self._delete(f"/projects/{segment(project_id)}/contacts/{segment(email)}")
