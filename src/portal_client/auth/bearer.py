"""Bearer token header composition."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from .base import HeaderComposer


@dataclass(slots=True)
class BearerHeaders(HeaderComposer):
    """Apply an issued bearer token."""

    auth_header: str = "Authorization"
    scheme: str = "Bearer"
    extra_headers: Mapping[str, str] | None = None

    def compose(self, token: str) -> dict[str, str]:
        headers = dict(self.extra_headers or {})
        value = f"{self.scheme} {token}" if self.scheme else token
        headers[self.auth_header] = value
        return headers
