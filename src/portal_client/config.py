"""Configuration helpers for the portal client."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from urllib.parse import urljoin, urlparse

from .exceptions import ConfigurationError

BASE_URL_ENV = "PORTAL_BACKEND_BASE_URL"
VERIFY_SSL_ENV = "PORTAL_VERIFY_SSL"
TIMEOUT_ENV = "PORTAL_TIMEOUT"

_FALSEY = {"0", "false", "no", "off"}


@dataclass(slots=True)
class ClientConfig:
    """Typed configuration for `PortalClient`.

    ``base_url`` may be left unset at construction time; it is only required
    once a request is attempted.
    """

    base_url: str | None = None
    verify_ssl: bool | str = True
    timeout: float = 30.0
    default_headers: Mapping[str, str] | None = None
    query_defaults: Mapping[str, str] | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientConfig:
        env = os.environ if environ is None else environ
        verify_raw = env.get(VERIFY_SSL_ENV)
        verify_ssl = True
        if verify_raw is not None and verify_raw.strip().lower() in _FALSEY:
            verify_ssl = False
        timeout_raw = env.get(TIMEOUT_ENV)
        try:
            timeout = float(timeout_raw) if timeout_raw else 30.0
        except ValueError as exc:
            raise ConfigurationError(
                f"{TIMEOUT_ENV} must be a number of seconds, got {timeout_raw!r}"
            ) from exc
        return cls(base_url=env.get(BASE_URL_ENV), verify_ssl=verify_ssl, timeout=timeout)

    def require_base_url(self) -> str:
        base = (self.base_url or "").strip()
        if not base:
            raise ConfigurationError(f"{BASE_URL_ENV} is not configured")
        return base.rstrip("/")

    def resolve_url(self, target: str) -> str:
        """Join ``target`` onto the base URL unless it is already absolute."""

        base = self.require_base_url()
        parsed = urlparse(target)
        if parsed.scheme and parsed.netloc:
            return target
        return urljoin(f"{base}/", target.lstrip("/"))

    def resolved_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if self.default_headers:
            headers.update(self.default_headers)
        return headers

    def resolved_query(self) -> dict[str, str]:
        return dict(self.query_defaults or {})
