"""Command-line interface for calling the customer portal backend."""
from __future__ import annotations

import asyncio
import json
import os
from collections.abc import Awaitable, Callable, Mapping
from pathlib import Path
from typing import Any, TypeVar

import typer

try:  # pragma: no cover - exercised in runtime environments
    from rich import box
    from rich.console import Console
    from rich.table import Table
except ImportError as exc:  # pragma: no cover - optional dependency guard
    raise RuntimeError(
        "The CLI requires Rich for table rendering. Install the CLI extras via "
        "'pip install portal-client[cli]' to enable this command."
    ) from exc

from .auth.token_file import TokenFileCredentialSource
from .client import PortalClient
from .config import BASE_URL_ENV, TIMEOUT_ENV, VERIFY_SSL_ENV
from .exceptions import (
    ConfigurationError,
    PortalClientError,
    RefreshFailure,
    UnauthorizedAfterRefresh,
)

T = TypeVar("T")

app = typer.Typer(help="Customer portal API CLI.", no_args_is_help=True)

stats_app = typer.Typer(help="Project statistics.")
app.add_typer(stats_app, name="stats")


def _build_client(
    base_url: str | None,
    token: str | None,
    token_file: Path | None,
    verify_ssl: bool,
    cert_path: Path | None,
    timeout: float,
) -> PortalClient:
    if not token and not token_file:
        raise typer.BadParameter("--token or --token-file is required.")
    if token_file and not token_file.expanduser().exists():
        raise typer.BadParameter("Token file not found for --token-file option.")

    verify_target: bool | str
    if cert_path:
        expanded_cert = cert_path.expanduser()
        if not expanded_cert.exists():
            raise typer.BadParameter("Certificate file not found for --cert option.")
        if not verify_ssl:
            raise typer.BadParameter("Cannot combine --cert with --no-verify.")
        verify_target = str(expanded_cert)
    else:
        verify_target = verify_ssl

    return PortalClient(
        base_url=base_url,
        credential_source=TokenFileCredentialSource(token_file, token=token),
        verify_ssl=verify_target,
        timeout=timeout,
    )


def _run(client: PortalClient, call: Callable[[PortalClient], Awaitable[T]]) -> T:
    async def runner() -> T:
        async with client:
            return await call(client)

    try:
        return asyncio.run(runner())
    except ConfigurationError as exc:
        typer.secho(f"Configuration error: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=2) from exc
    except (RefreshFailure, UnauthorizedAfterRefresh) as exc:
        typer.secho(
            f"Session expired: {exc}. Sign in again and retry.", err=True, fg=typer.colors.RED
        )
        raise typer.Exit(code=1) from exc
    except PortalClientError as exc:
        _handle_request_error(exc)
        raise  # pragma: no cover - _handle_request_error always exits


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2))


console = Console(force_terminal=False, color_system=None)


def _render_mapping(title: str, payload: Mapping[str, Any]) -> None:
    table = Table(title=title, box=box.SIMPLE, show_lines=False, header_style="bold cyan")
    table.add_column("Field")
    table.add_column("Value")
    for key, value in payload.items():
        if isinstance(value, (Mapping, list)):
            rendered = json.dumps(value)
        else:
            rendered = "" if value is None else str(value)
        table.add_row(str(key), rendered)
    console.print(table)


def _present_output(payload: Any, *, title: str, json_output: bool) -> None:
    if json_output or not isinstance(payload, Mapping) or not payload:
        _echo_json(payload)
        return
    _render_mapping(title, payload)


def _handle_request_error(exc: PortalClientError) -> None:
    message = f"Request failed (status {exc.status_code}): {exc}"
    if exc.details:
        message += f"\nDetails: {exc.details}"
    typer.secho(message, err=True, fg=typer.colors.RED)
    raise typer.Exit(code=1)


def _parse_body(data: str | None) -> Any | None:
    if data is None:
        return None
    source = data
    if data.startswith("@"):
        path = Path(data[1:]).expanduser()
        try:
            source = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise typer.BadParameter(f"Unable to read request body from {path}: {exc}") from exc
    try:
        return json.loads(source)
    except ValueError as exc:
        raise typer.BadParameter(f"--data must be valid JSON: {exc}") from exc


def parse_params(values: list[str]) -> dict[str, str]:
    """Turn repeated ``key=value`` options into a query mapping."""
    params: dict[str, str] = {}
    for item in values:
        if "=" not in item:
            raise typer.BadParameter(f"Query parameter '{item}' must use key=value form.")
        key, value = item.split("=", 1)
        params[key.strip()] = value.strip()
    return params


def _shared_options() -> dict[str, Any]:  # pragma: no cover - helper indirection
    env_verify = os.getenv(VERIFY_SSL_ENV)
    if env_verify is None:
        default_verify = True
    else:
        default_verify = env_verify.strip().lower() not in {"0", "false", "no", "off"}

    return {
        "base_url": typer.Option(
            None, "--base-url", envvar=BASE_URL_ENV, help="Portal backend base URL."
        ),
        "token": typer.Option(
            None,
            "--token",
            envvar="PORTAL_TOKEN",
            help="Bearer token for the signed-in user.",
        ),
        "token_file": typer.Option(
            None,
            "--token-file",
            envvar="PORTAL_TOKEN_FILE",
            help="File holding the bearer token; re-read when the token expires.",
        ),
        "verify_ssl": typer.Option(
            default_verify,
            "--verify/--no-verify",
            envvar=VERIFY_SSL_ENV,
            help="Enable or disable TLS certificate verification.",
            show_default=True,
        ),
        "cert_path": typer.Option(
            None,
            "--cert",
            envvar="PORTAL_CA_CERT",
            help="Path to a custom CA bundle for TLS verification.",
        ),
        "timeout": typer.Option(
            30.0, envvar=TIMEOUT_ENV, help="Request timeout (seconds).", show_default=True
        ),
        "output_json": typer.Option(
            False,
            "--json",
            "-j",
            help="Return raw JSON instead of rendering a table.",
        ),
    }


_SHARED_OPTIONS = _shared_options()


@app.command("request")
def request_command(
    method: str = typer.Argument(..., help="HTTP method, e.g. GET or PATCH."),
    path: str = typer.Argument(..., help="Path relative to the base URL."),
    data: str | None = typer.Option(
        None, "--data", "-d", help="JSON body, or @file to read it from a file."
    ),
    param: list[str] = typer.Option([], "--param", help="Query parameter in key=value form."),
    base_url: str | None = _SHARED_OPTIONS["base_url"],
    token: str | None = _SHARED_OPTIONS["token"],
    token_file: Path | None = _SHARED_OPTIONS["token_file"],
    verify_ssl: bool = _SHARED_OPTIONS["verify_ssl"],
    cert_path: Path | None = _SHARED_OPTIONS["cert_path"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    output_json: bool = _SHARED_OPTIONS["output_json"],
) -> None:
    """Send an authenticated request and print the response body."""

    payload = _parse_body(data)
    params = parse_params(param)
    client = _build_client(base_url, token, token_file, verify_ssl, cert_path, timeout)
    result = _run(
        client,
        lambda c: c.request(method.upper(), path, params=params or None, json_payload=payload),
    )
    _present_output(result, title=f"{method.upper()} {path}", json_output=output_json)


@app.command("get")
def get_command(
    path: str = typer.Argument(..., help="Path relative to the base URL."),
    param: list[str] = typer.Option([], "--param", help="Query parameter in key=value form."),
    base_url: str | None = _SHARED_OPTIONS["base_url"],
    token: str | None = _SHARED_OPTIONS["token"],
    token_file: Path | None = _SHARED_OPTIONS["token_file"],
    verify_ssl: bool = _SHARED_OPTIONS["verify_ssl"],
    cert_path: Path | None = _SHARED_OPTIONS["cert_path"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    output_json: bool = _SHARED_OPTIONS["output_json"],
) -> None:
    """Shortcut for ``request GET PATH``."""

    params = parse_params(param)
    client = _build_client(base_url, token, token_file, verify_ssl, cert_path, timeout)
    result = _run(client, lambda c: c.request("GET", path, params=params or None))
    _present_output(result, title=f"GET {path}", json_output=output_json)


@stats_app.command("cases")
def stats_cases(
    project_id: str = typer.Argument(..., help="Project identifier."),
    base_url: str | None = _SHARED_OPTIONS["base_url"],
    token: str | None = _SHARED_OPTIONS["token"],
    token_file: Path | None = _SHARED_OPTIONS["token_file"],
    verify_ssl: bool = _SHARED_OPTIONS["verify_ssl"],
    cert_path: Path | None = _SHARED_OPTIONS["cert_path"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    output_json: bool = _SHARED_OPTIONS["output_json"],
) -> None:
    """Show case statistics for a project."""

    client = _build_client(base_url, token, token_file, verify_ssl, cert_path, timeout)
    result = _run(client, lambda c: c.projects.case_stats(project_id))
    _present_output(result, title=f"Case stats: {project_id}", json_output=output_json)


@stats_app.command("time-cards")
def stats_time_cards(
    project_id: str = typer.Argument(..., help="Project identifier."),
    start_date: str = typer.Option(..., "--start", help="First day (YYYY-MM-DD)."),
    end_date: str = typer.Option(..., "--end", help="Last day (YYYY-MM-DD)."),
    base_url: str | None = _SHARED_OPTIONS["base_url"],
    token: str | None = _SHARED_OPTIONS["token"],
    token_file: Path | None = _SHARED_OPTIONS["token_file"],
    verify_ssl: bool = _SHARED_OPTIONS["verify_ssl"],
    cert_path: Path | None = _SHARED_OPTIONS["cert_path"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    output_json: bool = _SHARED_OPTIONS["output_json"],
) -> None:
    """Show time tracking totals for a project."""

    client = _build_client(base_url, token, token_file, verify_ssl, cert_path, timeout)
    result = _run(
        client,
        lambda c: c.projects.time_card_stats(project_id, start_date=start_date, end_date=end_date),
    )
    _present_output(result, title=f"Time cards: {project_id}", json_output=output_json)


def main() -> None:  # pragma: no cover - console entry point
    app()
