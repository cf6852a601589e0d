"""cas-client CLI: command-line interface for the Cloud App Security API.

Commands:
    alerts get      Fetch a single alert by id
    alerts list     List alerts with sorting and paging
    allowlist       Show the permitted base paths and methods
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable
from typing import Any

import click
import yaml
from pydantic import ValidationError

from cas_client import __version__
from cas_client.config import CasClientConfig, load_config
from cas_client.errors import CasClientError
from cas_client.models import Credential, SortDirection, SortField
from cas_client.sdk.client import CloudAppSecurity
from cas_client.transport.allowlist import ALLOW_LIST

_SEVERITY_COLORS = {0: "green", 1: "yellow", 2: "red"}


def _resolve_cfg(path: str | None) -> CasClientConfig:
    """Load config from --config or the discovered cas-client.yaml; exit 1 on errors."""
    try:
        return load_config(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        click.echo(f"Error loading config: {e}", err=True)
        sys.exit(1)


def _client(
    ctx: click.Context, tenant: str | None, token: str | None,
) -> CloudAppSecurity:
    cfg = _resolve_cfg(ctx.obj.get("config_path"))
    tenant = tenant or cfg.tenant
    token = token or cfg.token
    credential = None
    if tenant and token:
        credential = Credential(tenant=tenant, token=token)
    try:
        return CloudAppSecurity(credential=credential, config=cfg)
    except (CasClientError, ValidationError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _credential_options(func: Callable[..., Any]) -> Callable[..., Any]:
    func = click.option(
        "--token", default=None, help="64-character API token",
    )(func)
    func = click.option(
        "--tenant", default=None,
        help="Tenant hostname (e.g. contoso.us.portal.cloudappsecurity.com)",
    )(func)
    return func


def _echo_alert(alert: dict[str, Any]) -> None:
    severity = alert.get("severityValue")
    color = _SEVERITY_COLORS.get(severity, "white")
    click.echo(
        f"  {alert.get('_id', '?'):<26}"
        + click.style(f"[sev {severity if severity is not None else '-'}]", fg=color)
        + f"  {alert.get('title', '')}"
    )


# --- Root group ---


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", default=None, help="Path to cas-client.yaml")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """cas-client: query the Cloud App Security REST API."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# --- alerts commands ---


@cli.group()
def alerts() -> None:
    """Query security alerts."""


@alerts.command("get")
@click.argument("identity")
@_credential_options
@click.option("--json-output", is_flag=True, help="Output as JSON")
@click.pass_context
def alerts_get(
    ctx: click.Context,
    identity: str,
    tenant: str | None,
    token: str | None,
    json_output: bool,
) -> None:
    """Fetch a single alert by its 24-character id."""
    cas = _client(ctx, tenant, token)
    try:
        alert = cas.fetch_alert(identity)
    except CasClientError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if json_output:
        click.echo(json.dumps(alert, indent=2, sort_keys=True))
        return

    _echo_alert(alert)
    for key in ("timestamp", "statusValue", "description"):
        if key in alert:
            click.echo(f"    {key}: {alert[key]}")


@alerts.command("list")
@_credential_options
@click.option("--filters", default=None, help="Server-side filters as a JSON object")
@click.option(
    "--sort-by", type=click.Choice([f.value for f in SortField]), default=None,
    help="Sort field (requires --sort-direction)",
)
@click.option(
    "--sort-direction", type=click.Choice([d.value for d in SortDirection]),
    default=None, help="Sort direction (requires --sort-by)",
)
@click.option("--size", default=100, show_default=True, help="Page size (1-100)")
@click.option("--skip", default=0, show_default=True, help="Records to skip")
@click.option("--json-output", is_flag=True, help="Output as JSON")
@click.pass_context
def alerts_list(
    ctx: click.Context,
    tenant: str | None,
    token: str | None,
    filters: str | None,
    sort_by: str | None,
    sort_direction: str | None,
    size: int,
    skip: int,
    json_output: bool,
) -> None:
    """List alerts with optional sorting and paging."""
    parsed_filters: dict[str, Any] | None = None
    if filters is not None:
        try:
            parsed_filters = json.loads(filters)
        except json.JSONDecodeError as e:
            click.echo(f"Error: invalid JSON in --filters: {e}", err=True)
            sys.exit(1)

    cas = _client(ctx, tenant, token)
    try:
        records = cas.list_alerts(
            filters=parsed_filters,
            sort_by=sort_by,
            sort_direction=sort_direction,
            size=size,
            skip=skip,
        )
    except CasClientError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if json_output:
        click.echo(json.dumps(records, indent=2, sort_keys=True))
        return

    if not records:
        click.echo("No alerts found.")
        return
    for alert in records:
        _echo_alert(alert)
    click.echo(f"\n{len(records)} alert(s).")


# --- allowlist command ---


@cli.command("allowlist")
@click.option("--json-output", is_flag=True, help="Output as JSON")
def allowlist(json_output: bool) -> None:
    """Show the permitted base paths and HTTP methods."""
    data = {
        path: sorted(m.value for m in methods)
        for path, methods in sorted(ALLOW_LIST.items())
    }
    if json_output:
        click.echo(json.dumps(data, indent=2))
        return
    for path, methods in data.items():
        click.echo(f"  {path:<28} {', '.join(methods)}")
