"""Doctor command for environment diagnostics."""

from __future__ import annotations

from urllib.parse import urlparse

import httpx
import typer
from rich.console import Console

from adapters import upnp_gateway
from adapters.http_client import fetch_description
from cli.ui_components import build_doctor_table
from core.config import AppSettings, get_user_env_file
from core.services.discovery import discover_devices

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console(soft_wrap=True)


def _check_description(location: str, settings: AppSettings) -> tuple[bool, str]:
    try:
        info = fetch_description(location, settings)
    except httpx.HTTPError as exc:
        return False, str(exc) or exc.__class__.__name__
    status = info.pop("status_code")
    if status != 200:
        return False, f"HTTP {status}"
    details = ", ".join(str(info[k]) for k in ("manufacturer", "model_name") if k in info)
    return True, f"HTTP {status}" + (f" - {details}" if details else "")


def _check_internal_client(location: str, settings: AppSettings) -> tuple[bool, str]:
    if settings.internal_client is not None:
        return True, f"{settings.internal_client} (UPNPCTL_INTERNAL_CLIENT)"
    host = urlparse(location).hostname or ""
    try:
        return True, upnp_gateway.detect_internal_client(host)
    except OSError as exc:
        return False, str(exc)


@app.command()
def run(ctx: typer.Context) -> None:
    """Run baseline diagnostics: config, SSDP discovery and gateway reachability."""

    state = ctx.obj
    settings = getattr(state, "settings", None) or AppSettings()
    verbosity = getattr(state, "verbosity", 0)

    table = build_doctor_table()

    # Config
    env_file = get_user_env_file()
    table.add_row("User config", "OK" if env_file.exists() else "OPTIONAL", str(env_file))
    table.add_row("Discovery timeout", "OK", f"{settings.discovery_timeout_seconds:g}s")
    table.add_row("Description", "OK", settings.default_description or "default (version string)")

    # Discovery
    discoverer = upnp_gateway.UpnpClientDiscoverer(settings, verbosity=verbosity)
    devices = discover_devices(discoverer)
    table.add_row(
        "SSDP discovery",
        "OK" if devices else "FAIL",
        f"{len(devices)} gateway(s) found" if devices else "No UPnP devices found",
    )

    # Gateways (best-effort)
    for device in devices:
        ok_http, detail_http = _check_description(device.location, settings)
        table.add_row(f"#{device.identifier} description", "OK" if ok_http else "FAIL", detail_http)
        ok_lan, detail_lan = _check_internal_client(device.location, settings)
        table.add_row(f"#{device.identifier} internal client", "OK" if ok_lan else "FAIL", detail_lan)

    _console.print(table)

    if not devices:
        _console.print(
            "\n[yellow]Note:[/yellow] make sure UPnP is enabled on the router and that "
            "multicast (239.255.255.250:1900) is not blocked by a local firewall."
        )
        raise typer.Exit(code=1)
