"""CLI de upnpctl (Typer).

Comandos:
- list: descubre los gateways UPnP disponibles
- add: añade un conjunto de redirecciones a un gateway
- rem: elimina un conjunto de redirecciones de un gateway

Toda la lógica vive en `core.services`; aquí solo se parsean opciones, se
imprime y se decide el exit code.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from adapters import upnp_gateway
from adapters.json_exporter import devices_to_json, export_devices_json
from cli import doctor
from cli.logging_setup import configure_logging
from cli.ui_components import failure_line, plural, print_candidates, print_devices
from core.config import AppSettings
from core.domain.errors import AmbiguousDevice, UpnpctlError
from core.domain.models import MappingResult
from core.interfaces.gateway import GatewayDiscoverer
from core.services.discovery import discover_devices
from core.services.port_mapping_pipeline import (
    PipelineHooks,
    PipelineResult,
    build_add_request,
    build_remove_request,
    run_add,
    run_remove,
)
from core.version import VERSION

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="Discover UPnP gateways and manage their NAT port mappings.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console(soft_wrap=True)
_err_console = Console(stderr=True, soft_wrap=True)


@dataclass
class CliState:
    verbosity: int = 0
    settings: AppSettings = field(default_factory=AppSettings)


def _state(ctx: typer.Context) -> CliState:
    if isinstance(ctx.obj, CliState):
        return ctx.obj
    return CliState()


def build_discoverer(state: CliState) -> GatewayDiscoverer:
    return upnp_gateway.UpnpClientDiscoverer(state.settings, verbosity=state.verbosity)


def _fail(exc: UpnpctlError) -> NoReturn:
    _err_console.print(f"[red]{escape(str(exc))}[/red]", highlight=False)
    if isinstance(exc, AmbiguousDevice):
        print_candidates(_err_console, exc.candidates)
    raise typer.Exit(code=1)


def _hooks(console: Console) -> PipelineHooks:
    def discovering() -> None:
        console.print("Discovering UPnP devices...")

    def applying(verb: str, count: int) -> None:
        console.print(f"{verb} #{count} mapping{plural(count)}...", highlight=False)

    def item_done(verb: str, result: MappingResult) -> None:
        if not result.ok:
            _err_console.print(failure_line(verb, result), highlight=False)

    return PipelineHooks(discovering=discovering, applying=applying, item_done=item_done)


def _finish(result: PipelineResult) -> None:
    _console.print("Done")
    if result.failures:
        # Best-effort: las redirecciones aplicadas se mantienen.
        raise typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Verbose logs (-v), including the UPnP protocol exchange (-vv).",
    ),
) -> None:
    """upnpctl: UPnP IGD port-mapping controller."""

    configure_logging(verbose)
    try:
        settings = AppSettings()
    except ValueError as exc:
        _err_console.print(f"[red]Invalid configuration:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    ctx.obj = CliState(verbosity=verbose, settings=settings)


@app.command(name="list")
def list_devices(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="Print devices as JSON."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the JSON listing to a file."),
) -> None:
    """Discover all available UPnP gateways."""

    state = _state(ctx)
    progress = _err_console if as_json else _console
    progress.print("Discovering UPnP devices...")

    try:
        devices = discover_devices(build_discoverer(state))
    except UpnpctlError as exc:
        _fail(exc)

    if output is not None:
        path = export_devices_json(devices=devices, output_path=output)
        progress.print(f"[green]Saved {len(devices)} device{plural(len(devices))} to:[/green] {path}")
    if as_json:
        sys.stdout.write(devices_to_json(devices))
    else:
        print_devices(_console, devices)


@app.command()
def add(
    ctx: typer.Context,
    mappings: list[str] = typer.Argument(
        ...,
        metavar="MAPPING...",
        help='External port and optional internal port: "external[:internal]", e.g. 3000 or 5000:6000.',
    ),
    device_id: str | None = typer.Option(
        None, "--id", help="Device id. Required when more than one device is found."
    ),
    port_type: str = typer.Option("tcp", "--type", help="Port type: tcp or udp."),
    timeout: str | None = typer.Option(
        None, "--timeout", help="Mapping lease, e.g. 90s or 2h30m (defaults to permanent)."
    ),
    desc: str | None = typer.Option(
        None,
        "--desc",
        help=f"Mapping description; some routers display it (defaults to 'upnpctl v{VERSION}').",
    ),
) -> None:
    """Add a set of port mappings to a device."""

    state = _state(ctx)
    try:
        request = build_add_request(
            mappings,
            protocol=port_type,
            device_id=device_id,
            timeout=timeout,
            description=desc or state.settings.default_description,
        )
        result = run_add(request, build_discoverer(state), _hooks(_console))
    except UpnpctlError as exc:
        _fail(exc)
    _finish(result)


@app.command()
def rem(
    ctx: typer.Context,
    ports: list[str] = typer.Argument(
        ...,
        metavar="EXTERNAL...",
        help="External port identifying the mapping to remove.",
    ),
    device_id: str | None = typer.Option(
        None, "--id", help="Device id. Required when more than one device is found."
    ),
    port_type: str = typer.Option("tcp", "--type", help="Port type: tcp or udp."),
) -> None:
    """Remove a set of port mappings from a device."""

    state = _state(ctx)
    try:
        request = build_remove_request(ports, protocol=port_type, device_id=device_id)
        result = run_remove(request, build_discoverer(state), _hooks(_console))
    except UpnpctlError as exc:
        _fail(exc)
    _finish(result)


@app.command()
def version() -> None:
    """Show the upnpctl version."""

    _console.print(f"upnpctl v{VERSION}", highlight=False)


def run() -> None:
    app()
