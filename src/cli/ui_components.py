"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Mantiene el formato de líneas (`#id: nombre (ip)`) en un único sitio.
"""

from __future__ import annotations

from typing import Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from core.domain.models import Device, MappingResult


def device_line(device: Device) -> str:
    return f"  #{escape(device.identifier)}: {escape(device.name)} ({escape(device.address)})"


def candidate_line(device: Device) -> str:
    return f"  --id {escape(device.identifier)} => {escape(device.name)} ({escape(device.address)})"


def print_devices(console: Console, devices: Sequence[Device]) -> None:
    for device in devices:
        console.print(device_line(device), highlight=False)


def print_candidates(console: Console, devices: Sequence[Device]) -> None:
    """Lista los candidatos cuando falta `--id`."""

    for device in devices:
        console.print(candidate_line(device), highlight=False)


def plural(count: int) -> str:
    return "" if count == 1 else "s"


def failure_line(verb: str, result: MappingResult) -> str:
    mapping = result.mapping
    if verb == "Adding":
        target = f"add mapping {mapping.external}:{mapping.internal}"
    else:
        target = f"remove mapping {mapping.external}"
    return f"[red]Failed to {target}[/red] ({escape(result.error or 'unknown error')})"


def build_doctor_table() -> Table:
    table = Table(title="upnpctl doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")
    return table
