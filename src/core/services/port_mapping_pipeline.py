"""Orquestación de los comandos `add` y `rem`.

La CLI delega aquí la validación completa de la entrada, la resolución del
dispositivo y el bucle de operaciones. Los efectos visibles (mensajes de
progreso, errores por ítem) salen por `PipelineHooks`, así el flujo es
reutilizable y testeable sin consola.

Política por ítem: un fallo en una redirección se reporta y el bucle sigue
con las restantes; no se hace rollback de las que ya se aplicaron.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Sequence

from core.domain.duration import lease_seconds as parse_lease_seconds
from core.domain.errors import (
    AmbiguousDevice,
    DeviceNotFound,
    MappingOperationFailed,
    NoDevicesFound,
    UsageError,
)
from core.domain.models import Device, MappingResult, PortMapping, TransportProtocol
from core.interfaces.gateway import GatewayDiscoverer
from core.services.discovery import discover_devices
from core.version import default_description

logger = logging.getLogger(__name__)


@dataclass
class MappingRequest:
    """Entrada ya validada de un `add`/`rem`."""

    mappings: Sequence[PortMapping]
    protocol: TransportProtocol = TransportProtocol.TCP
    device_id: str | None = None
    description: str = field(default_factory=default_description)
    lease_seconds: int = 0


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers (progress, per-item results)."""

    discovering: Callable[[], None] | None = None
    applying: Callable[[str, int], None] | None = None
    item_done: Callable[[str, MappingResult], None] | None = None


@dataclass
class PipelineResult:
    """Output of a pipeline invocation."""

    device: Device
    results: list[MappingResult] = field(default_factory=list)

    @property
    def failures(self) -> list[MappingResult]:
        return [r for r in self.results if not r.ok]


def _parse_all(tokens: Iterable[str], parser: Callable[[str], PortMapping]) -> list[PortMapping]:
    mappings = [parser(token) for token in tokens]
    if not mappings:
        raise UsageError("At least one mapping is required")
    return mappings


def build_add_request(
    tokens: Sequence[str],
    *,
    protocol: str = "tcp",
    device_id: str | None = None,
    timeout: str | None = None,
    description: str | None = None,
) -> MappingRequest:
    """Valida todo lo que viene de la CLI antes de tocar la red."""

    proto = TransportProtocol.parse(protocol)
    lease = parse_lease_seconds(timeout)
    mappings = _parse_all(tokens, PortMapping.parse)
    return MappingRequest(
        mappings=mappings,
        protocol=proto,
        device_id=device_id or None,
        description=description or default_description(),
        lease_seconds=lease,
    )


def build_remove_request(
    tokens: Sequence[str],
    *,
    protocol: str = "tcp",
    device_id: str | None = None,
) -> MappingRequest:
    proto = TransportProtocol.parse(protocol)
    mappings = _parse_all(tokens, PortMapping.parse_removal)
    return MappingRequest(mappings=mappings, protocol=proto, device_id=device_id or None)


def resolve_device(devices: Sequence[Device], device_id: str | None) -> Device:
    """Elige el gateway destino.

    Reglas:
    - Con `device_id`: el dispositivo cuyo identificador coincide.
    - Sin él: el único descubierto; si hay varios, `AmbiguousDevice`.
    - Ninguno descubierto: `NoDevicesFound`.
    """

    if not devices:
        raise NoDevicesFound()

    if device_id:
        for device in devices:
            if device.identifier == device_id:
                return device
        raise DeviceNotFound(device_id)

    if len(devices) == 1:
        return devices[0]
    raise AmbiguousDevice(devices)


def _discover_target(
    request: MappingRequest,
    discoverer: GatewayDiscoverer,
    hooks: PipelineHooks,
) -> Device:
    if hooks.discovering:
        hooks.discovering()
    device = resolve_device(discover_devices(discoverer), request.device_id)
    logger.info("Using device #%s %s (%s)", device.identifier, device.name, device.address)
    return device


def _apply(
    verb: str,
    request: MappingRequest,
    device: Device,
    operation: Callable[[PortMapping], None],
    hooks: PipelineHooks,
) -> PipelineResult:
    if hooks.applying:
        hooks.applying(verb, len(request.mappings))

    result = PipelineResult(device=device)
    for mapping in request.mappings:
        try:
            operation(mapping)
            item = MappingResult(mapping=mapping)
        except MappingOperationFailed as exc:
            logger.info("%s %s failed: %s", verb, mapping.label(), exc)
            item = MappingResult(mapping=mapping, ok=False, error=str(exc))
        result.results.append(item)
        if hooks.item_done:
            hooks.item_done(verb, item)
    return result


def run_add(
    request: MappingRequest,
    discoverer: GatewayDiscoverer,
    hooks: PipelineHooks | None = None,
) -> PipelineResult:
    hooks = hooks or PipelineHooks()
    device = _discover_target(request, discoverer, hooks)
    gateway = device.handle

    def add(mapping: PortMapping) -> None:
        gateway.add_port_mapping(
            request.protocol,
            mapping.external,
            mapping.internal,
            request.description,
            request.lease_seconds,
        )

    return _apply("Adding", request, device, add, hooks)


def run_remove(
    request: MappingRequest,
    discoverer: GatewayDiscoverer,
    hooks: PipelineHooks | None = None,
) -> PipelineResult:
    hooks = hooks or PipelineHooks()
    device = _discover_target(request, discoverer, hooks)
    gateway = device.handle

    def remove(mapping: PortMapping) -> None:
        gateway.delete_port_mapping(request.protocol, mapping.external)

    return _apply("Removing", request, device, remove, hooks)
