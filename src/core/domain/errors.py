"""Errores del dominio.

Por qué una jerarquía propia:
- La CLI captura `UpnpctlError` en un único punto y decide el exit code.
- Los adaptadores traducen excepciones de librerías (upnpclient, requests) a
  estos tipos, de modo que el Core nunca ve detalles de transporte.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from core.domain.models import Device


class UpnpctlError(Exception):
    """Base de todos los errores presentables al usuario."""


class UsageError(UpnpctlError):
    """Combinación de argumentos inválida (además de lo que valida Click)."""


class InvalidPort(UpnpctlError):
    pass


class InvalidProtocol(UpnpctlError):
    pass


class InvalidDuration(UpnpctlError):
    pass


class NoDevicesFound(UpnpctlError):
    def __init__(self) -> None:
        super().__init__("No UPnP devices found")


class DeviceNotFound(UpnpctlError):
    def __init__(self, device_id: str) -> None:
        super().__init__(f"No UPnP devices found matching id: {device_id}")
        self.device_id = device_id


class AmbiguousDevice(UpnpctlError):
    """Hay más de un gateway y no se indicó `--id`.

    Lleva los candidatos para que la CLI pueda listarlos.
    """

    def __init__(self, candidates: Sequence["Device"]) -> None:
        super().__init__(
            "The --id option is required as there is more than one UPnP device"
        )
        self.candidates = list(candidates)


class MappingOperationFailed(UpnpctlError):
    """Fallo de una operación individual (add/delete) en el gateway."""
