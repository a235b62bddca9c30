"""Adaptación de los handles del colaborador a `Device`.

El identificador es un prefijo del SHA-1 de `udn + host[:port]`: estable para
un mismo dispositivo y lo bastante corto para teclearlo en `--id`.
"""

from __future__ import annotations

import hashlib
import logging
from urllib.parse import urlparse

from core.domain.models import Device
from core.interfaces.gateway import GatewayDiscoverer, GatewayHandle

logger = logging.getLogger(__name__)

DEVICE_ID_LENGTH = 5


def derive_device_id(unique_id: str, host: str) -> str:
    digest = hashlib.sha1()  # nosec - identificador, no seguridad
    digest.update(unique_id.encode("utf-8"))
    digest.update(host.encode("utf-8"))
    return digest.hexdigest()[:DEVICE_ID_LENGTH]


def to_device(handle: GatewayHandle) -> Device:
    url = urlparse(handle.location)
    return Device(
        identifier=derive_device_id(handle.unique_id, url.netloc),
        name=handle.friendly_name,
        address=url.hostname or "",
        location=handle.location,
        handle=handle,
    )


def discover_devices(discoverer: GatewayDiscoverer) -> list[Device]:
    """Ejecuta un barrido y devuelve los gateways en orden de respuesta.

    Sin respuestas devuelve lista vacía; decidir si eso es un error es cosa
    del comando que llama.
    """

    devices = [to_device(handle) for handle in discoverer.discover()]
    for device in devices:
        logger.debug("Device #%s %s at %s", device.identifier, device.name, device.location)
    return devices
