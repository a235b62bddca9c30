"""Adaptador de `upnpclient` (colaborador UPnP).

Por qué un adaptador:
- upnpclient expone dispositivos/servicios genéricos; aquí elegimos el
  servicio WAN*Connection del IGD y llamamos sus acciones SOAP.
- Traduce excepciones de upnpclient/requests a `MappingOperationFailed`
  para que el dispatcher aplique su política por ítem.
"""

from __future__ import annotations

import logging
import socket
from ipaddress import IPv4Address
from typing import Any
from urllib.parse import urlparse

import requests
import upnpclient
from lxml.etree import XMLSyntaxError
from upnpclient.soap import SOAPError, SOAPProtocolError

from core.config import AppSettings
from core.domain.errors import MappingOperationFailed
from core.domain.models import TransportProtocol

logger = logging.getLogger(__name__)

# Orden de preferencia: IP antes que PPP, versión 2 antes que 1.
WAN_SERVICE_TYPES: tuple[str, ...] = (
    "urn:schemas-upnp-org:service:WANIPConnection:2",
    "urn:schemas-upnp-org:service:WANIPConnection:1",
    "urn:schemas-upnp-org:service:WANPPPConnection:1",
)

# Loggers internos de upnpclient (SSDP + descripción/acciones).
COLLABORATOR_LOGGERS: tuple[str, ...] = ("ssdp", "upnpclient", "Device", "Service", "Action")

_LIBRARY_ERRORS = (
    upnpclient.UPNPError,
    upnpclient.ValidationError,
    SOAPError,
    SOAPProtocolError,
    XMLSyntaxError,
    requests.RequestException,
)


def configure_collaborator_logging(verbosity: int) -> None:
    """Ajusta el nivel de logs del colaborador.

    - 0: silenciado (hay routers con descripciones mal formadas que llenan
      la consola de warnings).
    - 1: INFO.
    - 2+: DEBUG (intercambio SSDP/SOAP completo).
    """

    for name in COLLABORATOR_LOGGERS:
        log = logging.getLogger(name)
        log.disabled = verbosity <= 0
        log.setLevel(logging.DEBUG if verbosity >= 2 else logging.INFO)


def find_wan_service(device: Any) -> Any | None:
    """Devuelve el servicio WAN*Connection preferido del dispositivo."""

    by_type = {getattr(s, "service_type", ""): s for s in getattr(device, "services", [])}
    for service_type in WAN_SERVICE_TYPES:
        if service_type in by_type:
            return by_type[service_type]
    return None


def detect_internal_client(gateway_host: str) -> str:
    """IP local usada para hablar con el gateway.

    Un `connect` UDP no envía paquetes; solo fija la ruta y la IP de origen.
    """

    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.connect((gateway_host, 1900))
        return sock.getsockname()[0]


class UpnpClientGateway:
    """Implementa `core.interfaces.gateway.GatewayHandle` sobre upnpclient."""

    def __init__(
        self,
        device: Any,
        service: Any,
        *,
        internal_client: IPv4Address | str | None = None,
    ) -> None:
        self._device = device
        self._service = service
        self._internal_client = str(internal_client) if internal_client else None

    @property
    def unique_id(self) -> str:
        return str(getattr(self._device, "udn", "") or "")

    @property
    def friendly_name(self) -> str:
        return str(getattr(self._device, "friendly_name", "") or "")

    @property
    def location(self) -> str:
        return str(getattr(self._device, "location", "") or "")

    @property
    def service_type(self) -> str:
        return str(getattr(self._service, "service_type", ""))

    def internal_client(self) -> str:
        if self._internal_client is None:
            host = urlparse(self.location).hostname or ""
            try:
                self._internal_client = detect_internal_client(host)
            except OSError as exc:
                raise MappingOperationFailed(
                    f"cannot determine local address towards {host or 'gateway'} ({exc})"
                ) from exc
            logger.info("Internal client for %s: %s", host, self._internal_client)
        return self._internal_client

    def _call(self, action: str, **arguments: Any) -> dict[str, Any]:
        logger.debug("%s %s %s", self.location, action, arguments)
        try:
            call = getattr(self._service, action)
        except AttributeError:
            raise MappingOperationFailed(f"{self.service_type} does not support {action}") from None
        try:
            return call(**arguments) or {}
        except _LIBRARY_ERRORS as exc:
            raise MappingOperationFailed(str(exc) or exc.__class__.__name__) from exc

    def add_port_mapping(
        self,
        protocol: TransportProtocol,
        external_port: int,
        internal_port: int,
        description: str,
        lease_seconds: int,
    ) -> None:
        self._call(
            "AddPortMapping",
            NewRemoteHost="",
            NewExternalPort=external_port,
            NewProtocol=protocol.value,
            NewInternalPort=internal_port,
            NewInternalClient=self.internal_client(),
            NewEnabled="1",
            NewPortMappingDescription=description,
            NewLeaseDuration=lease_seconds,
        )

    def delete_port_mapping(self, protocol: TransportProtocol, external_port: int) -> None:
        self._call(
            "DeletePortMapping",
            NewRemoteHost="",
            NewExternalPort=external_port,
            NewProtocol=protocol.value,
        )


class UpnpClientDiscoverer:
    """Implementa `GatewayDiscoverer` con `upnpclient.discover`.

    Solo devuelve dispositivos que exponen un servicio WAN*Connection (IGDs).
    """

    def __init__(self, settings: AppSettings | None = None, *, verbosity: int = 0) -> None:
        self._settings = settings or AppSettings()
        configure_collaborator_logging(verbosity)

    def discover(self) -> list[UpnpClientGateway]:
        timeout = self._settings.discovery_timeout_seconds
        logger.info("SSDP search (timeout %.1fs)", timeout)
        devices = upnpclient.discover(timeout=timeout)

        gateways: list[UpnpClientGateway] = []
        for device in devices:
            service = find_wan_service(device)
            if service is None:
                logger.info("Skipping %s: no WAN connection service", getattr(device, "location", "?"))
                continue
            gateways.append(
                UpnpClientGateway(device, service, internal_client=self._settings.internal_client)
            )
        logger.info("Found %d gateway(s) among %d device(s)", len(gateways), len(devices))
        return gateways
