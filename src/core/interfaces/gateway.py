"""Contrato con el colaborador UPnP.

Por qué Protocol:
- La CLI y los servicios solo dependen de esta forma estructural; el
  adaptador de `upnpclient` (o un fake en tests) la implementa sin herencia.
- SSDP, SOAP y el parseo de descripciones XML quedan del lado del colaborador.
"""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from core.domain.models import TransportProtocol


@runtime_checkable
class GatewayHandle(Protocol):
    """Gateway IGD direccionable.

    Reglas de diseño:
    - Las operaciones son síncronas y bloqueantes (una petición SOAP cada una).
    - Los fallos se señalan con `core.domain.errors.MappingOperationFailed`.
    """

    @property
    def unique_id(self) -> str: ...

    @property
    def friendly_name(self) -> str: ...

    @property
    def location(self) -> str: ...

    def add_port_mapping(
        self,
        protocol: TransportProtocol,
        external_port: int,
        internal_port: int,
        description: str,
        lease_seconds: int,
    ) -> None:
        """Crea (o reemplaza) una redirección en el gateway."""

        ...

    def delete_port_mapping(self, protocol: TransportProtocol, external_port: int) -> None:
        """Elimina la redirección identificada por protocolo + puerto externo."""

        ...


@runtime_checkable
class GatewayDiscoverer(Protocol):
    """Primitiva de descubrimiento (barrido SSDP con timeout propio)."""

    def discover(self) -> Sequence[GatewayHandle]:
        ...
