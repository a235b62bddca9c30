"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Validación estricta de puertos y protocolos en el borde (tokens de la CLI)
  sin acoplar el Core a upnpclient.
- Serialización estable de dispositivos para `list --json`.

Nota:
- `Device.handle` es el objeto del colaborador UPnP; se excluye al serializar.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from core.domain.errors import InvalidPort, InvalidProtocol, UsageError

MIN_PORT = 1
MAX_PORT = 65535


class TransportProtocol(str, Enum):
    """Protocolos aceptados por `AddPortMapping`/`DeletePortMapping`."""

    TCP = "TCP"
    UDP = "UDP"

    @classmethod
    def parse(cls, value: str) -> "TransportProtocol":
        """Normaliza `tcp`/`UDP`/... (case-insensitive)."""

        try:
            return cls(value.strip().upper())
        except ValueError:
            raise InvalidProtocol(f"Invalid type: {value}") from None


def _parse_port(raw: str, label: str) -> int:
    # int() acepta "+80", " 80" y "8_0"; solo admitimos dígitos base 10.
    if not raw.isascii() or not raw.isdigit():
        raise InvalidPort(f"Invalid {label}'{raw}'")
    port = int(raw, 10)
    if not MIN_PORT <= port <= MAX_PORT:
        raise InvalidPort(f"Invalid {label}'{raw}'")
    return port


class PortMapping(BaseModel):
    """Par puerto externo -> puerto interno.

    Se construye a partir de un token `external[:internal]` y se consume de
    inmediato por una única llamada add/remove.
    """

    model_config = ConfigDict(frozen=True)

    external: int = Field(
        ...,
        ge=MIN_PORT,
        le=MAX_PORT,
        description="Puerto expuesto en el lado WAN del gateway.",
    )
    internal: int = Field(
        ...,
        ge=MIN_PORT,
        le=MAX_PORT,
        description="Puerto destino en el host local.",
    )

    @classmethod
    def parse(cls, token: str) -> "PortMapping":
        """Parsea `3000` o `5000:6000`."""

        parts = token.split(":", 1)
        if len(parts) == 1:
            port = _parse_port(parts[0], "port ")
            return cls(external=port, internal=port)

        external = _parse_port(parts[0], "external port ")
        internal = _parse_port(parts[1], "internal port ")
        return cls(external=external, internal=internal)

    @classmethod
    def parse_removal(cls, token: str) -> "PortMapping":
        """Como `parse`, pero solo acepta un puerto externo."""

        mapping = cls.parse(token)
        if mapping.external != mapping.internal:
            raise UsageError("When removing ports, only specify the external port")
        return mapping

    def label(self) -> str:
        if self.external == self.internal:
            return str(self.external)
        return f"{self.external}:{self.internal}"


class Device(BaseModel):
    """Gateway descubierto en un barrido SSDP.

    Por qué existe:
    - Desacopla la presentación (id/nombre/IP) del handle del colaborador.
    - El identificador es determinista dentro de un barrido para que el
      usuario pueda repetir `--id` con fiabilidad.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    identifier: str = Field(
        ...,
        min_length=1,
        max_length=16,
        description="Identificador corto derivado del UDN y del host.",
    )
    name: str = Field(
        default="",
        description="Friendly name publicado por el dispositivo.",
    )
    address: str = Field(
        default="",
        description="IP (host) de la URL de descripción del dispositivo.",
    )
    location: str = Field(
        default="",
        description="URL de la descripción XML del dispositivo.",
    )
    handle: Any = Field(
        default=None,
        exclude=True,
        description="Referencia opaca al objeto del colaborador UPnP.",
    )


class MappingResult(BaseModel):
    """Resultado de una operación individual add/remove."""

    mapping: PortMapping
    ok: bool = Field(default=True)
    error: str | None = Field(default=None)
