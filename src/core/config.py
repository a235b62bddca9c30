"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (upnpclient/httpx) lean config de forma consistente.
"""

from __future__ import annotations

import os
import sys
from ipaddress import IPv4Address
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "upnpctl"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "upnpctl"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "upnpctl"
    return Path.home() / ".config" / "upnpctl"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="UPNPCTL_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    discovery_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        le=120,
        description="Tiempo de escucha de respuestas SSDP (segundos).",
    )
    http_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout por request HTTP de diagnóstico (segundos).",
    )
    internal_client: IPv4Address | None = Field(
        default=None,
        description="IP LAN anunciada como NewInternalClient (auto-detectada si no se define).",
    )
    default_description: str | None = Field(
        default=None,
        min_length=1,
        max_length=256,
        description="Descripción por defecto de las redirecciones (si no, 'upnpctl v<version>').",
    )
