"""Versión instalada del paquete."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    VERSION = version("upnpctl")
except PackageNotFoundError:  # ejecución desde el árbol sin instalar
    VERSION = "0.0.0"


def default_description() -> str:
    """Descripción que algunos routers muestran junto a la redirección."""

    return f"upnpctl v{VERSION}"
