"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts y headers de las peticiones que no pasan por
  upnpclient (diagnóstico de las URLs de descripción).
- Facilita testeo: se puede sustituir por un stub/mocked client.
"""

from __future__ import annotations

from typing import Any

import httpx
from bs4 import BeautifulSoup

from core.config import AppSettings
from core.version import VERSION

_DESCRIPTION_FIELDS: dict[str, str] = {
    "friendlyName": "friendly_name",
    "manufacturer": "manufacturer",
    "modelName": "model_name",
    "modelNumber": "model_number",
    "deviceType": "device_type",
}


def build_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
) -> httpx.Client:
    """Crea un `httpx.Client` con defaults seguros.

    Por qué un builder:
    - Centraliza timeouts/headers para que todas las comprobaciones se
      comporten igual.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": f"upnpctl/{VERSION} UPnP/1.1",
        "Accept": "text/xml,application/xml;q=0.9,*/*;q=0.8",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.Client(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
    )


def extract_description_metadata(xml: str) -> dict[str, Any]:
    """Extrae metadata ligera del XML de descripción del dispositivo raíz.

    Devuelve keys opcionales:
    - friendly_name
    - manufacturer
    - model_name
    - model_number
    - device_type
    """

    if not xml:
        return {}

    soup = BeautifulSoup(xml, features="xml")
    root = soup.find("device") or soup

    out: dict[str, Any] = {}
    for tag_name, key in _DESCRIPTION_FIELDS.items():
        tag = root.find(tag_name)
        if tag and tag.get_text(strip=True):
            out[key] = tag.get_text(strip=True)
    return out


def fetch_description(location: str, settings: AppSettings | None = None) -> dict[str, Any]:
    """Descarga la descripción XML y devuelve `status_code` + metadata."""

    with build_client(settings) as client:
        response = client.get(location)
    out: dict[str, Any] = {"status_code": response.status_code}
    if response.status_code == 200:
        out.update(extract_description_metadata(response.text))
    return out
