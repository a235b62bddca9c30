"""Exportación JSON de los dispositivos descubiertos.

Por qué JSON:
- Interoperabilidad con scripts y pipelines (`upnpctl list --json | jq`).
- El handle del colaborador se excluye; solo viajan id/nombre/IP/URL.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Sequence

from core.domain.models import Device


def devices_to_json(devices: Sequence[Device]) -> str:
    """Serializa dispositivos a JSON UTF-8 con formato estable."""

    payload = [device.model_dump(mode="json") for device in devices]
    return json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n"


def export_devices_json(*, devices: Sequence[Device], output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(devices_to_json(devices), encoding="utf-8")
    return output_path
