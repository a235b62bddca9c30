"""Parser de duraciones para `--timeout`.

Acepta el formato compacto habitual en herramientas de red (`90s`, `1h30m`,
`1.5h`, `500ms`) y enteros sin unidad, interpretados como segundos.
"""

from __future__ import annotations

import re

from core.domain.errors import InvalidDuration

_UNIT_SECONDS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")

MAX_LEASE_SECONDS = 2**32 - 1


def parse_duration(value: str) -> float:
    """Devuelve la duración en segundos (float)."""

    text = value.strip()
    if not text:
        raise InvalidDuration("Invalid timeout: empty duration")
    if text.isdigit():
        return float(text)
    if text.startswith("-"):
        raise InvalidDuration(f"Invalid timeout: {value} (negative duration)")

    body = text.removeprefix("+")
    total = 0.0
    pos = 0
    for match in _COMPONENT.finditer(body):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()

    if pos == 0 or pos != len(body):
        raise InvalidDuration(f"Invalid timeout: {value}")
    return total


def lease_seconds(value: str | None) -> int:
    """Segundos enteros de lease; `None` significa permanente (0).

    `NewLeaseDuration` es un ui4: el máximo es 2**32 - 1 segundos.
    """

    if value is None:
        return 0
    seconds = int(parse_duration(value))
    if seconds > MAX_LEASE_SECONDS:
        raise InvalidDuration(f"Invalid timeout: {value} (exceeds {MAX_LEASE_SECONDS} seconds)")
    return seconds
