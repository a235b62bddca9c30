"""Configuración de logging (Rich) para la CLI.

El nivel se decide una única vez a partir de `-v`/`-vv`; el colaborador UPnP
recibe la misma verbosidad de forma explícita al construir el discoverer.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_LEVELS = {0: logging.WARNING, 1: logging.INFO}


def level_for(verbosity: int) -> int:
    return _LEVELS.get(verbosity, logging.DEBUG)


def configure_logging(verbosity: int, console: Console | None = None) -> None:
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
    )
    logging.basicConfig(
        level=level_for(verbosity),
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
    # urllib3 (vía requests/upnpclient) solo interesa en modo muy verboso.
    logging.getLogger("urllib3").setLevel(logging.DEBUG if verbosity >= 2 else logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbosity >= 2 else logging.WARNING)
