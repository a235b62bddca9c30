"""Core de upnpctl: dominio, contratos y servicios (sin I/O de consola)."""
