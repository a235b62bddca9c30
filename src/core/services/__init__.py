"""Servicios del Core: descubrimiento y orquestación de redirecciones."""
