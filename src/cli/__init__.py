"""Capa CLI (Typer + Rich): parseo de opciones, salida y exit codes."""
