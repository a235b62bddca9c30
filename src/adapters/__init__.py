"""Adaptadores hacia librerías externas (upnpclient, httpx, JSON)."""
