from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from adapters import upnp_gateway
from core.domain.errors import MappingOperationFailed
from core.domain.models import TransportProtocol


@dataclass
class FakeGateway:
    """Gateway en memoria con la forma de `GatewayHandle`."""

    unique_id: str
    location: str
    friendly_name: str = "Router"
    fail_ports: set[int] = field(default_factory=set)
    calls: list[tuple] = field(default_factory=list)

    def add_port_mapping(
        self,
        protocol: TransportProtocol,
        external_port: int,
        internal_port: int,
        description: str,
        lease_seconds: int,
    ) -> None:
        self.calls.append(("add", protocol, external_port, internal_port, description, lease_seconds))
        if external_port in self.fail_ports:
            raise MappingOperationFailed("ConflictInMappingEntry")

    def delete_port_mapping(self, protocol: TransportProtocol, external_port: int) -> None:
        self.calls.append(("delete", protocol, external_port))
        if external_port in self.fail_ports:
            raise MappingOperationFailed("NoSuchEntryInArray")


@dataclass
class FakeDiscoverer:
    gateways: list[FakeGateway]
    sweeps: int = 0

    def discover(self) -> list[FakeGateway]:
        self.sweeps += 1
        return list(self.gateways)


@pytest.fixture
def router() -> FakeGateway:
    return FakeGateway(
        unique_id="uuid:11111111-2222-3333-4444-555555555555",
        location="http://192.168.1.1:5000/rootDesc.xml",
        friendly_name="Home Router",
    )


@pytest.fixture
def second_router() -> FakeGateway:
    return FakeGateway(
        unique_id="uuid:aaaaaaaa-bbbb-cccc-dddd-eeeeeeeeeeee",
        location="http://10.0.0.1:49152/igd.xml",
        friendly_name="Office Router",
    )


@pytest.fixture
def discoverer(monkeypatch: pytest.MonkeyPatch) -> FakeDiscoverer:
    """Sustituye el discoverer de upnpclient en la CLI.

    Los tests añaden gateways a `discoverer.gateways`.
    """

    fake = FakeDiscoverer(gateways=[])
    monkeypatch.setattr(upnp_gateway, "UpnpClientDiscoverer", lambda settings=None, *, verbosity=0: fake)
    return fake


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.chdir(tmp_path)
    for name in (
        "UPNPCTL_DISCOVERY_TIMEOUT_SECONDS",
        "UPNPCTL_HTTP_TIMEOUT_SECONDS",
        "UPNPCTL_INTERNAL_CLIENT",
        "UPNPCTL_DEFAULT_DESCRIPTION",
    ):
        monkeypatch.delenv(name, raising=False)
