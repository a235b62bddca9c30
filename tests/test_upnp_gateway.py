from __future__ import annotations

import logging
from types import SimpleNamespace

import pytest
import requests
import upnpclient
from lxml import etree
from upnpclient.soap import SOAPError, SOAPProtocolError

from adapters import upnp_gateway
from adapters.upnp_gateway import (
    UpnpClientDiscoverer,
    UpnpClientGateway,
    configure_collaborator_logging,
    find_wan_service,
)
from core.config import AppSettings
from core.domain.errors import MappingOperationFailed
from core.domain.models import TransportProtocol

WAN_IP_1 = "urn:schemas-upnp-org:service:WANIPConnection:1"
WAN_PPP_1 = "urn:schemas-upnp-org:service:WANPPPConnection:1"
L3F = "urn:schemas-upnp-org:service:Layer3Forwarding:1"


class FakeService:
    def __init__(self, service_type: str, error: Exception | None = None) -> None:
        self.service_type = service_type
        self.error = error
        self.calls: list[tuple[str, dict]] = []

    def AddPortMapping(self, **arguments):  # noqa: N802
        return self._record("AddPortMapping", arguments)

    def DeletePortMapping(self, **arguments):  # noqa: N802
        return self._record("DeletePortMapping", arguments)

    def _record(self, name: str, arguments: dict):
        self.calls.append((name, arguments))
        if self.error is not None:
            raise self.error
        return {}


def fake_device(*services: FakeService, location: str = "http://192.168.1.1:5000/rootDesc.xml"):
    return SimpleNamespace(
        udn="uuid:router-1",
        friendly_name="Home Router",
        location=location,
        services=list(services),
    )


def test_find_wan_service_prefers_ip_connection() -> None:
    ppp = FakeService(WAN_PPP_1)
    ip = FakeService(WAN_IP_1)
    assert find_wan_service(fake_device(FakeService(L3F), ppp, ip)) is ip
    assert find_wan_service(fake_device(FakeService(L3F), ppp)) is ppp
    assert find_wan_service(fake_device(FakeService(L3F))) is None


def test_gateway_properties() -> None:
    service = FakeService(WAN_IP_1)
    gateway = UpnpClientGateway(fake_device(service), service, internal_client="192.168.1.20")
    assert gateway.unique_id == "uuid:router-1"
    assert gateway.friendly_name == "Home Router"
    assert gateway.location.endswith("rootDesc.xml")
    assert gateway.service_type == WAN_IP_1


def test_add_port_mapping_arguments() -> None:
    service = FakeService(WAN_IP_1)
    gateway = UpnpClientGateway(fake_device(service), service, internal_client="192.168.1.20")

    gateway.add_port_mapping(TransportProtocol.UDP, 3000, 3001, "upnpctl v1", 0)

    assert service.calls == [
        (
            "AddPortMapping",
            {
                "NewRemoteHost": "",
                "NewExternalPort": 3000,
                "NewProtocol": "UDP",
                "NewInternalPort": 3001,
                "NewInternalClient": "192.168.1.20",
                "NewEnabled": "1",
                "NewPortMappingDescription": "upnpctl v1",
                "NewLeaseDuration": 0,
            },
        )
    ]


def test_internal_client_is_detected_once(monkeypatch: pytest.MonkeyPatch) -> None:
    hosts: list[str] = []

    def detect(host: str) -> str:
        hosts.append(host)
        return "192.168.1.50"

    monkeypatch.setattr(upnp_gateway, "detect_internal_client", detect)
    service = FakeService(WAN_IP_1)
    gateway = UpnpClientGateway(fake_device(service), service)

    gateway.add_port_mapping(TransportProtocol.TCP, 80, 8080, "d", 60)
    gateway.add_port_mapping(TransportProtocol.TCP, 443, 8443, "d", 60)

    assert hosts == ["192.168.1.1"]
    assert {args["NewInternalClient"] for _, args in service.calls} == {"192.168.1.50"}


def test_internal_client_detection_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    def detect(host: str) -> str:
        raise OSError("Network is unreachable")

    monkeypatch.setattr(upnp_gateway, "detect_internal_client", detect)
    service = FakeService(WAN_IP_1)
    gateway = UpnpClientGateway(fake_device(service), service)

    with pytest.raises(MappingOperationFailed, match="unreachable"):
        gateway.add_port_mapping(TransportProtocol.TCP, 80, 80, "d", 0)
    assert service.calls == []


def test_delete_port_mapping_arguments() -> None:
    service = FakeService(WAN_IP_1)
    gateway = UpnpClientGateway(fake_device(service), service, internal_client="192.168.1.20")

    gateway.delete_port_mapping(TransportProtocol.TCP, 3000)

    assert service.calls == [
        ("DeletePortMapping", {"NewRemoteHost": "", "NewExternalPort": 3000, "NewProtocol": "TCP"})
    ]


def _xml_syntax_error() -> etree.XMLSyntaxError:
    try:
        etree.fromstring(b"<html><body>Internal Server Error")
    except etree.XMLSyntaxError as exc:
        return exc
    raise AssertionError("malformed XML was accepted")


@pytest.mark.parametrize(
    "error",
    [
        requests.ConnectionError("connection refused"),
        upnpclient.UPNPError("718 ConflictInMappingEntry"),
        SOAPError(718, "ConflictInMappingEntry"),
        SOAPProtocolError("Returned payload did not include a AddPortMappingResponse element"),
        _xml_syntax_error(),
    ],
    ids=["requests", "upnp", "soap-fault", "soap-protocol", "xml-syntax"],
)
def test_library_errors_become_mapping_failures(error: Exception) -> None:
    service = FakeService(WAN_IP_1, error=error)
    gateway = UpnpClientGateway(fake_device(service), service, internal_client="192.168.1.20")

    with pytest.raises(MappingOperationFailed) as info:
        gateway.delete_port_mapping(TransportProtocol.TCP, 3000)
    assert info.value.__cause__ is error


def test_unsupported_action() -> None:
    service = SimpleNamespace(service_type=WAN_PPP_1)
    gateway = UpnpClientGateway(fake_device(), service, internal_client="192.168.1.20")

    with pytest.raises(MappingOperationFailed, match="does not support DeletePortMapping"):
        gateway.delete_port_mapping(TransportProtocol.TCP, 3000)


def test_discoverer_keeps_only_gateways(monkeypatch: pytest.MonkeyPatch) -> None:
    igd = fake_device(FakeService(L3F), FakeService(WAN_IP_1))
    media_server = fake_device(
        FakeService("urn:schemas-upnp-org:service:ContentDirectory:1"),
        location="http://192.168.1.30:8200/rootDesc.xml",
    )
    timeouts: list[float] = []

    def discover(timeout: float = 5):
        timeouts.append(timeout)
        return [media_server, igd]

    monkeypatch.setattr(upnpclient, "discover", discover)
    settings = AppSettings(discovery_timeout_seconds=2, internal_client="192.168.1.20")

    gateways = UpnpClientDiscoverer(settings).discover()

    assert timeouts == [2]
    assert [g.location for g in gateways] == [igd.location]
    assert gateways[0].internal_client() == "192.168.1.20"


def test_collaborator_logging_follows_verbosity() -> None:
    ssdp = logging.getLogger("ssdp")
    try:
        configure_collaborator_logging(0)
        assert ssdp.disabled
        configure_collaborator_logging(1)
        assert not ssdp.disabled
        assert ssdp.level == logging.INFO
        configure_collaborator_logging(2)
        assert ssdp.level == logging.DEBUG
    finally:
        ssdp.disabled = False
        ssdp.setLevel(logging.NOTSET)
