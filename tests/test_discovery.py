from __future__ import annotations

from core.services.discovery import DEVICE_ID_LENGTH, derive_device_id, discover_devices, to_device
from tests.conftest import FakeDiscoverer, FakeGateway


def test_device_id_is_short_and_deterministic() -> None:
    first = derive_device_id("uuid:abc", "192.168.1.1:5000")
    assert first == derive_device_id("uuid:abc", "192.168.1.1:5000")
    assert len(first) == DEVICE_ID_LENGTH
    assert int(first, 16) >= 0


def test_device_id_depends_on_host() -> None:
    assert derive_device_id("uuid:abc", "192.168.1.1:5000") != derive_device_id("uuid:abc", "192.168.1.2:5000")


def test_to_device(router: FakeGateway) -> None:
    device = to_device(router)
    assert device.name == "Home Router"
    assert device.address == "192.168.1.1"
    assert device.location == router.location
    assert device.identifier == derive_device_id(router.unique_id, "192.168.1.1:5000")
    assert device.handle is router


def test_repeated_sweeps_yield_identical_ids(router: FakeGateway, second_router: FakeGateway) -> None:
    discoverer = FakeDiscoverer(gateways=[router, second_router])
    first = [d.identifier for d in discover_devices(discoverer)]
    second = [d.identifier for d in discover_devices(discoverer)]
    assert first == second
    assert len(set(first)) == 2


def test_no_devices_is_an_empty_list() -> None:
    assert discover_devices(FakeDiscoverer(gateways=[])) == []
