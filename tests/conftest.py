from __future__ import annotations

import threading
from collections.abc import Callable

import pytest

from adbforwarder.core.errors import TransportCommandError
from adbforwarder.core.model import AdbEndpoint, DeviceInfo


class FakeTransport:
    def __init__(self, devices: list[DeviceInfo] | None = None) -> None:
        self.devices = list(devices or [])
        self.calls: list[tuple] = []
        self.output: list[str] = ["Starting: Intent { cmp=alvr.client.quest/com.polygraphene.alvr.OvrActivity }"]
        self.fail_forward_on: set[tuple[str, int]] = set()
        self._lock = threading.Lock()

    def _record(self, call: tuple) -> None:
        with self._lock:
            self.calls.append(call)

    def connect(self, endpoint: AdbEndpoint) -> None:
        self._record(("connect", endpoint.host, endpoint.port))

    def list_devices(self) -> list[DeviceInfo]:
        return list(self.devices)

    def create_forward(self, device: DeviceInfo, local_port: int, remote_port: int) -> None:
        self._record(("forward", device.serial, local_port, remote_port))
        if (device.serial, local_port) in self.fail_forward_on:
            raise TransportCommandError(f"cannot bind 'tcp:{local_port}'")

    def execute_remote_command(
        self,
        device: DeviceInfo,
        command: str,
        output_sink: Callable[[str], None],
    ) -> None:
        self._record(("shell", device.serial, command))
        for line in self.output:
            output_sink(line)

    def calls_of(self, kind: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == kind]


@pytest.fixture
def quest2() -> DeviceInfo:
    return DeviceInfo(serial="1WMHH815K10234", product="hollywood", model="Quest_2", device="hollywood")


@pytest.fixture
def fake_transport(quest2: DeviceInfo) -> FakeTransport:
    return FakeTransport([quest2])
