"""Transport interfaces."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from adbforwarder.core.model import AdbEndpoint, DeviceInfo


class Transport(Protocol):
    def connect(self, endpoint: AdbEndpoint) -> None:
        """Establish a session with the local adb server."""

    def list_devices(self) -> list[DeviceInfo]:
        """Return a snapshot of attached devices."""

    def create_forward(self, device: DeviceInfo, local_port: int, remote_port: int) -> None:
        """Install a TCP forward from a local port to a device port."""

    def execute_remote_command(
        self,
        device: DeviceInfo,
        command: str,
        output_sink: Callable[[str], None],
    ) -> None:
        """Run a shell command on the device, streaming output lines to the sink."""
