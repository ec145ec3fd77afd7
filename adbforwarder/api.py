"""Stable public API for embedding adbforwarder in other tools.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass

from adbforwarder.core.device_filter import is_allowed
from adbforwarder.core.errors import (
    AdbForwarderError,
    BootstrapError,
    ConfigLoadError,
    ConfigValidationError,
    TransportCommandError,
    TransportConnectError,
    TransportError,
    TransportTimeoutError,
    UnsupportedPlatformError,
)
from adbforwarder.core.model import (
    AdbEndpoint,
    DeviceConnected,
    DeviceDisconnected,
    DeviceInfo,
    ForwarderConfig,
    ForwardOutcome,
    ForwardRule,
)
from adbforwarder.core.output_drain import OutputSink
from adbforwarder.core.service import ForwarderService
from adbforwarder.transports.base import Transport

__all__ = [
    "AdbForwarderError",
    "BootstrapError",
    "ConfigLoadError",
    "ConfigValidationError",
    "TransportError",
    "TransportCommandError",
    "TransportConnectError",
    "TransportTimeoutError",
    "UnsupportedPlatformError",
    "AdbEndpoint",
    "DeviceConnected",
    "DeviceDisconnected",
    "DeviceInfo",
    "ForwarderConfig",
    "ForwardOutcome",
    "ForwardRule",
    "DeviceStatus",
    "Client",
    "is_allowed",
]


@dataclass(frozen=True)
class DeviceStatus:
    """An attached device and whether it qualifies for forwarding."""

    device: DeviceInfo
    allowed: bool


class Client:
    """Public client for running the forwarder from another program.

    A `Client` wraps config loading, device listing, and the event-driven
    forwarding loop. Pass a custom `transport` to drive something other than
    the adb binary.
    """

    def __init__(
        self,
        *,
        config: ForwarderConfig | None = None,
        transport: Transport | None = None,
        sink: OutputSink = print,
    ) -> None:
        self._service = ForwarderService(config=config, transport=transport, sink=sink)

    @property
    def config(self) -> ForwarderConfig:
        return self._service.config

    @property
    def load_warnings(self) -> tuple[str, ...]:
        return self._service.load_warnings

    def list_devices(self) -> list[DeviceStatus]:
        return [DeviceStatus(device=d, allowed=a) for d, a in self._service.device_statuses()]

    def forward(self, serial: str) -> ForwardOutcome:
        """Handle one device attachment synchronously and flush its output."""
        outcome = self._service.controller.on_device_connected(serial)
        self._service.drain.flush()
        return outcome

    def run(self, stop_event: threading.Event | None = None) -> None:
        self._service.run_forever(stop_event)
