"""Forwarding controller: reacts to a single device attachment."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from adbforwarder.core.device_filter import is_allowed
from adbforwarder.core.errors import TransportError
from adbforwarder.core.model import DeviceInfo, ForwarderConfig, ForwardOutcome
from adbforwarder.core.output_drain import OutputDrain
from adbforwarder.transports.base import Transport

LOGGER = logging.getLogger(__name__)


class ForwardingController:
    """Settle, re-query, filter, forward, launch.

    Holds no per-device state, so concurrent calls for different serials do
    not interfere with each other.
    """

    def __init__(
        self,
        transport: Transport,
        config: ForwarderConfig,
        drain: OutputDrain,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.transport = transport
        self.config = config
        self.drain = drain
        self._sleep = sleep

    def on_device_connected(self, serial: str) -> ForwardOutcome:
        # The connect notification fires before the product property is populated.
        if self.config.settle_delay_ms > 0:
            self._sleep(self.config.settle_delay_ms / 1000.0)

        try:
            device = self._find_device(serial)
        except TransportError as exc:
            LOGGER.error("Could not list devices for %s: %s", serial, exc)
            return ForwardOutcome.FAILED

        if device is None:
            LOGGER.debug("Device %s disconnected before forwarding", serial)
            return ForwardOutcome.ABSENT

        if not is_allowed(device.product, self.config.allow_list):
            LOGGER.warning("Skipped forwarding device: %s", device.label)
            return ForwardOutcome.REJECTED

        try:
            for rule in self.config.forward_ports:
                self.transport.create_forward(device, rule.local_port, rule.remote_port)
        except TransportError as exc:
            LOGGER.error("Forwarding failed for device %s: %s", device.serial, exc)
            return ForwardOutcome.FAILED

        LOGGER.info("Successfully forwarded device: %s [%s]", device.serial, device.product)

        try:
            self.transport.execute_remote_command(
                device,
                self.config.launch_command,
                self.drain.enqueue,
            )
        except TransportError as exc:
            LOGGER.error("Launch command failed on device %s: %s", device.serial, exc)
            return ForwardOutcome.FAILED

        return ForwardOutcome.LAUNCHED

    def _find_device(self, serial: str) -> DeviceInfo | None:
        for device in self.transport.list_devices():
            if device.serial == serial:
                return device
        return None
