"""Service layer wiring transport, controller, dispatcher and monitor together."""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Callable

from adbforwarder.core.config_loader import load_config
from adbforwarder.core.controller import ForwardingController
from adbforwarder.core.device_filter import device_is_allowed
from adbforwarder.core.dispatcher import EventDispatcher
from adbforwarder.core.model import ConnectionEvent, DeviceInfo, ForwarderConfig
from adbforwarder.core.output_drain import OutputDrain, OutputSink
from adbforwarder.transports.adb_cli import AdbCliTransport
from adbforwarder.transports.base import Transport
from adbforwarder.transports.monitor import DeviceMonitor

LOGGER = logging.getLogger(__name__)


class ForwarderService:
    def __init__(
        self,
        *,
        config: ForwarderConfig | None = None,
        transport: Transport | None = None,
        sink: OutputSink = print,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if config is None:
            loaded = load_config()
            self.config = loaded.config
            self.load_warnings = loaded.warnings
        else:
            self.config = config
            self.load_warnings = ()
        self.transport = transport or AdbCliTransport(
            self.config.adb_path or "adb",
            endpoint=self.config.endpoint,
            timeout_s=self.config.command_timeout_s,
        )
        self.events: queue.Queue[ConnectionEvent] = queue.Queue()
        self.drain = OutputDrain(sink)
        self.controller = ForwardingController(self.transport, self.config, self.drain, sleep=sleep)
        self.dispatcher = EventDispatcher(self.events, self.controller)
        self.monitor = DeviceMonitor(self.transport, self.events, interval_s=self.config.poll_interval_s)

    def list_devices(self) -> list[DeviceInfo]:
        return self.transport.list_devices()

    def device_statuses(self) -> list[tuple[DeviceInfo, bool]]:
        return [(device, device_is_allowed(device, self.config.allow_list)) for device in self.list_devices()]

    def start(self) -> None:
        self.dispatcher.start()
        self.monitor.start()

    def stop(self) -> None:
        self.monitor.stop()
        self.dispatcher.stop()
        self.drain.flush()

    def run_forever(self, stop_event: threading.Event | None = None, *, tick_s: float = 0.1) -> None:
        """Run until ``stop_event`` is set or the process is interrupted.

        The main thread only flushes remote command output; all device handling
        happens on the monitor, dispatcher and worker threads.
        """
        stop_event = stop_event or threading.Event()
        self.start()
        try:
            while not stop_event.wait(tick_s):
                self.drain.flush()
        finally:
            self.stop()
