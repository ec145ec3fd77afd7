"""Device event source that turns device-list snapshots into connection events."""

from __future__ import annotations

import logging
import queue
import threading

from adbforwarder.core.errors import TransportError
from adbforwarder.core.model import ConnectionEvent, DeviceConnected, DeviceDisconnected
from adbforwarder.transports.base import Transport

LOGGER = logging.getLogger(__name__)


class DeviceMonitor:
    """Polls the transport and pushes connect/disconnect events onto a queue.

    Serials present at the first poll are reported as connected, so devices
    that were attached before startup are forwarded as well.
    """

    def __init__(
        self,
        transport: Transport,
        events: queue.Queue[ConnectionEvent],
        *,
        interval_s: float = 1.0,
    ) -> None:
        self.transport = transport
        self.events = events
        self.interval_s = interval_s
        self._known: set[str] = set()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def poll(self) -> list[ConnectionEvent]:
        current = {device.serial for device in self.transport.list_devices()}
        emitted: list[ConnectionEvent] = []
        for serial in sorted(current - self._known):
            emitted.append(DeviceConnected(serial))
        for serial in sorted(self._known - current):
            emitted.append(DeviceDisconnected(serial))
        self._known = current
        for event in emitted:
            self.events.put(event)
        return emitted

    def run(self) -> None:
        while not self._stop.is_set():
            try:
                self.poll()
            except TransportError as exc:
                LOGGER.warning("Device poll failed: %s", exc)
            except Exception:
                LOGGER.exception("Unexpected error while polling devices")
            self._stop.wait(self.interval_s)

    def start(self) -> None:
        self._stop.clear()
        self._thread = threading.Thread(target=self.run, name="adbforwarder-monitor", daemon=True)
        self._thread.start()

    def stop(self, timeout_s: float | None = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout_s)
            self._thread = None
