"""Event dispatcher consuming typed connection events from a channel."""

from __future__ import annotations

import logging
import queue
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor

from adbforwarder.core.controller import ForwardingController
from adbforwarder.core.model import ConnectionEvent, DeviceConnected, DeviceDisconnected

LOGGER = logging.getLogger(__name__)

_STOP = object()


class EventDispatcher:
    def __init__(
        self,
        events: queue.Queue[ConnectionEvent],
        controller: ForwardingController,
        *,
        executor: Executor | None = None,
    ) -> None:
        self.events = events
        self.controller = controller
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(thread_name_prefix="adbforwarder-device")
        self._thread: threading.Thread | None = None

    def dispatch(self, event: ConnectionEvent) -> Future | None:
        if isinstance(event, DeviceConnected):
            LOGGER.info("Connected device: %s", event.serial)
            future = self._executor.submit(self.controller.on_device_connected, event.serial)
            future.add_done_callback(lambda f, serial=event.serial: _report(serial, f))
            return future
        if isinstance(event, DeviceDisconnected):
            LOGGER.info("Disconnected device: %s", event.serial)
            return None
        LOGGER.warning("Ignoring unknown event %r", event)
        return None

    def run(self) -> None:
        while True:
            event = self.events.get()
            try:
                if event is _STOP:
                    return
                self.dispatch(event)
            except Exception:
                LOGGER.exception("Failed to dispatch %r", event)
            finally:
                self.events.task_done()

    def start(self) -> None:
        self._thread = threading.Thread(target=self.run, name="adbforwarder-dispatcher", daemon=True)
        self._thread.start()

    def stop(self, timeout_s: float | None = 5.0) -> None:
        self.events.put(_STOP)  # type: ignore[arg-type]
        if self._thread is not None:
            self._thread.join(timeout_s)
            self._thread = None
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)


def _report(serial: str, future: Future) -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        LOGGER.error("Unhandled error while forwarding %s", serial, exc_info=exc)
        return
    LOGGER.debug("Finished handling %s: %s", serial, future.result().value)
