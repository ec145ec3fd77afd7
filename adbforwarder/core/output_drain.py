"""Buffer for remote command output lines.

Lines are produced on whatever thread runs the remote command and consumed by
the main loop, so the only coupling between the two is a thread-safe FIFO.
"""

from __future__ import annotations

import queue
from collections.abc import Callable

OutputSink = Callable[[str], None]


class OutputDrain:
    def __init__(self, sink: OutputSink = print) -> None:
        self._sink = sink
        self._lines: queue.SimpleQueue[str] = queue.SimpleQueue()

    def enqueue(self, line: str) -> None:
        self._lines.put_nowait(line)

    def flush(self) -> int:
        """Write every currently queued line to the sink in FIFO order.

        Returns the number of lines written. Lines enqueued while a flush is in
        progress are either written by this call or left for the next one.
        """
        written = 0
        while True:
            try:
                line = self._lines.get_nowait()
            except queue.Empty:
                return written
            self._sink(line)
            written += 1
