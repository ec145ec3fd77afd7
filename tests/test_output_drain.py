from __future__ import annotations

import threading
from collections import Counter

from adbforwarder.core.output_drain import OutputDrain


def test_flush_preserves_order_and_empties_queue() -> None:
    seen: list[str] = []
    drain = OutputDrain(seen.append)

    for line in ["a", "b", "c"]:
        drain.enqueue(line)

    assert drain.flush() == 3
    assert seen == ["a", "b", "c"]
    assert drain.flush() == 0
    assert seen == ["a", "b", "c"]


def test_concurrent_enqueue_during_flush_never_loses_or_duplicates() -> None:
    seen: list[str] = []
    drain = OutputDrain(seen.append)
    producers = 4
    per_producer = 2000
    done = threading.Event()

    def produce(idx: int) -> None:
        for n in range(per_producer):
            drain.enqueue(f"{idx}:{n}")

    def consume() -> None:
        while not done.is_set():
            drain.flush()
        drain.flush()

    consumer = threading.Thread(target=consume)
    consumer.start()
    threads = [threading.Thread(target=produce, args=(i,)) for i in range(producers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    done.set()
    consumer.join()

    assert len(seen) == producers * per_producer
    assert max(Counter(seen).values()) == 1
    for idx in range(producers):
        own = [int(line.split(":")[1]) for line in seen if line.startswith(f"{idx}:")]
        assert own == list(range(per_producer))
