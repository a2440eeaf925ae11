"""
In-memory metrics sink - Implements MetricsSink protocol.

Counters are keyed by name plus sorted labels and shared across concurrent
requests, so updates go through a lock.
"""

from collections import Counter
from collections.abc import Mapping
from threading import Lock

CounterKey = tuple[str, tuple[tuple[str, str], ...]]


class InMemoryMetricsSink:
    """Implements MetricsSink protocol with a lock-guarded Counter."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._counters: Counter[CounterKey] = Counter()

    def increment(self, counter_name: str, labels: Mapping[str, str]) -> None:
        key = (counter_name, tuple(sorted(labels.items())))
        with self._lock:
            self._counters[key] += 1

    def value(self, counter_name: str, **labels: str) -> int:
        """Current value of one labelled counter."""
        key = (counter_name, tuple(sorted(labels.items())))
        with self._lock:
            return self._counters[key]

    def snapshot(self) -> dict[str, int]:
        """All counters as {"name{k=v,...}": count}."""
        with self._lock:
            items = list(self._counters.items())
        return {
            f"{name}{{{','.join(f'{k}={v}' for k, v in labels)}}}": count
            for (name, labels), count in items
        }
