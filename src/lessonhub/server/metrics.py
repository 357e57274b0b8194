"""Prometheus metrics for the lessonhub server."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Optional


def _label_str(labels: List[str], key: tuple) -> str:
    return ",".join(f'{l}="{v}"' for l, v in zip(labels, key))


class _Counter:
    """Simple counter metric."""

    def __init__(self, name: str, help_text: str, labels: Optional[List[str]] = None):
        self.name = name
        self.help_text = help_text
        self.labels = labels or []
        self._values: Dict[tuple, float] = defaultdict(float)

    def inc(self, amount: float = 1.0, **kwargs: str) -> None:
        key = tuple(kwargs.get(l, "") for l in self.labels)
        self._values[key] += amount

    def value(self, **kwargs: str) -> float:
        return self._values.get(tuple(kwargs.get(l, "") for l in self.labels), 0.0)

    def collect(self) -> str:
        lines = [f"# HELP {self.name} {self.help_text}", f"# TYPE {self.name} counter"]
        for key, val in sorted(self._values.items()):
            if self.labels:
                lines.append(f"{self.name}{{{_label_str(self.labels, key)}}} {val}")
            else:
                lines.append(f"{self.name} {val}")
        return "\n".join(lines)


class _Histogram:
    """Cumulative bucket counts plus sum and count per label set.

    Observations are folded in as they arrive; nothing per-request is kept.
    """

    DEFAULT_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, float("inf"))

    def __init__(self, name: str, help_text: str, labels: Optional[List[str]] = None,
                 buckets: Optional[tuple] = None):
        self.name = name
        self.help_text = help_text
        self.labels = labels or []
        buckets = tuple(buckets or self.DEFAULT_BUCKETS)
        # The +Inf bucket doubles as the observation count
        if buckets[-1] != float("inf"):
            buckets += (float("inf"),)
        self.buckets = buckets
        self._counts: Dict[tuple, List[int]] = {}
        self._sums: Dict[tuple, float] = defaultdict(float)

    def observe(self, value: float, **kwargs: str) -> None:
        key = tuple(kwargs.get(l, "") for l in self.labels)
        counts = self._counts.setdefault(key, [0] * len(self.buckets))
        for i, b in enumerate(self.buckets):
            if value <= b:
                counts[i] += 1
        self._sums[key] += value

    def collect(self) -> str:
        lines = [f"# HELP {self.name} {self.help_text}", f"# TYPE {self.name} histogram"]
        for key, counts in sorted(self._counts.items()):
            label_str = _label_str(self.labels, key) if self.labels else ""
            prefix = f"{label_str}," if label_str else ""
            suffix = f"{{{label_str}}}" if label_str else ""

            for b, count in zip(self.buckets, counts):
                le = "+Inf" if b == float("inf") else str(b)
                lines.append(f'{self.name}_bucket{{{prefix}le="{le}"}} {count}')

            lines.append(f"{self.name}_sum{suffix} {self._sums[key]}")
            lines.append(f"{self.name}_count{suffix} {counts[-1]}")
        return "\n".join(lines)


# ── Business Metrics ───────────────────────────────────────────────

search_queries_total = _Counter(
    "lessonhub_search_queries_total", "Search requests by resolving stage", ["stage"]
)
orders_placed_total = _Counter("lessonhub_orders_placed_total", "Total orders persisted")

# ── HTTP RED Metrics ───────────────────────────────────────────────

http_requests_total = _Counter("http_requests_total", "Total HTTP requests", ["method", "path", "status"])
http_request_duration = _Histogram("http_request_duration_seconds", "HTTP request duration", ["method", "path"])

ALL_METRICS = [
    search_queries_total,
    orders_placed_total,
    http_requests_total,
    http_request_duration,
]


def collect_all() -> str:
    """Collect all metrics in Prometheus text format."""
    return "\n\n".join(m.collect() for m in ALL_METRICS) + "\n"
