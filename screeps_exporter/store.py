"""Owned Prometheus registry holding every exported series.

One writer (the collection loop) and any number of concurrent scrapes.
``publish`` clears each gauge family before repopulating it, so a scrape that
lands in between can see a family briefly empty.
"""

import logging
from typing import Dict, Iterable, Optional

from prometheus_client import CollectorRegistry, Gauge, Histogram, start_http_server

from . import metrics
from .metrics import Labels, MetricWrite

log = logging.getLogger(__name__)


class MetricStore:
    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else CollectorRegistry()
        self._gauges: Dict[str, Gauge] = {
            name: Gauge(name, help_text, list(labelnames), registry=self.registry)
            for name, (help_text, labelnames) in metrics.GAUGES.items()
        }
        self.processing_time = Histogram(
            metrics.PROCESSING_TIME,
            "Time it has taken to process stats",
            buckets=metrics.PROCESSING_TIME_BUCKETS,
            registry=self.registry,
        )

    def _gauge(self, name: str) -> Gauge:
        try:
            return self._gauges[name]
        except KeyError:
            raise KeyError(f"unknown gauge {name!r}") from None

    def reset(self, name: str) -> None:
        self._gauge(name).clear()

    def set(self, name: str, labels: Labels, value: float) -> None:
        self._gauge(name).labels(**labels).set(value)

    def publish(self, writes: Iterable[MetricWrite]) -> None:
        for name in self._gauges:
            self.reset(name)
        count = 0
        for write in writes:
            self.set(write.name, write.labels, write.value)
            count += 1
        log.debug(f"Published {count} series")

    def observe_processing_time(self, seconds: float) -> None:
        self.processing_time.observe(seconds)

    def value(self, name: str, labels: Optional[Labels] = None) -> Optional[float]:
        return self.registry.get_sample_value(name, labels or {})

    def serve(self, port: int, addr: str = "0.0.0.0") -> None:
        start_http_server(port, addr=addr, registry=self.registry)
        log.info(f"Serving metrics on {addr}:{port}/metrics")
