"""Prometheus metrics definitions and helpers.

Tracks calls made to the external weather and photo-search services.
"""

import time
from contextlib import contextmanager
from typing import Iterator, Optional

from prometheus_client import (
    Counter,
    Histogram,
    REGISTRY,
    CollectorRegistry,
)


class ForecastMetrics:
    """Outbound call metrics."""

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        """Initialize metrics.

        Args:
            registry: Prometheus registry to use
        """
        self.external_requests = Counter(
            "fashion_external_requests_total",
            "Total number of requests sent to external services",
            ["service", "outcome"],
            registry=registry,
        )

        self.external_request_duration = Histogram(
            "fashion_external_request_duration_seconds",
            "Time spent waiting on external services",
            ["service"],
            buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
            registry=registry,
        )

        self.keyword_fallbacks = Counter(
            "fashion_keyword_fallbacks_total",
            "Weather descriptions missing from the keyword table",
            registry=registry,
        )

    @contextmanager
    def track_external_call(self, service: str) -> Iterator[None]:
        """Time an outbound call and count its outcome.

        Args:
            service: External service label (weather, photos)
        """
        start = time.perf_counter()
        try:
            yield
        except Exception:
            self.external_requests.labels(service=service, outcome="error").inc()
            raise
        else:
            self.external_requests.labels(service=service, outcome="success").inc()
        finally:
            self.external_request_duration.labels(service=service).observe(
                time.perf_counter() - start
            )


_metrics: Optional[ForecastMetrics] = None


def get_metrics() -> ForecastMetrics:
    """Return the process-wide metrics bound to the default registry."""
    global _metrics
    if _metrics is None:
        _metrics = ForecastMetrics()
    return _metrics
