import asyncio
import logging

from fastapi import Request
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    GCCollector,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)

logger = logging.getLogger(__name__)


class MetricsRegistry:
    """
    Process-scoped Prometheus registry for the API.

    Holds the request counter, the default process/platform/GC collectors and
    an event loop lag gauge sampled by a background task while the app runs.
    """

    content_type = CONTENT_TYPE_LATEST

    def __init__(
        self,
        refresh_interval: float = 5.0,
        registry: CollectorRegistry | None = None,
        collect_default_metrics: bool = True,
    ):
        self.refresh_interval = refresh_interval
        self.registry = registry or CollectorRegistry()
        self._sampler: asyncio.Task | None = None

        self.http_requests = Counter(
            "http_requests",
            "Total number of HTTP requests",
            ["method", "route", "status_code"],
            registry=self.registry,
        )
        self.event_loop_lag = Gauge(
            "event_loop_lag_seconds",
            "Lag of the asyncio event loop in seconds",
            registry=self.registry,
        )

        if collect_default_metrics:
            ProcessCollector(registry=self.registry)
            PlatformCollector(registry=self.registry)
            GCCollector(registry=self.registry)

    def observe(self, method: str, route: str, status_code: int) -> None:
        self.http_requests.labels(
            method=method, route=route, status_code=str(status_code)
        ).inc()

    def render(self) -> bytes:
        return generate_latest(self.registry)

    def request_count(self) -> float:
        """Sum of the request counter across all label sets."""
        total = 0.0
        for metric in self.http_requests.collect():
            for sample in metric.samples:
                if sample.name == "http_requests_total":
                    total += sample.value
        return total

    async def _sample_event_loop_lag(self):
        loop = asyncio.get_running_loop()
        while True:
            started = loop.time()
            await asyncio.sleep(self.refresh_interval)
            lag = loop.time() - started - self.refresh_interval
            self.event_loop_lag.set(max(lag, 0.0))

    def start(self):
        if self._sampler is not None:
            return
        self._sampler = asyncio.get_running_loop().create_task(
            self._sample_event_loop_lag()
        )
        logger.debug("Event loop lag sampler started")

    async def stop(self):
        if self._sampler is None:
            return
        self._sampler.cancel()
        try:
            await self._sampler
        except asyncio.CancelledError:
            pass
        self._sampler = None
        logger.debug("Event loop lag sampler stopped")


def get_metrics(request: Request) -> MetricsRegistry:
    return request.app.state.metrics
