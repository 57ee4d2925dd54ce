from __future__ import annotations

from collections import defaultdict
from dataclasses import asdict, dataclass
from typing import Protocol

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from prometheus_client import CollectorRegistry, Counter, generate_latest

OUTCOME_COMMITTED = "committed"
OUTCOME_DISCARDED = "discarded"
OUTCOME_FAILED = "failed"

_configured = False


@dataclass(frozen=True)
class FetchOutcomeMetric:
    controller: str
    outcome: str


class ControllerMetricCollector(Protocol):
    def observe(self, metric: FetchOutcomeMetric) -> None: ...


class InMemoryControllerMetricsCollector(ControllerMetricCollector):
    def __init__(self) -> None:
        self._metrics: list[FetchOutcomeMetric] = []
        self.totals: dict[tuple[str, str], int] = defaultdict(int)

    def observe(self, metric: FetchOutcomeMetric) -> None:
        self._metrics.append(metric)
        self.totals[(metric.controller, metric.outcome)] += 1

    def snapshot(self) -> list[dict]:
        return [asdict(item) for item in self._metrics]


class PrometheusControllerMetricsCollector(ControllerMetricCollector):
    def __init__(self) -> None:
        self._registry = CollectorRegistry()
        self._fetch_counter = Counter(
            "admin_console_fetch_total",
            "Controller fetches by outcome",
            labelnames=("controller", "outcome"),
            registry=self._registry,
        )

    def observe(self, metric: FetchOutcomeMetric) -> None:
        self._fetch_counter.labels(metric.controller, metric.outcome).inc()

    def render(self) -> str:
        return generate_latest(self._registry).decode("utf-8")


class CompositeControllerMetricsCollector(ControllerMetricCollector):
    def __init__(self, collectors: list[ControllerMetricCollector]) -> None:
        self._collectors = collectors

    def observe(self, metric: FetchOutcomeMetric) -> None:
        for collector in self._collectors:
            collector.observe(metric)


def configure_otel(service_name: str) -> None:
    global _configured
    if _configured:
        return
    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    trace.set_tracer_provider(provider)
    _configured = True
