"""OpenTelemetry adapter for repository metrics.

Counters: posts.create / posts.update / posts.delete (tag: outcome),
posts.compensation (tag: result). Histogram: posts.content_bytes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from opentelemetry import metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import ConsoleMetricExporter, PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource

from postvault.application.ports import TelemetryPort

logger = logging.getLogger(__name__)


@dataclass
class OtelConfig:
    """Configuration for OpenTelemetry."""

    service_name: str = "postvault"
    otlp_endpoint: str | None = None  # e.g., "http://localhost:4317"
    environment: str = "production"
    enable_console: bool = False


class OpenTelemetryAdapter(TelemetryPort):
    """Vendor-neutral metrics through the OpenTelemetry SDK.

    Instruments are created lazily on first use. Recording never raises into
    the repository: a failing instrument is logged and skipped.
    """

    def __init__(self, cfg: OtelConfig, provider: MeterProvider | None = None) -> None:
        self._cfg = cfg
        self._provider = provider or self._build_provider(cfg)
        self._meter = self._provider.get_meter(__name__)
        self._counters: dict[str, Any] = {}
        self._histograms: dict[str, Any] = {}

    @staticmethod
    def _build_provider(cfg: OtelConfig) -> MeterProvider:
        resource = Resource.create(
            {
                "service.name": cfg.service_name,
                "deployment.environment": cfg.environment,
            }
        )

        readers = []
        if cfg.otlp_endpoint:
            from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter

            readers.append(PeriodicExportingMetricReader(OTLPMetricExporter(endpoint=cfg.otlp_endpoint)))
        if cfg.enable_console:
            readers.append(PeriodicExportingMetricReader(ConsoleMetricExporter()))

        provider = MeterProvider(resource=resource, metric_readers=readers)
        metrics.set_meter_provider(provider)
        return provider

    def incr(self, name: str, tags: dict[str, Any] | None = None) -> None:
        try:
            if name not in self._counters:
                self._counters[name] = self._meter.create_counter(
                    name=name, description=f"Counter for {name}"
                )
            self._counters[name].add(1, attributes=tags or {})
        except Exception:
            logger.debug("counter %s not recorded", name, exc_info=True)

    def observe(self, name: str, value: float, tags: dict[str, Any] | None = None) -> None:
        try:
            if name not in self._histograms:
                self._histograms[name] = self._meter.create_histogram(
                    name=name, description=f"Histogram for {name}"
                )
            self._histograms[name].record(value, attributes=tags or {})
        except Exception:
            logger.debug("histogram %s not recorded", name, exc_info=True)

    def shutdown(self) -> None:
        self._provider.shutdown()


class NoopTelemetry(TelemetryPort):
    """Telemetry sink used when TELEMETRY_ENABLED is false."""

    def incr(self, name: str, tags: dict[str, Any] | None = None) -> None:
        pass

    def observe(self, name: str, value: float, tags: dict[str, Any] | None = None) -> None:
        pass
