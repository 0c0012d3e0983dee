"""
Shared metrics configuration for the client cache layer.
"""

from typing import Dict, Any, Optional
import threading

from prometheus_client import Counter, Info, CollectorRegistry

from shared.config import BaseConfig, get_default_config


class MetricsCollector:
    """Centralized metrics collector for the request engine and caches."""

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None, namespace: str = ""):
        self.service_name = service_name
        self.registry = registry
        self.namespace = namespace
        self._metrics: Dict[str, Any] = {}
        self._lock = threading.Lock()
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up request and cache metrics."""
        with self._lock:
            self._metrics["service_info"] = Info(
                "service_info",
                "Service information",
                namespace=self.namespace,
                registry=self.registry
            )
            self._metrics["service_info"].info({
                "service": self.service_name,
                "version": "0.1.0"
            })

            # Request engine
            self._metrics["transport_requests_total"] = Counter(
                "transport_requests_total",
                "Total transport invocations",
                ["method"],
                namespace=self.namespace,
                registry=self.registry
            )

            self._metrics["memo_hits_total"] = Counter(
                "memo_hits_total",
                "Sends answered from an already settled response memo",
                ["method"],
                namespace=self.namespace,
                registry=self.registry
            )

            self._metrics["http_status_errors_total"] = Counter(
                "http_status_errors_total",
                "Total responses with a failure status",
                ["method", "status_code"],
                namespace=self.namespace,
                registry=self.registry
            )

            self._metrics["decode_fallbacks_total"] = Counter(
                "decode_fallbacks_total",
                "Responses returned as raw text after JSON decode failed",
                ["method"],
                namespace=self.namespace,
                registry=self.registry
            )

            # Paginated caches
            self._metrics["page_writes_total"] = Counter(
                "page_writes_total",
                "Total page writes into collections",
                ["schema"],
                namespace=self.namespace,
                registry=self.registry
            )

            self._metrics["predicate_mismatches_total"] = Counter(
                "predicate_mismatches_total",
                "Entities written to a collection they do not belong to",
                ["schema"],
                namespace=self.namespace,
                registry=self.registry
            )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def increment_counter(self, metric_name: str, amount: float = 1, **labels):
        """Increment a counter metric."""
        if metric_name in self._metrics:
            self._metrics[metric_name].labels(**labels).inc(amount)


def get_metrics_collector(
    service_name: str,
    registry: Optional[CollectorRegistry] = None,
    settings: Optional[BaseConfig] = None,
) -> MetricsCollector:
    """Get a metrics collector named under the configured namespace."""
    settings = settings or get_default_config()
    return MetricsCollector(service_name, registry, namespace=settings.metrics_namespace)
