import logging
import threading
from typing import Dict

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, start_http_server

from .metrics import Metrics


logger = logging.getLogger(__name__)


class PrometheusExporter:
    def __init__(self, metrics: Metrics, port: int = 8000, registry: CollectorRegistry = REGISTRY) -> None:
        self.metrics = metrics
        self.port = port
        self.registry = registry
        self._server_thread: threading.Thread | None = None
        self._stop_event = threading.Event()

        self.requests_total = Counter(
            'rtdb_requests_total', 'Total number of REST requests', ['method'], registry=registry
        )
        self.bytes_total = Counter('rtdb_bytes_total', 'Total number of response bytes', registry=registry)
        self.errors_total = Counter('rtdb_errors_total', 'Total number of failed requests', registry=registry)
        self.avg_request_duration_seconds = Gauge(
            'rtdb_avg_request_duration_seconds', 'Average request duration in seconds', registry=registry
        )

        self._last_by_method: Dict[str, int] = {}
        self._last_bytes = 0
        self._last_errors = 0

    def start(self) -> None:
        start_http_server(self.port, registry=self.registry)
        logger.info("Prometheus metrics server started on port %d", self.port)

        self._server_thread = threading.Thread(
            target=self._update_metrics_loop,
            name="prometheus-updater",
            daemon=True
        )
        self._server_thread.start()

    def _update_metrics_loop(self) -> None:
        while not self._stop_event.is_set():
            self._update_metrics()
            self._stop_event.wait(5.0)

    def _update_metrics(self) -> None:
        totals, _ = self.metrics.snapshot()

        for method, count in totals.by_method.items():
            delta = count - self._last_by_method.get(method, 0)
            if delta > 0:
                self.requests_total.labels(method=method).inc(delta)
        bytes_delta = totals.bytes - self._last_bytes
        errors_delta = totals.errors - self._last_errors
        if bytes_delta > 0:
            self.bytes_total.inc(bytes_delta)
        if errors_delta > 0:
            self.errors_total.inc(errors_delta)

        if totals.requests > 0:
            avg_request_ms = totals.request_ms_sum / totals.requests
            self.avg_request_duration_seconds.set(avg_request_ms / 1000.0)

        self._last_by_method = dict(totals.by_method)
        self._last_bytes = totals.bytes
        self._last_errors = totals.errors

    def stop(self) -> None:
        self._stop_event.set()
        if self._server_thread:
            self._server_thread.join(timeout=2.0)
        # flush whatever was recorded since the last tick
        self._update_metrics()
