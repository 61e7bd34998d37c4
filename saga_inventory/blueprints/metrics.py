"""
Prometheus metrics blueprint for observability.

Exposes /metrics with HTTP request metrics plus sale and import counters.
Restrict this endpoint to the local machine or the monitoring network.
"""
from flask import Blueprint, Response, request, g
from prometheus_client import Counter, Histogram, Gauge, generate_latest, CollectorRegistry, CONTENT_TYPE_LATEST
from prometheus_client import multiprocess, REGISTRY
import time
import os

metrics_bp = Blueprint('metrics', __name__)


def _build_registry():
    """Aggregate worker files under PROMETHEUS_MULTIPROC_DIR when set."""
    if os.environ.get('PROMETHEUS_MULTIPROC_DIR'):
        collector_registry = CollectorRegistry()
        multiprocess.MultiProcessCollector(collector_registry)
        return collector_registry, None
    return REGISTRY, REGISTRY


# Metrics are created against _metric_registry; /metrics reads from registry
registry, _metric_registry = _build_registry()

http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'http_status'],
    registry=_metric_registry
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request latency in seconds',
    ['method', 'endpoint'],
    registry=_metric_registry,
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)
)

http_requests_in_flight = Gauge(
    'http_requests_in_flight',
    'Number of HTTP requests currently being processed',
    registry=_metric_registry
)

sales_recorded_total = Counter(
    'sales_recorded_total',
    'Sales committed by the transaction writer',
    registry=_metric_registry
)

import_rows_total = Counter(
    'import_rows_total',
    'CSV import rows by outcome',
    ['resource', 'outcome'],
    registry=_metric_registry
)


def record_import(resource, imported, failed):
    import_rows_total.labels(resource=resource, outcome='imported').inc(imported)
    import_rows_total.labels(resource=resource, outcome='failed').inc(failed)


def setup_metrics_instrumentation(app):
    """Time every request and count it by endpoint and status."""

    @app.before_request
    def start_request_timer():
        g.request_started_at = time.perf_counter()
        http_requests_in_flight.inc()

    @app.after_request
    def observe_request(response):
        started_at = g.pop('request_started_at', None)
        if started_at is None:
            return response

        endpoint = request.endpoint or 'unknown'
        try:
            http_request_duration_seconds.labels(
                method=request.method, endpoint=endpoint
            ).observe(time.perf_counter() - started_at)
            http_requests_total.labels(
                method=request.method, endpoint=endpoint, http_status=response.status_code
            ).inc()
        except ValueError as e:
            app.logger.warning(f"Failed to record metrics: {e}")
        finally:
            http_requests_in_flight.dec()

        return response


@metrics_bp.route('/metrics')
def metrics():
    """Prometheus metrics endpoint (unauthenticated)."""
    return Response(generate_latest(registry), mimetype=CONTENT_TYPE_LATEST)
