"""Lightweight observability helpers (request logging + metrics)."""

from __future__ import annotations

import json
import logging
import time
import uuid
from collections import defaultdict
from contextvars import ContextVar
from threading import Lock
from typing import Iterable, Protocol

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from fittrack.core.config import get_settings

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
logger = logging.getLogger(__name__)

DEFAULT_BUCKETS_MS = (50, 100, 250, 500, 1000, 2500, 5000, 10000)


def get_request_id() -> str | None:
    """Return the current request id if set by middleware."""
    return request_id_ctx.get()


class MetricsBackend(Protocol):
    """Metrics backend interface."""

    def observe_request(
        self,
        method: str,
        path: str,
        status_code: int,
        duration_ms: float,
    ) -> None:
        ...

    def observe_ingest(self, endpoint: str, metric: str, success: bool) -> None:
        ...

    def observe_key_verification(self, outcome: str) -> None:
        ...

    def render_prometheus(self) -> str:
        ...


class MetricsCollector:
    """In-process metrics collector with Prometheus text output."""

    def __init__(self, buckets_ms: Iterable[int] | None = None) -> None:
        self._lock = Lock()
        self._request_counts: dict[tuple[str, str, str], int] = defaultdict(int)
        self._duration_sum_ms: dict[tuple[str, str], float] = defaultdict(float)
        self._duration_count: dict[tuple[str, str], int] = defaultdict(int)
        self._duration_buckets: dict[tuple[str, str], dict[str, int]] = defaultdict(
            lambda: defaultdict(int)
        )
        self._ingest_counts: dict[tuple[str, str, str], int] = defaultdict(int)
        self._key_verifications: dict[str, int] = defaultdict(int)
        self._buckets_ms = list(buckets_ms or DEFAULT_BUCKETS_MS)

    def observe_request(
        self,
        method: str,
        path: str,
        status_code: int,
        duration_ms: float,
    ) -> None:
        """Record a single request observation."""
        count_key = (method, path, str(status_code))
        duration_key = (method, path)
        bucket_key = self._bucket_for(duration_ms)

        with self._lock:
            self._request_counts[count_key] += 1
            self._duration_sum_ms[duration_key] += duration_ms
            self._duration_count[duration_key] += 1
            self._duration_buckets[duration_key][bucket_key] += 1

    def observe_ingest(self, endpoint: str, metric: str, success: bool) -> None:
        """Record one metric write attempted by an ingestion endpoint."""
        status = "success" if success else "error"
        with self._lock:
            self._ingest_counts[(endpoint, metric, status)] += 1

    def observe_key_verification(self, outcome: str) -> None:
        """Record an API key verification outcome (valid | rejected)."""
        with self._lock:
            self._key_verifications[outcome] += 1

    def ingest_count(self, endpoint: str, metric: str, success: bool = True) -> int:
        status = "success" if success else "error"
        with self._lock:
            return self._ingest_counts.get((endpoint, metric, status), 0)

    def render_prometheus(self) -> str:
        """Render metrics in Prometheus text format."""
        lines: list[str] = [
            "# HELP http_requests_total Total HTTP requests",
            "# TYPE http_requests_total counter",
        ]
        with self._lock:
            for (method, path, status), count in sorted(self._request_counts.items()):
                lines.append(
                    f'http_requests_total{{method="{method}",path="{path}",status="{status}"}} {count}'
                )

            lines.extend(
                [
                    "# HELP http_request_duration_ms Request duration in milliseconds",
                    "# TYPE http_request_duration_ms histogram",
                ]
            )
            for (method, path), total in sorted(self._duration_sum_ms.items()):
                labels = f'method="{method}",path="{path}"'
                buckets = self._duration_buckets[(method, path)]
                cumulative = 0
                for bound in self._buckets_ms:
                    cumulative += buckets.get(str(bound), 0)
                    lines.append(
                        f'http_request_duration_ms_bucket{{{labels},le="{bound}"}} {cumulative}'
                    )
                cumulative += buckets.get("+Inf", 0)
                lines.append(f'http_request_duration_ms_bucket{{{labels},le="+Inf"}} {cumulative}')
                lines.append(f"http_request_duration_ms_sum{{{labels}}} {total:.2f}")
                lines.append(
                    f"http_request_duration_ms_count{{{labels}}} {self._duration_count[(method, path)]}"
                )

            lines.extend(
                [
                    "# HELP ingest_records_total Metric writes attempted by ingestion endpoints",
                    "# TYPE ingest_records_total counter",
                ]
            )
            for (endpoint, metric, status), count in sorted(self._ingest_counts.items()):
                lines.append(
                    "ingest_records_total"
                    f'{{endpoint="{endpoint}",metric="{metric}",status="{status}"}} {count}'
                )

            lines.extend(
                [
                    "# HELP api_key_verifications_total API key verification outcomes",
                    "# TYPE api_key_verifications_total counter",
                ]
            )
            for outcome, count in sorted(self._key_verifications.items()):
                lines.append(f'api_key_verifications_total{{outcome="{outcome}"}} {count}')
        return "\n".join(lines) + "\n"

    def _bucket_for(self, duration_ms: float) -> str:
        for bound in self._buckets_ms:
            if duration_ms <= bound:
                return str(bound)
        return "+Inf"


class PrometheusMetrics:
    """Prometheus client-based metrics backend."""

    def __init__(self, buckets_ms: Iterable[int]) -> None:
        self._registry = CollectorRegistry()

        self._http_requests_total = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "path", "status"],
            registry=self._registry,
        )
        self._http_request_duration_ms = Histogram(
            "http_request_duration_ms",
            "Request duration in milliseconds",
            ["method", "path"],
            buckets=list(buckets_ms),
            registry=self._registry,
        )
        self._ingest_records_total = Counter(
            "ingest_records_total",
            "Metric writes attempted by ingestion endpoints",
            ["endpoint", "metric", "status"],
            registry=self._registry,
        )
        self._api_key_verifications_total = Counter(
            "api_key_verifications_total",
            "API key verification outcomes",
            ["outcome"],
            registry=self._registry,
        )

    def observe_request(
        self,
        method: str,
        path: str,
        status_code: int,
        duration_ms: float,
    ) -> None:
        self._http_requests_total.labels(method, path, str(status_code)).inc()
        self._http_request_duration_ms.labels(method, path).observe(duration_ms)

    def observe_ingest(self, endpoint: str, metric: str, success: bool) -> None:
        status = "success" if success else "error"
        self._ingest_records_total.labels(endpoint, metric, status).inc()

    def observe_key_verification(self, outcome: str) -> None:
        self._api_key_verifications_total.labels(outcome).inc()

    def render_prometheus(self) -> str:
        return generate_latest(self._registry).decode("utf-8")


_metrics_backend: MetricsBackend | None = None


def get_metrics_backend() -> MetricsBackend:
    """Return a cached metrics backend instance."""
    global _metrics_backend
    if _metrics_backend is None:
        settings = get_settings()
        _metrics_backend = _build_metrics_backend(settings.metrics_backend)
    return _metrics_backend


def _build_metrics_backend(backend: str) -> MetricsBackend:
    if backend == "prometheus":
        return PrometheusMetrics(DEFAULT_BUCKETS_MS)
    if backend != "inmemory":
        logger.warning(f"Unknown metrics backend {backend!r}, using in-memory metrics")
    return MetricsCollector(DEFAULT_BUCKETS_MS)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Attach request_id, log request/response, and emit metrics."""

    def __init__(
        self,
        app: ASGIApp,
        metrics: MetricsBackend | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(app)
        self.metrics = metrics or get_metrics_backend()
        self.logger = logger or logging.getLogger("fittrack.request")

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        token = request_id_ctx.set(request_id)
        request.state.request_id = request_id

        start = time.perf_counter()
        response: Response | None = None
        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            status_code = response.status_code if response else 500

            if response is not None:
                response.headers["X-Request-ID"] = request_id

            route = request.scope.get("route")
            route_path = getattr(route, "path", None)
            # Unmatched paths share one label
            path = route_path or "/__unknown__"

            self.metrics.observe_request(request.method, path, status_code, duration_ms)

            # Never log query strings; they may carry credentials
            log_payload = {
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "route": route_path,
                "status_code": status_code,
                "elapsed_ms": round(duration_ms, 2),
                "client": request.client.host if request.client else None,
            }
            self.logger.info(json.dumps(log_payload))
            request_id_ctx.reset(token)
