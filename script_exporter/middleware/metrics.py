"""Prometheus instrumentation for /probe.

Two layers, added as separate middlewares so each has one job:

  HTTPMetricsMiddleware (outer)
    http_requests_total and http_requests_duration_seconds, labeled by
    result code and method.  Counts every probe request, including
    ones rejected with 400/401.

  ScriptMetricsMiddleware (inner)
    scripts_requests_inflight, scripts_duration_seconds and
    scripts_requests_total, labeled by the ``script`` query parameter.
    Requests without a script name are passed through untouched; the
    probe handler rejects them.

No global in-flight gauge is kept.
"""

from __future__ import annotations

import time
from collections.abc import Collection

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from script_exporter.core.metrics import ExporterMetrics
from script_exporter.models.probe import first_value

INSTRUMENTED_PATHS = ("/probe",)


class HTTPMetricsMiddleware(BaseHTTPMiddleware):
    """Count and time probe requests by HTTP result code and method."""

    def __init__(
        self,
        app: ASGIApp,
        metrics: ExporterMetrics,
        paths: Collection[str] = INSTRUMENTED_PATHS,
    ) -> None:
        super().__init__(app)
        self.metrics = metrics
        self.paths = frozenset(paths)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path not in self.paths:
            return await call_next(request)

        start = time.monotonic()
        status_code = "500"

        try:
            response = await call_next(request)
            status_code = str(response.status_code)
        finally:
            labels = {"code": status_code, "method": request.method.lower()}
            self.metrics.http_duration.labels(**labels).observe(
                time.monotonic() - start
            )
            self.metrics.http_requests.labels(**labels).inc()

        return response


class ScriptMetricsMiddleware(BaseHTTPMiddleware):
    """Per-script in-flight gauge, request counter and duration summary."""

    def __init__(
        self,
        app: ASGIApp,
        metrics: ExporterMetrics,
        paths: Collection[str] = INSTRUMENTED_PATHS,
    ) -> None:
        super().__init__(app)
        self.metrics = metrics
        self.paths = frozenset(paths)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        script = first_value(request.query_params, "script")
        if request.url.path not in self.paths or not script:
            return await call_next(request)

        # track_inprogress() decrements on every exit path, exceptions included.
        with self.metrics.script_inflight.labels(script=script).track_inprogress():
            start = time.monotonic()
            response = await call_next(request)
            self.metrics.script_duration.labels(script=script).observe(
                time.monotonic() - start
            )
            self.metrics.script_requests.labels(script=script).inc()

        return response
