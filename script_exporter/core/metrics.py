"""Exporter self-metrics.

Every collector the exporter publishes about itself lives here, in one
inventory.  Unlike probe results (which are rendered straight into the
/probe response body), these are served from /metrics.

Two namespaces are used so internal metrics never collide with probe
results, which are always named ``script_*``:

  http_*     requests to /probe by HTTP result code and method
  scripts_*  per-script requests, in-flight probes, durations, build info

The collectors are bound to an explicit CollectorRegistry rather than
prometheus_client's global default, so each app instance (and each
test) owns an isolated set of series.
"""

from __future__ import annotations

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    PlatformCollector,
    ProcessCollector,
    Summary,
)

from script_exporter.version import BuildInfo


class ExporterMetrics:
    """All exporter collectors, registered on one registry."""

    def __init__(self, registry: CollectorRegistry, build_info: BuildInfo) -> None:
        self.registry = registry

        # -------------------------------------------------------------------
        # Generic HTTP layer (HTTPMetricsMiddleware)
        # -------------------------------------------------------------------
        self.http_requests = Counter(
            "requests_total",
            "Total requests for scripts by HTTP result code and method.",
            ["code", "method"],
            namespace="http",
            registry=registry,
        )
        self.http_duration = Summary(
            "requests_duration_seconds",
            "A summary of request durations by HTTP result code and method.",
            ["code", "method"],
            namespace="http",
            registry=registry,
        )

        # -------------------------------------------------------------------
        # Per-script layer (ScriptMetricsMiddleware)
        # -------------------------------------------------------------------
        # Keyed by script name only: failed and successful probes land in
        # the same series.  The outcome is script_success in the body.
        self.script_requests = Counter(
            "requests_total",
            "Total requests to a script",
            ["script"],
            namespace="scripts",
            registry=registry,
        )
        self.script_inflight = Gauge(
            "requests_inflight",
            "Number of requests in flight to a script",
            ["script"],
            namespace="scripts",
            registry=registry,
        )
        self.script_duration = Summary(
            "duration_seconds",
            "A summary of request durations to a script",
            ["script"],
            namespace="scripts",
            registry=registry,
        )

        # Sample lines the transformer rejected.  Callers never see them,
        # so this is the only place a misbehaving script shows up.
        self.dropped_lines = Counter(
            "output_lines_dropped_total",
            "Script output lines dropped because they were not valid samples",
            ["script"],
            namespace="scripts",
            registry=registry,
        )

        self.build_info = Gauge(
            "build_info",
            "A metric with a constant '1' value labeled by build information.",
            list(build_info.labels()),
            namespace="scripts",
            registry=registry,
        )
        self.build_info.labels(**build_info.labels()).set(1)


def create_registry() -> CollectorRegistry:
    """A fresh registry carrying the standard process and platform collectors."""
    registry = CollectorRegistry()
    ProcessCollector(registry=registry)
    PlatformCollector(registry=registry)
    return registry
