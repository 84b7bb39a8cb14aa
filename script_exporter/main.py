from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from prometheus_client import CollectorRegistry
from starlette.exceptions import HTTPException as StarletteHTTPException

from script_exporter.api.index import router as index_router
from script_exporter.api.metrics_endpoint import router as metrics_router
from script_exporter.api.probe import router as probe_router
from script_exporter.core.metrics import ExporterMetrics, create_registry
from script_exporter.middleware.metrics import HTTPMetricsMiddleware, ScriptMetricsMiddleware
from script_exporter.middleware.request_context import RequestContextMiddleware
from script_exporter.models.exporter_config import ExporterConfig
from script_exporter.services.auth_gate import AuthGate
from script_exporter.services.script_registry import ScriptRegistry
from script_exporter.version import BUILD_INFO, BuildInfo

logger = logging.getLogger(__name__)


async def _plain_text_http_error(
    _request: Request, exc: StarletteHTTPException
) -> PlainTextResponse:
    # Exporter clients are scrapers; every error body is plain text.
    return PlainTextResponse(
        str(exc.detail),
        status_code=exc.status_code,
        headers=exc.headers,
    )


def create_app(
    config: ExporterConfig,
    *,
    registry: CollectorRegistry | None = None,
    build_info: BuildInfo = BUILD_INFO,
) -> FastAPI:
    """Build the exporter app around a loaded configuration.

    Pass a fresh *registry* to isolate self-metrics (tests do this).
    """
    metrics = ExporterMetrics(
        registry if registry is not None else create_registry(), build_info
    )

    app = FastAPI(
        title="script-exporter",
        version=build_info.version,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.script_registry = ScriptRegistry.from_config(config)
    app.state.auth_gate = AuthGate.from_config(config)
    app.state.metrics = metrics
    app.state.build_info = build_info

    app.add_exception_handler(StarletteHTTPException, _plain_text_http_error)

    # Last-added runs first (outermost):
    # RequestContext → HTTP metrics → per-script metrics → route (auth → probe)
    # Authentication is a route dependency, so rejected probes are still
    # counted by both metric layers.
    app.add_middleware(ScriptMetricsMiddleware, metrics=metrics)
    app.add_middleware(HTTPMetricsMiddleware, metrics=metrics)
    app.add_middleware(RequestContextMiddleware)

    app.include_router(index_router)
    app.include_router(metrics_router)
    app.include_router(probe_router)

    logger.debug(
        "App created  scripts=%d auth=%s",
        len(app.state.script_registry),
        ",".join(v.scheme for v in app.state.auth_gate.verifiers) or "none",
    )
    return app
