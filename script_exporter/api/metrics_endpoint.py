"""Exporter self-metrics endpoint.

Serves the app's own registry (HTTP and per-script request metrics,
build info, process metrics) in text exposition format.  Probe results
are not here; they are only ever returned by /probe.

Not behind the authentication gate.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from script_exporter.api.dependencies import get_metrics
from script_exporter.core.metrics import ExporterMetrics

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics(
    exporter_metrics: Annotated[ExporterMetrics, Depends(get_metrics)],
) -> Response:
    """Expose the exporter's Prometheus metrics in text exposition format."""
    return Response(
        content=generate_latest(exporter_metrics.registry),
        media_type=CONTENT_TYPE_LATEST,
    )
