"""GET /probe: run a registered script and republish its output.

The response body always starts with two synthetic gauges:

  script_success{} 0|1
  script_duration_seconds{} <seconds>

followed, on success and unless ``output=ignore``, by the script's own
output after prefixing and validation.  A script that fails to run is a
failed probe, not a failed HTTP request: the status stays 200.

The route is a plain ``def`` so FastAPI runs it in its threadpool; the
child process blocks that worker thread, not the event loop.
"""

from __future__ import annotations

import logging
import time
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse

from script_exporter.api.dependencies import get_metrics, get_registry, require_probe_auth
from script_exporter.core.metrics import ExporterMetrics
from script_exporter.models.probe import ProbeRequest
from script_exporter.services.metric_transformer import transform_output
from script_exporter.services.process_invoker import ScriptExecutionError, run_script
from script_exporter.services.script_registry import ScriptRegistry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["probe"])

NAMESPACE = "script"
SUCCESS_HELP = f"# HELP {NAMESPACE}_success Script exit status (0 = error, 1 = success)."
SUCCESS_TYPE = f"# TYPE {NAMESPACE}_success gauge"
DURATION_HELP = f"# HELP {NAMESPACE}_duration_seconds Script execution time, in seconds."
DURATION_TYPE = f"# TYPE {NAMESPACE}_duration_seconds gauge"


def render_result(success: bool, duration: float, output: str = "") -> str:
    """Synthetic success/duration lines, then any transformed output."""
    return (
        f"{SUCCESS_HELP}\n"
        f"{SUCCESS_TYPE}\n"
        f"{NAMESPACE}_success{{}} {int(success)}\n"
        f"{DURATION_HELP}\n"
        f"{DURATION_TYPE}\n"
        f"{NAMESPACE}_duration_seconds{{}} {duration:f}\n"
        f"{output}"
    )


@router.get(
    "/probe",
    response_class=PlainTextResponse,
    dependencies=[Depends(require_probe_auth)],
)
def probe(
    request: Request,
    registry: Annotated[ScriptRegistry, Depends(get_registry)],
    metrics: Annotated[ExporterMetrics, Depends(get_metrics)],
) -> PlainTextResponse:
    start = time.monotonic()
    params = ProbeRequest.from_query(request.query_params)

    if not params.script:
        logger.warning("Script parameter is missing")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Script parameter is missing",
        )

    command = registry.resolve(params.script)
    if command is None:
        logger.warning("Script not found: %s", params.script)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Script not found",
        )

    try:
        raw_output = run_script(command + params.args)
    except ScriptExecutionError as e:
        logger.warning("Script failed: script=%s %s", params.script, e)
        return PlainTextResponse(render_result(False, time.monotonic() - start))

    if params.ignore_output:
        return PlainTextResponse(render_result(True, time.monotonic() - start))

    result = transform_output(raw_output, params.prefix)
    if result.dropped:
        metrics.dropped_lines.labels(script=params.script).inc(result.dropped)
        logger.debug(
            "Dropped %d invalid output line(s) from script=%s",
            result.dropped,
            params.script,
        )

    return PlainTextResponse(
        render_result(True, time.monotonic() - start, result.text)
    )
