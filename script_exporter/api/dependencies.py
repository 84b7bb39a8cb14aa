from __future__ import annotations

from fastapi import HTTPException, Request, status

from script_exporter.core.metrics import ExporterMetrics
from script_exporter.services.auth_gate import AuthGate
from script_exporter.services.script_registry import ScriptRegistry

NOT_AUTHORIZED = "Not authorized"


def get_registry(request: Request) -> ScriptRegistry:
    return request.app.state.script_registry


def get_metrics(request: Request) -> ExporterMetrics:
    return request.app.state.metrics


def require_probe_auth(request: Request) -> None:
    """Reject the request with 401 unless the authentication gate admits it.

    The response never says which check failed.
    """
    gate: AuthGate = request.app.state.auth_gate
    if gate.authenticate(request):
        return

    headers = None
    if gate.basic_active:
        headers = {"WWW-Authenticate": 'Basic realm="Restricted"'}
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=NOT_AUTHORIZED,
        headers=headers,
    )
