from __future__ import annotations

import html

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from script_exporter.version import BuildInfo

router = APIRouter(tags=["index"])


def render_index(build: BuildInfo) -> str:
    fields = (
        ("version", build.version),
        ("branch", build.branch),
        ("revision", build.revision),
        ("python version", build.python_version),
        ("build user", build.build_user),
        ("build date", build.build_date),
    )
    items = "\n".join(
        f"<li>{label}: {html.escape(value)}</li>" for label, value in fields
    )
    return f"""<html>
<head><title>Script Exporter</title></head>
<body>
<h1>Script Exporter</h1>
<p><a href='/metrics'>Metrics</a></p>
<p><a href='/probe'>Probe</a></p>
<p><ul>
{items}
</ul></p>
</body>
</html>"""


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def index(request: Request) -> HTMLResponse:
    return HTMLResponse(render_index(request.app.state.build_info))
