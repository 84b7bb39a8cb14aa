from __future__ import annotations

import base64
import stat
import sys
from collections.abc import Callable
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from prometheus_client import CollectorRegistry

# Ensure repo root is on sys.path so `import script_exporter` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from script_exporter.main import create_app  # noqa: E402
from script_exporter.models.exporter_config import ExporterConfig  # noqa: E402
from script_exporter.version import BuildInfo  # noqa: E402

SIGNING_KEY = "test-signing-key-0123456789abcdef"
OTHER_SIGNING_KEY = "another-signing-key-fedcba9876543210"

TEST_BUILD_INFO = BuildInfo(
    version="0.0.0-test",
    revision="abc123",
    branch="main",
    python_version="3.12.0",
    build_date="2026-01-01",
    build_user="ci",
)

SAMPLE_OUTPUT = """\
# HELP test_value A test value.
# TYPE test_value gauge
test_value{label="a"} 1
test_value{label="b"} 2,5

not a metric line
test_missing_labels 3
"""

MakeScript = Callable[[str, str], str]


@pytest.fixture
def make_script(tmp_path: Path) -> MakeScript:
    """Write an executable /bin/sh script and return its path."""

    def _make(name: str, body: str) -> str:
        path = tmp_path / f"{name}.sh"
        path.write_text(f"#!/bin/sh\n{body}\n")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(path)

    return _make


@pytest.fixture
def scripts(make_script: MakeScript, tmp_path: Path) -> list[dict[str, str]]:
    sample = tmp_path / "sample_output.txt"
    sample.write_text(SAMPLE_OUTPUT)
    return [
        {"name": "sample", "script": make_script("sample", f"cat {sample}")},
        {"name": "fail", "script": make_script("fail", "echo 'partial 1'\nexit 3")},
        {
            "name": "args",
            "script": make_script("args", 'echo "arg_count{} $#"\necho "first_arg{v=\\"$1\\"} 1"'),
        },
        {"name": "missing", "script": str(tmp_path / "does-not-exist.sh")},
    ]


def make_config(
    scripts: list[dict[str, str]],
    *,
    basic: bool = False,
    bearer: bool = False,
) -> ExporterConfig:
    return ExporterConfig.model_validate(
        {
            "basicAuth": {"active": basic, "username": "admin", "password": "s3cret"},
            "bearerAuth": {"active": bearer, "signingKey": SIGNING_KEY},
            "scripts": scripts,
        }
    )


def make_client(config: ExporterConfig) -> TestClient:
    app = create_app(config, registry=CollectorRegistry(), build_info=TEST_BUILD_INFO)
    return TestClient(app)


def basic_header(username: str = "admin", password: str = "s3cret") -> str:
    encoded = base64.b64encode(f"{username}:{password}".encode()).decode()
    return f"Basic {encoded}"


def get_sample(client: TestClient, name: str, labels: dict | None = None) -> float:
    """Read a self-metric from the app's own registry."""
    registry = client.app.state.metrics.registry  # type: ignore[attr-defined]
    value = registry.get_sample_value(name, labels=labels or {})
    return value if value is not None else 0.0


@pytest.fixture
def client(scripts: list[dict[str, str]]) -> TestClient:
    return make_client(make_config(scripts))
