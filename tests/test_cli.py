from __future__ import annotations

from pathlib import Path

import pytest

from script_exporter import cli
from script_exporter.services import token_service
from tests.conftest import SIGNING_KEY


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch: pytest.MonkeyPatch) -> None:
    # main() reconfigures the root logger; keep pytest's handlers intact.
    monkeypatch.setattr(cli, "setup_logging", lambda *a, **kw: None)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(
        "bearerAuth:\n"
        "  active: true\n"
        f"  signingKey: {SIGNING_KEY}\n"
        "scripts:\n"
        "  - name: test\n"
        "    script: /bin/true\n"
    )
    return path


def test_version_prints_build_info(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["--version"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("script_exporter, version ")
    assert "python version:" in out


def test_create_token_prints_valid_token(
    config_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    assert cli.main(["--config.file", str(config_file), "--create-token"]) == 0
    out = capsys.readouterr().out.strip()
    assert out.startswith("Bearer token: ")
    token = out.removeprefix("Bearer token: ")
    assert token_service.decode_token(token, SIGNING_KEY) is not None


def test_create_token_without_signing_key_fails(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("scripts: []\n")
    assert cli.main(["--config.file", str(path), "--create-token"]) == 1
    assert "Bearer token" not in capsys.readouterr().out


def test_bad_config_file_exits_1(tmp_path: Path) -> None:
    assert cli.main(["--config.file", str(tmp_path / "missing.yaml")]) == 1


def test_bad_listen_address_exits_1(config_file: Path) -> None:
    assert cli.main(["--config.file", str(config_file), "--web.listen-address", "nope"]) == 1


def test_serve_passes_listen_address_and_tls(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("tls:\n  active: true\n  crt: /certs/s.crt\n  key: /certs/s.key\n")
    calls: list[dict] = []
    monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kw: calls.append(kw))

    assert cli.main(["--config.file", str(path), "--web.listen-address", "127.0.0.1:9999"]) == 0

    assert len(calls) == 1
    assert calls[0]["host"] == "127.0.0.1"
    assert calls[0]["port"] == 9999
    assert calls[0]["ssl_certfile"] == "/certs/s.crt"
    assert calls[0]["ssl_keyfile"] == "/certs/s.key"


def test_serve_without_tls(config_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict] = []
    monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kw: calls.append(kw))

    assert cli.main(["--config.file", str(config_file)]) == 0

    assert calls[0]["port"] == 9469
    assert calls[0]["ssl_certfile"] is None
