"""Command-line entrypoint.

RUN:  script-exporter --config.file config.yaml
      python -m script_exporter.cli --create-token

Flag defaults come from the environment (see core/config.py), so the
same image can be configured either way.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

import uvicorn

from script_exporter.core.config import SETTINGS, split_listen_address
from script_exporter.core.logging import setup_logging
from script_exporter.main import create_app
from script_exporter.middleware.request_context import install_log_filter
from script_exporter.models.exporter_config import load_exporter_config
from script_exporter.services.token_service import TokenCreationError, create_token
from script_exporter.version import BUILD_INFO

PROGRAM = "script_exporter"

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROGRAM,
        description="Prometheus exporter that runs scripts and republishes their output.",
    )
    parser.add_argument(
        "--web.listen-address",
        dest="listen_address",
        default=SETTINGS.listen_address,
        help="Address to listen on for web interface and telemetry.",
    )
    parser.add_argument(
        "--config.file",
        dest="config_file",
        default=SETTINGS.config_file,
        help="Configuration file in YAML format.",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information.",
    )
    parser.add_argument(
        "--create-token",
        action="store_true",
        help="Create bearer token for authentication.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entrypoint."""
    args = build_parser().parse_args(argv)

    setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
    install_log_filter()

    if args.version:
        print(BUILD_INFO.describe(PROGRAM))
        return 0

    try:
        host, port = split_listen_address(args.listen_address)
        config = load_exporter_config(args.config_file)
    except ValueError as e:
        logger.error("%s", e)
        return 1

    if args.create_token:
        try:
            token = create_token(config.bearer_auth.signing_key)
        except TokenCreationError as e:
            logger.error("Bearer token could not be created: %s", e)
            return 1
        print(f"Bearer token: {token}")
        return 0

    logger.info("Starting server %s", BUILD_INFO.info())
    logger.info("Build context %s", BUILD_INFO.build_context())
    logger.info("%s listening on %s", PROGRAM, args.listen_address)

    app = create_app(config)
    uvicorn.run(
        app,
        host=host,
        port=port,
        ssl_certfile=config.tls.crt if config.tls.active else None,
        ssl_keyfile=config.tls.key if config.tls.active else None,
        log_config=None,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
