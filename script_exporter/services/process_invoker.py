"""Run a probe script as a child process and capture its stdout.

No timeout is applied: a hung script holds its request (and
the worker thread serving it) until the script exits.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable, Sequence

logger = logging.getLogger(__name__)

Runner = Callable[..., subprocess.CompletedProcess[str]]


class ScriptExecutionError(Exception):
    """The script could not be started or exited with a non-zero status."""

    def __init__(self, argv: Sequence[str], reason: str) -> None:
        super().__init__(f"{argv[0] if argv else '<empty>'}: {reason}")
        self.argv = tuple(argv)
        self.reason = reason


def run_script(argv: Sequence[str], runner: Runner = subprocess.run) -> str:
    """Execute *argv* and return everything it wrote to stdout.

    stderr is captured separately and only logged.  Raises
    ScriptExecutionError on launch failure or non-zero exit; partial
    output from a failed run is discarded.
    """
    if not argv:
        raise ScriptExecutionError(argv, "empty command line")

    try:
        result = runner(
            list(argv),
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            errors="replace",
            check=False,
        )
    except OSError as e:
        raise ScriptExecutionError(argv, e.strerror or str(e)) from e

    if result.returncode != 0:
        if result.stderr:
            logger.debug("stderr from %s: %s", argv[0], result.stderr.strip())
        raise ScriptExecutionError(argv, f"exit status {result.returncode}")

    return result.stdout
