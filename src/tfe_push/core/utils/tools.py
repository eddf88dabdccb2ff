"""Helpers for the external binaries the pipeline shells out to."""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Sequence

from tfe_push.core.exceptions import MissingExternalToolError

log = logging.getLogger(__name__)


def require_tools(*tools: str) -> None:
    """
    Check that every named binary is on PATH.

    Args:
        tools: Binary names, e.g. ``"tar"``, ``"gzip"``, ``"git"``

    Raises:
        MissingExternalToolError: For the first binary that is missing
    """
    for tool in tools:
        if shutil.which(tool) is None:
            raise MissingExternalToolError(tool)
        log.debug(f"Found {tool} at {shutil.which(tool)}")


def run_tool(
    cmd: Sequence[str], cwd: Path | None = None
) -> subprocess.CompletedProcess:
    """
    Run an external command and capture its output as text.

    Raises:
        MissingExternalToolError: If the binary cannot be executed
        subprocess.CalledProcessError: If the command exits non-zero
    """
    log.debug(f"Running: {' '.join(cmd)}" + (f" (in {cwd})" if cwd else ""))
    try:
        return subprocess.run(
            list(cmd),
            cwd=cwd,
            capture_output=True,
            text=True,
            check=True,
        )
    except FileNotFoundError as e:
        raise MissingExternalToolError(cmd[0]) from e
