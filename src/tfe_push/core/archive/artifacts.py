"""Ownership of the local scratch files for one invocation."""

import logging
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

log = logging.getLogger(__name__)

SCRATCH_PREFIX = "tfe-push-"


def release_artifacts(*paths: Union[str, Path]) -> None:
    """
    Best-effort removal of files or directories.

    Paths that no longer exist are ignored; other OS errors are logged.
    """
    for raw in paths:
        path = Path(raw)
        try:
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
            else:
                path.unlink(missing_ok=True)
            log.debug(f"Removed {path}")
        except FileNotFoundError:
            continue
        except OSError as e:
            log.warning(f"Could not remove {path}: {e}")


@contextmanager
def artifact_workspace(prefix: str = SCRATCH_PREFIX) -> Iterator[Path]:
    """
    Scratch directory for the archive and listing files.

    The name is unique per invocation and the directory is released on
    every exit path, including exceptions raised inside the block.
    """
    workdir = Path(tempfile.mkdtemp(prefix=prefix))
    log.debug(f"Created scratch directory {workdir}")
    try:
        yield workdir
    finally:
        release_artifacts(workdir)
