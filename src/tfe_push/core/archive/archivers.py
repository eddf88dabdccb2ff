"""Archiver backends.

Both backends drive the system ``tar``; they differ in whether ``tar`` can
store hardlinked files as full copies in a single pass.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path

from tfe_push.core.utils.tools import require_tools, run_tool

log = logging.getLogger(__name__)


class Archiver(ABC):
    """Creates, appends to and compresses tar archives."""

    name: str = "tar"
    supports_hardlink_dereference: bool = False

    def _create_flags(self, compress: bool) -> list[str]:
        return ["-czf"] if compress else ["-cf"]

    def _listing_flags(self, listing: Path) -> list[str]:
        return ["--null", "-T", str(listing)]

    def create(
        self, archive: Path, root: Path, listing: Path, compress: bool
    ) -> None:
        """
        Create ``archive`` from the NUL-terminated relative paths in ``listing``.

        Listed names are never parsed as tar options.

        Raises:
            subprocess.CalledProcessError: If tar exits non-zero
        """
        cmd = ["tar", *self._create_flags(compress), str(archive)]
        cmd += ["-C", str(root), *self._listing_flags(listing)]
        run_tool(cmd)

    def append(self, archive: Path, root: Path, rel_path: str) -> None:
        """Append one file to an uncompressed archive."""
        run_tool(["tar", "-rf", str(archive), "-C", str(root), "--", rel_path])

    def compress(self, archive: Path) -> Path:
        """Gzip ``archive`` in place and return the ``.gz`` path."""
        run_tool(["gzip", "-f", str(archive)])
        return archive.with_name(archive.name + ".gz")

    @abstractmethod
    def describe(self) -> str:
        pass


class GnuTarArchiver(Archiver):
    name = "gnu-tar"
    supports_hardlink_dereference = True

    def _create_flags(self, compress: bool) -> list[str]:
        return ["--hard-dereference", *super()._create_flags(compress)]

    def _listing_flags(self, listing: Path) -> list[str]:
        return ["--verbatim-files-from", *super()._listing_flags(listing)]

    def describe(self) -> str:
        return "GNU tar (hardlinks dereferenced natively)"


class BsdTarArchiver(Archiver):
    name = "bsd-tar"
    supports_hardlink_dereference = False

    def describe(self) -> str:
        return "bsdtar (hardlinks appended one file at a time)"


def detect_archiver() -> Archiver:
    """
    Pick the archiver matching the system ``tar``.

    Raises:
        MissingExternalToolError: If ``tar`` is not installed
    """
    require_tools("tar")
    try:
        version = run_tool(["tar", "--version"]).stdout
    except subprocess.CalledProcessError as e:
        log.debug(f"tar --version failed ({e.returncode}), assuming bsdtar")
        version = ""

    archiver: Archiver
    if "GNU tar" in version:
        archiver = GnuTarArchiver()
    else:
        archiver = BsdTarArchiver()
    log.debug(f"Using {archiver.describe()}")
    return archiver
