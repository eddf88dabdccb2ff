"""Builds the compressed configuration archive."""

import logging
import subprocess
from pathlib import Path

from tfe_push.core.archive.archivers import Archiver
from tfe_push.core.archive.hardlinks import ArchivePlan
from tfe_push.core.exceptions import ArchiveBuildError

log = logging.getLogger(__name__)

ARCHIVE_NAME = "configuration.tar.gz"


def write_listing(path: Path, files) -> Path:
    path.write_text("".join(f"{rel_path}\0" for rel_path in files), encoding="utf-8")
    return path


class ArchiveBuilder:
    """
    Produce one ``.tar.gz`` from a file set.

    Uses a single pass when the archiver dereferences hardlinks or the plan
    has none. Otherwise builds an uncompressed base archive of the direct
    files, appends each hardlinked file on its own, and compresses once at
    the end.
    """

    def __init__(self, archiver: Archiver):
        self.archiver = archiver

    def uses_incremental(self, plan: ArchivePlan) -> bool:
        return plan.needs_incremental and not self.archiver.supports_hardlink_dereference

    def build(self, root: Path, plan: ArchivePlan, workdir: Path) -> Path:
        """
        Build the archive for ``plan`` inside ``workdir``.

        Args:
            root: Configuration root the plan's paths are relative to
            plan: Direct/hardlinked split of the selected files
            workdir: Scratch directory owned by this invocation

        Returns:
            Path to the compressed archive

        Raises:
            ArchiveBuildError: If any step fails
        """
        for rel_path in plan.files:
            path = root / rel_path
            if not (path.exists() or path.is_symlink()):
                raise ArchiveBuildError(f"selected file is missing: {rel_path}")

        try:
            if self.uses_incremental(plan):
                archive = self._build_incremental(root, plan, workdir)
            else:
                archive = self._build_direct(root, plan, workdir)
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").strip().splitlines()
            detail = stderr[-1] if stderr else f"exit status {e.returncode}"
            raise ArchiveBuildError(f"{e.cmd[0]} failed: {detail}") from e
        except OSError as e:
            raise ArchiveBuildError(f"could not build archive: {e}") from e

        size_kb = archive.stat().st_size / 1024
        log.debug(f"Archive ready: {archive} ({size_kb:.1f} KB)")
        return archive

    def _build_direct(self, root: Path, plan: ArchivePlan, workdir: Path) -> Path:
        archive = workdir / ARCHIVE_NAME
        listing = write_listing(workdir / "files.txt", plan.files)
        log.debug(f"Direct build of {len(plan.files)} files with {self.archiver.name}")
        self.archiver.create(archive, root, listing, compress=True)
        return archive

    def _build_incremental(
        self, root: Path, plan: ArchivePlan, workdir: Path
    ) -> Path:
        tar_path = workdir / ARCHIVE_NAME.removesuffix(".gz")
        listing = write_listing(workdir / "direct-files.txt", plan.direct)

        log.debug(f"Base archive of {len(plan.direct)} files")
        self.archiver.create(tar_path, root, listing, compress=False)

        for rel_path in plan.hardlinked:
            log.debug(f"Appending hardlinked file {rel_path}")
            self.archiver.append(tar_path, root, rel_path)

        archive = self.archiver.compress(tar_path)
        log.debug(f"Compressed {tar_path.name} -> {archive.name}")
        return archive
