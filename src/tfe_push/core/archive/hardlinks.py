"""Hardlink partitioning for archivers that cannot dereference hardlinks.

Such an archiver stores the second and later names of a shared inode as link
records. The upload destination has no view of our link table, so those files
must be added one per append call, where each append sees a single name and
stores the full content.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable

from tfe_push.config import MODULES_DIR, SelectionPolicy
from tfe_push.core.archive.selector import get_file_tree, load_exclude_patterns

log = logging.getLogger(__name__)

LinkCount = Callable[[Path], int]


def stat_link_count(path: Path) -> int:
    return os.lstat(path).st_nlink


@dataclass(frozen=True)
class ArchivePlan:
    """Split of the selected files into archive-in-one-pass and append-one-by-one."""

    direct: tuple[str, ...]
    hardlinked: tuple[str, ...] = ()

    @property
    def needs_incremental(self) -> bool:
        return bool(self.hardlinked)

    @property
    def files(self) -> tuple[str, ...]:
        return self.direct + self.hardlinked

    @classmethod
    def single_pass(cls, files: Iterable[str]) -> "ArchivePlan":
        return cls(direct=tuple(files))


def scanned_paths(root: Path, policy: SelectionPolicy) -> list[str]:
    """
    Relative paths of every file the hardlink scan covers.

    The scan skips version-control metadata and the state directory, and
    looks inside the module cache only when modules are uploaded.
    """
    candidates = get_file_tree(root, load_exclude_patterns(), root)
    if policy.include_modules and (root / MODULES_DIR).is_dir():
        candidates.extend(get_file_tree(root / MODULES_DIR, None, root))
    return candidates


def hardlinked_among(
    root: Path, rel_paths: Iterable[str], link_count: LinkCount = stat_link_count
) -> set[str]:
    """The subset of ``rel_paths`` that are regular files with a link count above 1."""
    hardlinked = set()
    for rel_path in rel_paths:
        path = root / rel_path
        if path.is_symlink() or not path.exists():
            continue
        if link_count(path) > 1:
            hardlinked.add(rel_path)
    return hardlinked


def resolve_hardlinks(
    root: Path,
    files: list[str],
    policy: SelectionPolicy,
    link_count: LinkCount = stat_link_count,
) -> ArchivePlan:
    """
    Partition the selected files into direct and hardlinked subsets.

    Args:
        root: Configuration root directory
        files: Full selected file set
        policy: Selection policy the file set was built with
        link_count: Link-count query, injectable for tests

    Returns:
        ArchivePlan whose partitions are disjoint and together equal ``files``
    """
    scanned = scanned_paths(root, policy)
    all_hardlinked = hardlinked_among(root, scanned, link_count)

    # Selected files the scan never reaches are queried one at a time.
    covered = set(scanned)
    unscanned = [f for f in files if f not in covered]
    all_hardlinked |= hardlinked_among(root, unscanned, link_count)

    hardlinked = tuple(f for f in files if f in all_hardlinked)
    if not hardlinked:
        log.debug("No hardlinked files selected, archiving in a single pass")
        return ArchivePlan.single_pass(files)

    direct = tuple(f for f in files if f not in all_hardlinked)
    log.debug(
        f"Found {len(hardlinked)} hardlinked files; "
        f"{len(direct)} files go into the base archive"
    )
    return ArchivePlan(direct=direct, hardlinked=hardlinked)
