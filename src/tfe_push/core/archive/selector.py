"""File selection for the configuration archive."""

import logging
import subprocess
from pathlib import Path

import pathspec

from tfe_push.config import (
    LOCAL_PLUGINS_DIR,
    MODULES_DIR,
    STATE_DIR_NAME,
    VCS_DIR_NAME,
    SelectionPolicy,
)
from tfe_push.core.exceptions import NoVcsDetectedError
from tfe_push.core.utils.tools import run_tool

log = logging.getLogger(__name__)

# Anchored to the root: a nested .terraform inside a module is regular content.
ALWAYS_EXCLUDE = [f"/{VCS_DIR_NAME}/", f"/{STATE_DIR_NAME}/"]


def load_exclude_patterns() -> pathspec.PathSpec:
    return pathspec.PathSpec.from_lines("gitwildmatch", ALWAYS_EXCLUDE)


def should_ignore(file_path: Path, spec: pathspec.PathSpec, base_dir: Path) -> bool:
    """
    Check if a path should be left out of a directory walk.

    Args:
        file_path: Path to check
        spec: PathSpec object with exclude patterns
        base_dir: Base directory for relative path calculation

    Returns:
        True if the path matches an exclude pattern
    """
    try:
        rel_path = file_path.relative_to(base_dir).as_posix()
    except ValueError:
        return False

    if file_path.is_dir() and not file_path.is_symlink():
        rel_path += "/"
    return spec.match_file(rel_path)


def get_file_tree(
    directory: Path, spec: pathspec.PathSpec | None, base_dir: Path
) -> list[str]:
    """
    Recursively collect files under ``directory`` as paths relative to ``base_dir``.

    Args:
        directory: Directory to scan
        spec: Exclude patterns, or None to keep everything
        base_dir: Base directory the returned paths are relative to

    Returns:
        Sorted-per-directory list of POSIX relative paths
    """
    files = []

    for item in sorted(directory.iterdir()):
        if spec is not None and should_ignore(item, spec, base_dir):
            log.debug(f"Ignoring: {item.relative_to(base_dir).as_posix()}")
            continue

        if item.is_dir() and not item.is_symlink():
            files.extend(get_file_tree(item, spec, base_dir))
        elif item.is_file() or item.is_symlink():
            files.append(item.relative_to(base_dir).as_posix())

    return files


def is_vcs_root(root: Path) -> bool:
    try:
        result = run_tool(["git", "rev-parse", "--is-inside-work-tree"], cwd=root)
    except subprocess.CalledProcessError:
        return False
    return result.stdout.strip() == "true"


def list_tracked_files(root: Path) -> list[str]:
    """
    List files tracked by git, relative to ``root``.

    Entries deleted from the working tree are dropped so every returned path
    names a file on disk.

    Raises:
        NoVcsDetectedError: If ``root`` is not inside a git work tree
    """
    if not is_vcs_root(root):
        raise NoVcsDetectedError(str(root))

    result = run_tool(["git", "ls-files", "-z"], cwd=root)
    tracked = []
    for entry in result.stdout.split("\0"):
        if not entry:
            continue
        path = root / entry
        if not (path.is_file() or path.is_symlink()):
            log.debug(f"Skipping tracked entry missing from work tree: {entry}")
            continue
        tracked.append(entry)
    return tracked


def list_optional_dir(root: Path, rel_dir: str) -> list[str]:
    """Recursive listing of ``root/rel_dir``; an absent directory yields nothing."""
    directory = root / rel_dir
    if not directory.is_dir():
        log.debug(f"{rel_dir} not present, nothing to add")
        return []
    return get_file_tree(directory, None, root)


def _extend_unique(files: list[str], seen: set[str], extra: list[str]) -> None:
    for rel_path in extra:
        if rel_path not in seen:
            seen.add(rel_path)
            files.append(rel_path)


def select_files(root: Path, policy: SelectionPolicy) -> list[str]:
    """
    Compute the ordered set of relative paths to archive.

    Args:
        root: Configuration root directory
        policy: Selection policy for this invocation

    Returns:
        Insertion-ordered list of POSIX relative paths without duplicates

    Raises:
        NoVcsDetectedError: If tracked-only selection is requested outside git
    """
    if policy.tracked_only:
        base = list_tracked_files(root)
        log.debug(f"Selected {len(base)} tracked files")
    else:
        base = get_file_tree(root, load_exclude_patterns(), root)
        log.debug(f"Selected {len(base)} files from directory walk")

    files: list[str] = []
    seen: set[str] = set()
    _extend_unique(files, seen, base)

    if policy.include_modules:
        modules = list_optional_dir(root, MODULES_DIR)
        log.debug(f"Adding {len(modules)} module files")
        _extend_unique(files, seen, modules)

    if policy.include_local_plugins:
        plugins = list_optional_dir(root, LOCAL_PLUGINS_DIR)
        log.debug(f"Adding {len(plugins)} local plugin files")
        _extend_unique(files, seen, plugins)

    return files
