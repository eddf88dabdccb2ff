"""End-to-end push: select, archive, upload, track."""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from rich.console import Console

from tfe_push.config import PushConfig
from tfe_push.core.api.tfe import TFEClient
from tfe_push.core.archive.archivers import Archiver, detect_archiver
from tfe_push.core.archive.artifacts import artifact_workspace
from tfe_push.core.archive.builder import ArchiveBuilder
from tfe_push.core.archive.hardlinks import ArchivePlan, resolve_hardlinks
from tfe_push.core.archive.selector import select_files
from tfe_push.core.runs.tracker import PollState, RunTracker
from tfe_push.core.utils.tools import require_tools

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PushResult:
    workspace_id: str
    configuration_version_id: str
    run_id: str
    run_url: str
    file_count: int
    incremental: bool
    poll_state: Optional[PollState] = None


def preflight(config: PushConfig) -> None:
    """Fail before doing any work if a required binary is missing."""
    tools = ["tar", "gzip"]
    if config.policy.tracked_only:
        tools.append("git")
    require_tools(*tools)


def plan_archive(config: PushConfig, archiver: Archiver) -> ArchivePlan:
    files = select_files(config.root, config.policy)
    log.debug(f"Selected {len(files)} files under {config.root}")
    if archiver.supports_hardlink_dereference:
        return ArchivePlan.single_pass(files)
    return resolve_hardlinks(config.root, files, config.policy)


def push_configuration(
    config: PushConfig,
    client: TFEClient,
    archiver: Optional[Archiver] = None,
    console: Optional[Console] = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> PushResult:
    """
    Upload the configuration under ``config.root`` and follow its run.

    The scratch directory holding the archive is released before run
    tracking starts, whether or not the upload succeeded.

    Raises:
        PushError: Any stage failure, with a one-line description
    """
    console = console or Console()
    preflight(config)
    archiver = archiver or detect_archiver()

    plan = plan_archive(config, archiver)
    builder = ArchiveBuilder(archiver)
    incremental = builder.uses_incremental(plan)
    console.print(
        f"Packaging {len(plan.files)} files"
        + (f" ({len(plan.hardlinked)} hardlinked, appended separately)" if incremental else "")
    )

    with artifact_workspace() as workdir:
        archive = builder.build(config.root, plan, workdir)

        workspace_id = client.get_workspace_id(config.organization, config.workspace)
        version = client.create_configuration_version(workspace_id)
        console.print(f"Uploading configuration version [bold]{version.id}[/bold]")
        client.upload_archive(version.upload_url, archive)

    tracker_kwargs = {"console": console}
    if sleep is not None:
        tracker_kwargs["sleep"] = sleep
    tracker = RunTracker(client, **tracker_kwargs)
    tracked = tracker.track(workspace_id, version.id, config.poll_interval)

    return PushResult(
        workspace_id=workspace_id,
        configuration_version_id=version.id,
        run_id=tracked.run_id,
        run_url=config.run_url(tracked.run_id),
        file_count=len(plan.files),
        incremental=incremental,
        poll_state=tracked.poll_state,
    )
