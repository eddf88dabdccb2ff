"""Run resolution and status polling."""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from rich.console import Console

from tfe_push.core.api.tfe import TFEClient
from tfe_push.core.exceptions import (
    ApiRequestError,
    PollingError,
    RunResolutionTimeoutError,
)

log = logging.getLogger(__name__)

RESOLVE_ATTEMPTS = 10
RESOLVE_DELAY_SECONDS = 1.0


@dataclass
class PollState:
    """State carried between polling iterations."""

    status: Optional[str] = None
    # True for the first check and for the report right after lock contention.
    skip_next_delay: bool = True
    lock_owner: Optional[str] = None
    polls: int = 0

    @property
    def contended(self) -> bool:
        return self.lock_owner is not None


@dataclass(frozen=True)
class TrackResult:
    run_id: str
    poll_state: Optional[PollState] = None


class RunTracker:
    """
    Follows the run created by an uploaded configuration version.

    ``sleep`` is injectable so tests can count delays without waiting.
    """

    def __init__(
        self,
        client: TFEClient,
        sleep: Callable[[float], None] = time.sleep,
        console: Optional[Console] = None,
        attempts: int = RESOLVE_ATTEMPTS,
        delay: float = RESOLVE_DELAY_SECONDS,
    ):
        self.client = client
        self.sleep = sleep
        self.console = console or Console()
        self.attempts = attempts
        self.delay = delay

    def resolve_run_id(self, workspace_id: str, configuration_version_id: str) -> str:
        """
        Find the run created for ``configuration_version_id``.

        Makes up to ``attempts`` listing calls with ``delay`` seconds between
        them; the first matching run wins.

        Raises:
            RunResolutionTimeoutError: If no run matches after every attempt
        """
        for attempt in range(1, self.attempts + 1):
            runs = self.client.list_runs(workspace_id)
            for run in runs:
                if run.configuration_version_id == configuration_version_id:
                    log.debug(f"Resolved run {run.id} on attempt {attempt}")
                    return run.id

            log.debug(
                f"No run for {configuration_version_id} yet "
                f"(attempt {attempt}/{self.attempts})"
            )
            if attempt < self.attempts:
                self.sleep(self.delay)

        raise RunResolutionTimeoutError(configuration_version_id, self.attempts)

    def poll(self, run_id: str, workspace_id: str, interval: int) -> PollState:
        """
        Poll the run until it leaves the active statuses.

        Stops early, successfully, when the workspace is locked by someone
        other than this run: the lock owner is printed and the current status
        is reported once more without waiting.

        Raises:
            PollingError: On the first failed or malformed response
        """
        state = PollState()

        while True:
            if state.skip_next_delay:
                state.skip_next_delay = False
            else:
                self.sleep(interval)

            try:
                run = self.client.get_run(run_id)
            except ApiRequestError as e:
                raise PollingError(f"polling run {run_id} failed: {e}") from e

            state.status = run.status
            state.polls += 1
            self.console.print(f"Run [bold]{run_id}[/bold] status: [cyan]{run.status}[/cyan]")

            if not run.is_active or state.contended:
                return state

            try:
                lock = self.client.get_workspace_lock(workspace_id)
            except ApiRequestError as e:
                raise PollingError(
                    f"reading lock state of workspace {workspace_id} failed: {e}"
                ) from e

            if lock.held_by_other(run_id):
                state.lock_owner = lock.locked_by or "unknown"
                state.skip_next_delay = True
                self.console.print(
                    f"[yellow]Workspace is locked by {state.lock_owner}[/yellow]"
                )

    def track(
        self, workspace_id: str, configuration_version_id: str, interval: int = 0
    ) -> TrackResult:
        run_id = self.resolve_run_id(workspace_id, configuration_version_id)
        if interval <= 0:
            return TrackResult(run_id=run_id)

        log.debug(f"Polling run {run_id} every {interval}s")
        return TrackResult(run_id=run_id, poll_state=self.poll(run_id, workspace_id, interval))
