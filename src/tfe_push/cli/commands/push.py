"""tfe-push push command - upload a configuration and follow its run."""

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tfe_push.config import PushConfig, SelectionPolicy, get_address
from tfe_push.core.api.tfe import TFEClient
from tfe_push.core.exceptions import PushError
from tfe_push.core.pipeline import PushResult, push_configuration
from tfe_push.logger import enable_debug_logging

logger = logging.getLogger(__name__)
console = Console()


def parse_target(
    name: str | None, organization: str | None, workspace: str | None
) -> tuple[str, str]:
    """
    Work out organization and workspace from --name or the separate options.

    Raises:
        typer.BadParameter: If the target is incomplete or malformed
    """
    if name:
        org, sep, ws = name.partition("/")
        if not sep or not org or not ws or "/" in ws:
            raise typer.BadParameter(
                "expected ORGANIZATION/WORKSPACE", param_hint="'--name'"
            )
        return org, ws

    if not organization:
        raise typer.BadParameter(
            "set --organization or TFE_ORG", param_hint="'--organization'"
        )
    if not workspace:
        raise typer.BadParameter(
            "set --workspace or TFE_WORKSPACE", param_hint="'--workspace'"
        )
    return organization, workspace


def push_command(
    config_dir: Path = typer.Argument(
        Path("."),
        help="Directory containing the Terraform configuration",
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
    ),
    name: str | None = typer.Option(
        None, "--name", "-n", help="Target as ORGANIZATION/WORKSPACE"
    ),
    organization: str | None = typer.Option(
        None, "--organization", "-o", envvar="TFE_ORG", help="Organization name"
    ),
    workspace: str | None = typer.Option(
        None, "--workspace", "-w", envvar="TFE_WORKSPACE", help="Workspace name"
    ),
    vcs: bool = typer.Option(
        True, "--vcs/--no-vcs", help="Only upload files tracked by git"
    ),
    upload_modules: bool = typer.Option(
        True,
        "--upload-modules/--no-upload-modules",
        help="Include the .terraform/modules cache",
    ),
    upload_plugins: bool = typer.Option(
        True,
        "--upload-plugins/--no-upload-plugins",
        help="Include terraform.d/plugins when present",
    ),
    poll: int = typer.Option(
        0,
        "--poll",
        "-p",
        min=0,
        help="Poll run status every N seconds until it finishes (0 disables)",
    ),
    debug: bool = typer.Option(False, "--debug", help="Print debug logging"),
):
    """
    Upload a Terraform configuration to a workspace and start a run.

    Examples:
      tfe-push push --name my-org/my-workspace
      tfe-push push ./infra -o my-org -w prod --poll 5
      tfe-push push --no-vcs --no-upload-modules
    """
    if debug:
        enable_debug_logging()

    org, ws = parse_target(name, organization, workspace)
    config = PushConfig(
        root=config_dir,
        organization=org,
        workspace=ws,
        policy=SelectionPolicy(
            tracked_only=vcs,
            include_modules=upload_modules,
            include_local_plugins=upload_plugins,
        ),
        poll_interval=poll,
        address=get_address(),
    )
    _display_push_config(config)

    try:
        with TFEClient(config.api_url, config.hostname) as client:
            result = push_configuration(config, client, console=console)
    except KeyboardInterrupt:
        console.print("\n[yellow]Push cancelled by user[/yellow]")
        raise typer.Exit(1)
    except PushError as e:
        console.print(f"[red]Push failed:[/red] {e}")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"\n[red]Push failed:[/red] {e}")
        logger.exception("Push failed")
        raise typer.Exit(1)

    _display_push_summary(result)


def _display_push_config(config: PushConfig):
    """Display push configuration."""
    policy = config.policy
    console.print(
        Panel(
            f"[bold]Workspace:[/bold] {config.organization}/{config.workspace}\n"
            f"[bold]Directory:[/bold] {config.root}\n"
            f"[bold]Tracked files only:[/bold] {policy.tracked_only}\n"
            f"[bold]Modules:[/bold] {policy.include_modules}\n"
            f"[bold]Local plugins:[/bold] {policy.include_local_plugins}\n"
            f"[bold]Poll interval:[/bold] "
            f"{f'{config.poll_interval}s' if config.poll_interval else 'disabled'}",
            title="Configuration Push",
            expand=False,
        )
    )


def _display_push_summary(result: PushResult):
    """Display push summary."""
    summary = Table(show_header=False, box=None)
    summary.add_column("Item", style="bold")
    summary.add_column("Value", style="cyan")

    summary.add_row("Files packaged", str(result.file_count))
    summary.add_row("Configuration version", result.configuration_version_id)
    summary.add_row("Run", result.run_id)
    if result.poll_state is not None:
        summary.add_row("Final status", result.poll_state.status or "unknown")
        if result.poll_state.lock_owner:
            summary.add_row("Workspace locked by", result.poll_state.lock_owner)

    console.print("\n")
    console.print(summary)
    console.print(
        Panel(
            f"[bold cyan]Run URL:[/bold cyan] {result.run_url}",
            title="✓ Configuration Uploaded",
            expand=False,
            border_style="green",
        )
    )
