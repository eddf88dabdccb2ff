"""Main CLI entry point for tfe-push."""

import typer
from importlib import metadata
from rich.console import Console

from .commands.push import push_command


def get_version() -> str:
    """Get the package version from metadata."""
    try:
        return metadata.version("tfe-push")
    except metadata.PackageNotFoundError:
        return "unknown"


console = Console()

# command: tfe-push
app = typer.Typer(
    name="tfe-push",
    help="Upload Terraform configurations to Terraform Cloud / Enterprise workspaces",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# command: tfe-push <command>
app.command("push")(push_command)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", "-v", help="Show version"),
):
    """Upload Terraform configurations to Terraform Cloud / Enterprise workspaces."""
    if version:
        console.print(f"tfe-push v{get_version()}")
        raise typer.Exit()


if __name__ == "__main__":
    app()
