"""
Test configuration and fixtures for tfe-push tests.

Provides shared fixtures for:
- Configuration roots on disk (plain and git-tracked)
- Mock API clients
- Sleep recorders for the polling loops
- Environment variable management
"""

import shutil
import subprocess
from pathlib import Path
from typing import Dict, List
from unittest.mock import Mock

import pytest

from tfe_push.core.api.models import ConfigurationVersion, Run, WorkspaceLock

@pytest.fixture
def git_init():
    """Provide a helper that turns a directory into a committed git repo.

    Skips the test when git is not installed.
    """
    if shutil.which("git") is None:
        pytest.skip("git not installed")

    def init(root: Path) -> Path:
        def git(*args):
            subprocess.run(
                ["git", *args],
                cwd=root,
                check=True,
                capture_output=True,
            )

        git("init", "-q")
        git("config", "user.email", "tests@example.com")
        git("config", "user.name", "tests")
        git("add", "-A")
        git("commit", "-q", "-m", "initial")
        return root

    return init


@pytest.fixture
def require_tar():
    """Skip the test unless real tar and gzip binaries are available."""
    if shutil.which("tar") is None or shutil.which("gzip") is None:
        pytest.skip("tar/gzip not installed")


@pytest.fixture
def config_root(tmp_path: Path) -> Path:
    """Provide a Terraform configuration root with the usual layout.

    Creates:
    - main.tf, variables.tf, outputs.tf
    - modules/network/main.tf (a local module)
    - .terraform/modules/vpc/main.tf (module cache)
    - .terraform/terraform.tfstate (state directory content)

    Returns:
        Path to the configuration root.
    """
    root = tmp_path / "infra"
    root.mkdir()
    (root / "main.tf").write_text('resource "null_resource" "a" {}\n')
    (root / "variables.tf").write_text('variable "region" {}\n')
    (root / "outputs.tf").write_text('output "id" { value = "x" }\n')
    (root / "modules" / "network").mkdir(parents=True)
    (root / "modules" / "network" / "main.tf").write_text("# network\n")
    (root / ".terraform" / "modules" / "vpc").mkdir(parents=True)
    (root / ".terraform" / "modules" / "vpc" / "main.tf").write_text("# vpc\n")
    (root / ".terraform" / "terraform.tfstate").write_text("{}\n")
    return root


@pytest.fixture
def sleep_recorder() -> List[float]:
    """Provide a list that records every delay passed to it via ``.sleep``."""

    class Recorder(list):
        def sleep(self, seconds: float) -> None:
            self.append(seconds)

    return Recorder()


@pytest.fixture
def mock_tfe_client():
    """Provide mock TFEClient with a workspace, configuration version and run.

    Returns:
        Mock object with the TFEClient methods used by the pipeline.
    """
    client = Mock()
    client.get_workspace_id.return_value = "ws-123"
    client.create_configuration_version.return_value = ConfigurationVersion(
        id="cv-456", upload_url="https://archivist.example.com/v1/object/abc"
    )
    client.upload_archive.return_value = None
    client.list_runs.return_value = [
        Run(id="run-789", status="pending", configuration_version_id="cv-456")
    ]
    client.get_run.return_value = Run(id="run-789", status="applied")
    client.get_workspace_lock.return_value = WorkspaceLock(locked=False)
    return client


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Dict[str, str]:
    """Provide patched environment variables for tests.

    Points the credentials file at an empty temp location so a developer's
    real Terraform credentials never leak into tests.

    Returns:
        Dictionary of environment variables set.
    """
    env_vars = {
        "TFE_TOKEN": "test-token-123",
        "TFE_URL": "https://tfe.example.com",
        "TF_CLI_CREDENTIALS_FILE": str(tmp_path / "credentials.tfrc.json"),
        "LOG_LEVEL": "ERROR",
    }

    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)

    return env_vars
