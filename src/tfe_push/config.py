"""Configuration management for tfe-push."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

DEFAULT_ADDRESS = "https://app.terraform.io"

VCS_DIR_NAME = ".git"
STATE_DIR_NAME = ".terraform"
MODULES_DIR = f"{STATE_DIR_NAME}/modules"
LOCAL_PLUGINS_DIR = "terraform.d/plugins"


@dataclass(frozen=True)
class SelectionPolicy:
    """Which files end up in the configuration archive."""

    tracked_only: bool = True
    include_modules: bool = True
    include_local_plugins: bool = True


@dataclass(frozen=True)
class PushConfig:
    """Everything one invocation needs, built once by the CLI."""

    root: Path
    organization: str
    workspace: str
    policy: SelectionPolicy = field(default_factory=SelectionPolicy)
    poll_interval: int = 0
    address: str = DEFAULT_ADDRESS

    def __post_init__(self):
        if self.poll_interval < 0:
            raise ValueError("poll_interval must be zero or positive")

    @property
    def hostname(self) -> str:
        return urlparse(self.address).hostname or self.address

    @property
    def api_url(self) -> str:
        return f"{self.address.rstrip('/')}/api/v2"

    def run_url(self, run_id: str) -> str:
        return (
            f"{self.address.rstrip('/')}/app/{self.organization}/"
            f"{self.workspace}/runs/{run_id}"
        )


def get_address() -> str:
    """Service base URL, overridable with TFE_URL."""
    address = os.environ.get("TFE_URL", "").strip()
    return address or DEFAULT_ADDRESS
