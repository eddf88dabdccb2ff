# Load .env vars from file before everything else
from dotenv import load_dotenv

load_dotenv()

from .logger import setup_logging  # noqa: E402

setup_logging()

from .config import PushConfig, SelectionPolicy  # noqa: E402

__all__ = ["PushConfig", "SelectionPolicy", "push_configuration"]


def __getattr__(name):
    """Lazily import the pipeline so the CLI starts fast."""
    if name == "push_configuration":
        from .core.pipeline import push_configuration

        return push_configuration
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
