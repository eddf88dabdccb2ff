import logging
import os
import sys
from typing import Union, Optional

from rich.console import Console
from rich.logging import RichHandler

NOISY_LOGGERS = ("urllib3", "requests")


def is_rich_enabled() -> bool:
    """Check if Rich log rendering was requested through the environment."""
    return os.environ.get("TFE_PUSH_RICH_UI", "false").lower() in ("true", "1", "yes")


class NoisyLibraryFilter(logging.Filter):
    """Drop routine HTTP library chatter unless we are debugging."""

    def filter(self, record):
        if record.levelno <= logging.INFO and record.name.startswith(NOISY_LOGGERS):
            return False
        return True


def get_rich_handler() -> logging.Handler:
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.addFilter(NoisyLibraryFilter())
    return handler


def setup_logging(
    level: Union[int, str] = logging.WARNING,
    stream=sys.stderr,
    fmt: Optional[str] = None,
):
    """
    Sets up the root logger with a stream handler and basic formatting.
    Uses a Rich handler when enabled, otherwise falls back to standard logging.
    Does nothing if handlers are already configured, apart from applying
    the LOG_LEVEL override.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.WARNING)

    root_logger = logging.getLogger()
    if not root_logger.hasHandlers():
        if is_rich_enabled():
            handler = get_rich_handler()
        else:
            if fmt is None:
                if level == logging.DEBUG:
                    fmt = "%(asctime)s | %(levelname)-5s | %(name)s | %(filename)s:%(lineno)d | %(message)s"
                else:
                    fmt = "%(asctime)s | %(levelname)-5s | %(message)s"

            handler = logging.StreamHandler(stream)
            handler.setFormatter(logging.Formatter(fmt))

        root_logger.setLevel(level)
        root_logger.addHandler(handler)

    env_level = os.environ.get("LOG_LEVEL")
    if env_level:
        root_logger.setLevel(env_level.upper())


def enable_debug_logging() -> None:
    """Lower the root logger to DEBUG for the --debug flag."""
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in root_logger.handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(
            handler, RichHandler
        ):
            handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s | %(levelname)-5s | %(name)s | %(filename)s:%(lineno)d | %(message)s"
                )
            )
