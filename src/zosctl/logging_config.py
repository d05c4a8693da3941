"""Logging setup for the zosctl command line.

Levels: WARNING by default, INFO with --verbose, DEBUG with --debug.
ZOSCTL_LOG_LEVEL overrides the flags. ZOSCTL_LOG_FILE adds a file handler
writing to that path, or to logs/zosctl.log in the config directory when
set to "true". Every handler carries a SanitizingFilter.
"""

import logging
import os
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from zosctl.config_manager import ConfigManager
from zosctl.log_sanitizer import LogSanitizer

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE_NAME = "zosctl.log"

_HANDLER_MARKER = "_zosctl_handler"


class SanitizingFilter(logging.Filter):
    """Mask credentials in every record before it reaches a sink."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = LogSanitizer.sanitize(record.getMessage())
        record.args = None
        return True


def _resolve_level(verbose: bool, debug: bool) -> int:
    env_level = os.environ.get("ZOSCTL_LOG_LEVEL")
    if env_level:
        level = logging.getLevelName(env_level.strip().upper())
        if isinstance(level, int):
            return level
    if debug:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    return logging.WARNING


def setup_logging(verbose: bool = False, debug: bool = False) -> logging.Logger:
    """Configure the zosctl logger hierarchy.

    Safe to call more than once; handlers installed by a previous call are
    replaced rather than duplicated.

    Returns:
        The configured "zosctl" logger
    """
    root = logging.getLogger("zosctl")
    root.setLevel(_resolve_level(verbose, debug))
    root.propagate = False

    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            root.removeHandler(handler)
            handler.close()

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_path=debug,
        rich_tracebacks=debug,
    )
    console_handler.addFilter(SanitizingFilter())
    setattr(console_handler, _HANDLER_MARKER, True)
    root.addHandler(console_handler)

    log_file = os.environ.get("ZOSCTL_LOG_FILE")
    if log_file:
        if log_file.lower() in ("1", "true", "yes"):
            path = ConfigManager.get_config_dir() / "logs" / LOG_FILE_NAME
        else:
            path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        file_handler.addFilter(SanitizingFilter())
        setattr(file_handler, _HANDLER_MARKER, True)
        root.addHandler(file_handler)

    return root
