# ycb/core/logging.py
"""Logging setup shared by the CLI and the TUI."""

import logging
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler

_LOGGER_INITIALIZED = False

DEFAULT_LOG_FILE = Path.home() / ".ycb" / "logs" / "ycb.log"


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None) -> None:
    """
    Initialize the root logger once.

    CLI commands log to the console through Rich. The TUI passes
    `log_file` so records never draw over the screen.
    API keys and tokens must never be logged.
    """
    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED:
        return

    level = logging.DEBUG if verbose else logging.INFO
    root = logging.getLogger()
    root.setLevel(level)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(str(log_file), encoding="utf-8")
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
    else:
        handler = RichHandler(show_path=False, rich_tracebacks=True)
        handler.setFormatter(logging.Formatter("%(message)s"))

    handler.setLevel(level)
    root.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    _LOGGER_INITIALIZED = True
