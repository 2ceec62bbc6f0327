"""Shared logger initialization.

Usage:
    from utils.logger import configure_logging
    configure_logging(logging.DEBUG, log_file="~/Library/Logs/ofsd.log")
    logging.getLogger(__name__).info("message")

The Stream Deck application discards a plugin's stderr, so a log file is the
only way to see what a running plugin did.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

_FORMAT = "%(message)s"  # rich handler already adds time & level
_FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
) -> None:
    """Idempotently configure root logger with a nicer handler."""
    root = logging.getLogger()
    if any(isinstance(h, RichHandler) for h in root.handlers):
        # Assume already configured
        return
    root.setLevel(level)

    handler = RichHandler(console=Console(stderr=True), rich_tracebacks=True, markup=False)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FORMAT))
    root.addHandler(handler)

    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(path), encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(fh)
