from __future__ import annotations

import logging

from rich.logging import RichHandler


def get_logger(name: str = "cubestats") -> logging.Logger:
    """Return a Rich-configured logger for the project."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )
    return logging.getLogger(name)
