"""Logging setup for a processing run."""

from __future__ import annotations

import logging

__all__ = ["log_format", "setup_logging"]

LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def log_format(label: str | None = None) -> str:
    """
    Record format, with every message prefixed by ``label`` when given.

    A day is usually labelled by its input file stem so that logs from
    several days processed in sequence remain attributable.
    """
    prefix = f"{label.replace('%', '%%')}: " if label else ""
    return f"%(asctime)s [%(levelname)s] {prefix}%(message)s"


def setup_logging(verbose: bool = False, label: str | None = None) -> None:
    """Configure the root logger for the processor.

    Args:
        verbose: If True, use DEBUG level; otherwise INFO.
        label: Run label prefixed to every message.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=log_format(label),
        datefmt=LOG_DATEFMT,
    )
