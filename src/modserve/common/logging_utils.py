"""Logging configuration shared by the CLI entry points."""

from __future__ import annotations

import logging
import os

from ..constants import Constants


def configure_logging() -> None:
    """Install a root stream handler once, honoring MODSERVE_LOG_LEVEL."""
    root = logging.getLogger()
    level_name = os.environ.get(Constants.ENV_LOG_LEVEL, "INFO").upper()
    root.setLevel(getattr(logging, level_name, logging.INFO))
    if any(getattr(h, "_modserve", False) for h in root.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    handler._modserve = True  # type: ignore[attr-defined]
    root.addHandler(handler)
