# origaspect/common/logging.py
from __future__ import annotations

import logging
import os

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _env_level(default: int) -> int:
    raw = (os.getenv("LOG_LEVEL") or "").strip().upper()
    if not raw:
        return default
    return logging.getLevelName(raw) if isinstance(logging.getLevelName(raw), int) else default


def get_logger(name: str = "origaspect", level: int | None = None) -> logging.Logger:
    """
    Return a logger that plays nice with Uvicorn if running under it.
    If no handlers are set, we add a basicConfig once.

    Level comes from the explicit argument, then LOG_LEVEL, then INFO.
    """
    lvl = level if level is not None else _env_level(logging.INFO)
    logger = logging.getLogger(name)
    if not logging.getLogger().handlers and not logger.handlers:
        logging.basicConfig(level=lvl, format=_FORMAT)
    logger.setLevel(lvl)
    return logger
