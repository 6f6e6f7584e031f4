from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Optional


SYMBOL_ALLOWED_RE = re.compile(r"^[A-Z0-9.\-^=]{1,20}$")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def get_logger(name: str = "stratsel", level: str | int = "INFO") -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger


def configure_logging(level: str | int = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """Set up the package logger, optionally mirroring output to ``log_file``."""
    logger = get_logger("stratsel", level)
    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        already = any(
            isinstance(h, logging.FileHandler) and Path(h.baseFilename) == path.resolve()
            for h in logger.handlers
        )
        if not already:
            handler = logging.FileHandler(path, encoding="utf-8")
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            logger.addHandler(handler)
    return logger


def sanitize_symbol(raw: str | None) -> str | None:
    """Validate/sanitize external symbols before using them in paths or output."""

    if raw is None:
        return None
    s = str(raw).strip().upper()
    if not s:
        return None
    if not SYMBOL_ALLOWED_RE.fullmatch(s):
        return None
    return s


def atomic_write_text(path: Path, payload: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_name = str(path) + ".tmp"
    try:
        with open(tmp_name, "w", encoding="utf-8") as fh:
            fh.write(payload)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, str(path))
    finally:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)


def format_eta(seconds: float) -> str:
    """Minutes with one decimal, the way progress lines report it."""
    return f"~{max(seconds, 0.0) / 60.0:.1f} min"
