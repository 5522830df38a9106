"""Logging helpers: audit sink and process-wide logging setup."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from quorumvault.config import Settings, get_settings

from .auditLogger import AuditLogger

__all__ = ["AuditLogger", "configure_logging"]

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure the root logger from *settings* (defaults to the env settings)."""
    settings = settings or get_settings()
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if settings.log_file_enabled:
        path = Path(settings.log_file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT, handlers=handlers, force=True)
