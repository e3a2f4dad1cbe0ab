"""Process-wide logging setup."""

from __future__ import annotations

import logging
import sys

from app.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

_configured = False


def configure_logging(level: str | None = None) -> None:
    """Install a single stdout handler on the root logger (safe to call repeatedly)."""
    global _configured
    resolved = (level or settings.log_level or "INFO").upper()
    root = logging.getLogger()
    root.setLevel(resolved)
    if _configured:
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    # botocore logs every retry/credential lookup at INFO
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)
    _configured = True
