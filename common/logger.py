"""Central level-based logger (standard library `logging`).

Env:
- IMPOSTER_PASS_LOG_LEVEL, falling back to LOG_LEVEL:
  DEBUG|INFO|WARNING|ERROR|CRITICAL (default: WARNING)

Log records always go to stderr; stdout belongs to whatever the real ``pass``
would print.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

LEVEL_ENVS = ("IMPOSTER_PASS_LOG_LEVEL", "LOG_LEVEL")


def _level_from_env() -> int:
    for name in LEVEL_ENVS:
        raw = (os.getenv(name) or "").upper().strip()
        if raw:
            return getattr(logging, raw, logging.WARNING)
    return logging.WARNING


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a configured logger.

    The root logger is configured on first use only.
    """
    level = _level_from_env()
    root = logging.getLogger()
    if not getattr(root, "_imposter_pass_configured", False):
        logging.basicConfig(
            level=level,
            stream=sys.stderr,
            format="%(asctime)s %(levelname)s %(name)s - %(message)s",
        )
        setattr(root, "_imposter_pass_configured", True)
    root.setLevel(level)
    return logging.getLogger(name or "imposter_pass")
