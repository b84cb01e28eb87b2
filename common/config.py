"""Runtime settings read from the environment (and an optional ``.env`` file).

Env:
- IMPOSTER_PASS_DB: store location, a file path or an inline JSON object
- IMPOSTER_PASS_QUIET: suppress banners and warnings (1/true/yes/on)
- IMPOSTER_PASS_TOOL_NAME: name of the impersonated executable (default: pass)
- IMPOSTER_PASS_TMPDIR: root for impersonation session directories
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

DB_ENV = "IMPOSTER_PASS_DB"
QUIET_ENV = "IMPOSTER_PASS_QUIET"
SESSION_STORE_ENV = "IMPOSTER_PASS_SESSION_STORE"
TOOL_NAME_ENV = "IMPOSTER_PASS_TOOL_NAME"
TMPDIR_ENV = "IMPOSTER_PASS_TMPDIR"

DEFAULT_TOOL_NAME = "pass"

_TRUTHY = {"1", "true", "yes", "on"}


def parse_bool(raw: Optional[str]) -> bool:
    return (raw or "").strip().lower() in _TRUTHY


@dataclass(frozen=True)
class Settings:
    db: Optional[str] = None
    quiet: bool = False
    tool_name: str = DEFAULT_TOOL_NAME
    temp_root: str = ""

    def __post_init__(self) -> None:
        if not self.temp_root:
            object.__setattr__(self, "temp_root", tempfile.gettempdir())


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build settings from ``environ`` (defaults to ``os.environ``).

    A ``.env`` file is only consulted when reading the real process
    environment; variables that are already set win over the file.
    """
    if environ is None:
        load_dotenv(override=False)
        environ = os.environ
    return Settings(
        db=environ.get(DB_ENV) or None,
        quiet=parse_bool(environ.get(QUIET_ENV)),
        tool_name=environ.get(TOOL_NAME_ENV) or DEFAULT_TOOL_NAME,
        temp_root=environ.get(TMPDIR_ENV) or "",
    )
