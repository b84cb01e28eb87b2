"""Common types for the impersonation engine."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from passstore.store import Store


@dataclass(frozen=True)
class Session:
    """Filesystem artefacts of one impersonation run."""

    directory: Path
    wrapper: Path
    store_file: Path


@dataclass(frozen=True)
class ImpersonationResult:
    """Store as left by the child, plus the child's exit status."""

    store: Store
    returncode: int
    session: Session

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0

    @property
    def exit_status(self) -> int:
        """Shell-style status: a child killed by signal N reports 128 + N."""
        if self.returncode < 0:
            return 128 - self.returncode
        return self.returncode
