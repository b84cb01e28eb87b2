"""Read-only structured view over a stored secret.

The first line is the password; later ``key: value`` lines are metadata.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class Entry:
    data: str

    @property
    def password(self) -> Optional[str]:
        lines = self.data.splitlines()
        return lines[0] if lines else None

    @property
    def meta(self) -> Dict[str, str]:
        fields: Dict[str, str] = {}
        for line in self.data.splitlines()[1:]:
            key, sep, value = line.partition(":")
            if sep:
                fields[key.strip()] = value.strip()
        return fields

    def field(self, name: str) -> Optional[str]:
        return self.meta.get(name)
