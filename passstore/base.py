"""Store backend base class (abstract).

The CLI and the impersonation flow depend on this type, so where the store
lives (file, inline JSON, nowhere) can change without touching command logic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from passstore.store import Store


class StoreBackend(ABC):
    #: Whether :meth:`save` actually keeps data beyond this process.
    persistent: bool = False

    @abstractmethod
    def get_path(self) -> str:
        """Get the path/identifier of the backing location (if applicable)."""
        ...

    @abstractmethod
    def describe(self) -> str:
        """One-line, user-facing description of where the store lives."""
        ...

    @abstractmethod
    def load(self) -> Store:
        """Read the store from the underlying location."""
        ...

    @abstractmethod
    def save(self, store: Store) -> None:
        """Persist ``store`` to the underlying location."""
        ...
