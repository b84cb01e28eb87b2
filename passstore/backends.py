"""Concrete store backends and the logic choosing between them."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from common.config import DB_ENV
from common.errors import SerializationError
from common.logger import get_logger
from passstore.base import StoreBackend
from passstore.store import Store


class FileBackend(StoreBackend):
    """Plain JSON file. THE FILE IS NOT ENCRYPTED."""

    persistent = True

    def __init__(self, file_path: str):
        self.file_path = str(file_path)

    def get_path(self) -> str:
        return self.file_path

    def describe(self) -> str:
        return (
            f"Warning: database will be saved and loaded from {self.file_path!r}. "
            "THE DATABASE IS NOT ENCRYPTED!"
        )

    def load(self) -> Store:
        log = get_logger(__name__)
        log.debug("store file: read start path=%s", self.file_path)

        if not os.path.isfile(self.file_path):
            log.debug("store file: missing, returning empty path=%s", self.file_path)
            return Store()

        with open(self.file_path, "r", encoding="utf-8") as f:
            raw = f.read()
        try:
            store = Store.from_json(raw)
        except SerializationError as exc:
            raise SerializationError(f"{self.file_path}: {exc}") from exc

        log.info("store file: read ok path=%s keys=%d", self.file_path, len(store))
        return store

    def save(self, store: Store) -> None:
        """Write the store to file. Atomic via tmp+rename."""
        log = get_logger(__name__)
        Path(self.file_path).parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.file_path + ".tmp"

        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(store.to_json(pretty=True))
            f.write("\n")

        os.replace(tmp_path, self.file_path)
        log.info("store file: write ok path=%s keys=%d", self.file_path, len(store))


class InlineBackend(StoreBackend):
    """Store given literally as a JSON object; changes are never saved."""

    def __init__(self, text: str):
        self.text = text

    def get_path(self) -> str:
        return f"${DB_ENV}"

    def describe(self) -> str:
        return (
            f"Warning: database will be loaded from the environment variable {DB_ENV}. "
            "THE DATABASE IS NOT ENCRYPTED and changes WILL NOT BE SAVED!"
        )

    def load(self) -> Store:
        return Store.from_json(self.text)

    def save(self, store: Store) -> None:
        get_logger(__name__).warning("inline store: changes are not persisted keys=%d", len(store))


class MemoryBackend(StoreBackend):
    """No backing location at all: start empty, forget everything."""

    def __init__(self, store: Optional[Store] = None):
        self._store = store.copy() if store is not None else Store()

    def get_path(self) -> str:
        return ":memory:"

    def describe(self) -> str:
        return "Warning: no database specified. Defaulting to empty database. Changes WILL NOT BE SAVED!"

    def load(self) -> Store:
        return self._store.copy()

    def save(self, store: Store) -> None:
        self._store = store.copy()


def resolve_backend(db_option: Optional[str]) -> StoreBackend:
    """Pick a backend for the ``--db`` / ``IMPOSTER_PASS_DB`` value.

    A JSON object literal is an inline store; any other text is a file path.
    """
    if not db_option:
        return MemoryBackend()
    try:
        parsed = json.loads(db_option)
    except ValueError:
        parsed = None
    if isinstance(parsed, dict):
        return InlineBackend(db_option)
    if isinstance(parsed, str):
        return FileBackend(parsed)
    return FileBackend(db_option)


def save_if_changed(backend: StoreBackend, before: Store, after: Store) -> bool:
    """Save ``after`` only when it differs from ``before``. Returns whether it did."""
    if after == before:
        get_logger(__name__).debug("store: unchanged, skipping save path=%s", backend.get_path())
        return False
    backend.save(after)
    return True
