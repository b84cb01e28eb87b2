"""Store: ordered mapping from :class:`PathKey` to secret text.

Folders are never materialized; they exist only as shared key prefixes.
Iteration is always in ascending key order, which the tree renderer depends on.
"""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

from common.errors import InvalidPath, SerializationError
from passstore.entry import Entry
from passstore.pathkey import PathKey, PathLike

StoreData = Dict[str, str]


class MatchKind(enum.Enum):
    NONE = "none"
    SINGLE = "single"
    MULTIPLE = "multiple"


@dataclass(frozen=True)
class SubtreeMatch:
    """How many entries sit at or under a prefix. Removal policy is the caller's."""

    kind: MatchKind
    count: int

    @classmethod
    def of(cls, count: int) -> "SubtreeMatch":
        if count == 0:
            return cls(MatchKind.NONE, 0)
        if count == 1:
            return cls(MatchKind.SINGLE, 1)
        return cls(MatchKind.MULTIPLE, count)


class Slot:
    """Handle on a single key, returned by :meth:`Store.upsert`."""

    def __init__(self, store: "Store", key: PathKey):
        self._store = store
        self.key = key

    @property
    def occupied(self) -> bool:
        return self.key in self._store._entries

    @property
    def value(self) -> Optional[str]:
        return self._store._entries.get(self.key)

    def set(self, value: str) -> None:
        self._store._entries[self.key] = value


class Listing:
    """Lazy, restartable view of the entries at or under a prefix."""

    def __init__(self, store: "Store", prefix: Optional[PathKey]):
        self._store = store
        self.prefix = prefix

    def __iter__(self) -> Iterator[Tuple[PathKey, str]]:
        entries = self._store._entries
        for key in sorted(entries):
            if self.prefix is None or self.prefix.is_ancestor_of(key):
                yield key, entries[key]

    def keys(self) -> Iterator[PathKey]:
        return (key for key, _ in self)


class Store:
    def __init__(self, entries: Optional[Mapping[PathLike, str]] = None):
        self._entries: Dict[PathKey, str] = {}
        for raw, value in (entries or {}).items():
            self._insert_new(PathKey.normalize(raw, allow_root=False), value)

    def _insert_new(self, key: PathKey, value: str) -> None:
        if key in self._entries:
            raise SerializationError(f"duplicate key in store: {key.text!r}")
        self._entries[key] = value

    # -- queries ----------------------------------------------------------
    def list(self, prefix: Optional[PathLike] = None) -> Listing:
        """Entries equal to or under ``prefix`` (everything when None), in key order."""
        if prefix is not None:
            prefix = PathKey.normalize(prefix)
        return Listing(self, prefix)

    def get(self, key: PathLike) -> Optional[str]:
        return self._entries.get(PathKey.normalize(key))

    def entry(self, key: PathLike) -> Optional[Entry]:
        value = self.get(key)
        return Entry(value) if value is not None else None

    def match(self, prefix: PathLike) -> SubtreeMatch:
        return SubtreeMatch.of(sum(1 for _ in self.list(prefix)))

    # -- mutation ---------------------------------------------------------
    def upsert(self, key: PathLike) -> Slot:
        return Slot(self, PathKey.normalize(key, allow_root=False))

    def remove_subtree(self, prefix: PathLike) -> int:
        doomed = list(self.list(prefix).keys())
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def copy(self) -> "Store":
        clone = Store()
        clone._entries = dict(self._entries)
        return clone

    # -- serialization ----------------------------------------------------
    def to_dict(self) -> StoreData:
        return {key.text: value for key, value in self.list()}

    @classmethod
    def from_dict(cls, data: Any) -> "Store":
        if not isinstance(data, dict):
            raise SerializationError(f"store must be a JSON object, got {type(data).__name__}")
        store = cls()
        for raw, value in data.items():
            if not isinstance(value, str):
                raise SerializationError(f"value for {raw!r} must be a string")
            try:
                key = PathKey.normalize(raw, allow_root=False)
            except InvalidPath as exc:
                raise SerializationError(f"invalid key in store: {raw!r}") from exc
            store._insert_new(key, value)
        return store

    def to_json(self, pretty: bool = False) -> str:
        return json.dumps(self.to_dict(), indent=2 if pretty else None, ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str) -> "Store":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SerializationError(f"(de)serialization error: {exc}") from exc
        return cls.from_dict(data)

    # -- dunder -----------------------------------------------------------
    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        if isinstance(key, str):
            key = PathKey.normalize(key)
        return key in self._entries

    def __iter__(self) -> Iterator[PathKey]:
        return iter(sorted(self._entries))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Store):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"Store({len(self._entries)} entries)"
