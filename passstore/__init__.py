from passstore.backends import FileBackend, InlineBackend, MemoryBackend, resolve_backend, save_if_changed
from passstore.base import StoreBackend
from passstore.entry import Entry
from passstore.pathkey import PathKey, normalize
from passstore.store import MatchKind, Slot, Store, SubtreeMatch

__all__ = [
    "Entry",
    "FileBackend",
    "InlineBackend",
    "MatchKind",
    "MemoryBackend",
    "PathKey",
    "Slot",
    "Store",
    "StoreBackend",
    "SubtreeMatch",
    "normalize",
    "resolve_backend",
    "save_if_changed",
]
