"""Error taxonomy shared by the store, the impersonation engine and the CLI."""

from __future__ import annotations

from typing import Union


class PassError(Exception):
    """Base class for every error the CLI knows how to report."""


class InvalidPath(PassError, ValueError):
    """Untrusted path text contained a parent-traversal segment (or named the root)."""

    def __init__(self, raw: object):
        self.raw = raw
        super().__init__(f"invalid path: {raw}")


class NotInStore(PassError, KeyError):
    def __init__(self, path: Union[str, object]):
        self.path = str(path)
        super().__init__(self.path)

    def __str__(self) -> str:
        return f"Error: {self.path} is not in the password store."


class IsADirectory(PassError):
    def __init__(self, path: Union[str, object]):
        self.path = str(path)
        super().__init__(f"rm: cannot remove '{self.path}': Is a directory")


class SerializationError(PassError, ValueError):
    """A persisted or exchanged store snapshot could not be (de)serialized."""


class ImpersonationError(PassError, RuntimeError):
    """Filesystem or process-spawn failure while impersonating the real tool."""
