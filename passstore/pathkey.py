"""Hierarchical, security-normalized keys for the password store.

A :class:`PathKey` looks like a relative filesystem path (``email/work``) but
never touches the filesystem. Parsing untrusted text rejects ``..`` outright:
the store used to be backed by real directories, so a traversal segment is a
security boundary, not something to quietly clean up.
"""

from __future__ import annotations

import functools
import os
from typing import Iterator, Sequence, Tuple, Union

from common.errors import InvalidPath

SEPARATOR = "/"
PARENT = ".."
CURRENT = "."

PathLike = Union["PathKey", str]


def _split(raw: str) -> list[str]:
    if os.sep != SEPARATOR:
        raw = raw.replace(os.sep, SEPARATOR)
    return raw.split(SEPARATOR)


@functools.total_ordering
class PathKey:
    """Immutable sequence of path segments. The empty key is the store root."""

    __slots__ = ("_segments",)

    def __init__(self, segments: Sequence[str] = ()):
        self._segments: Tuple[str, ...] = tuple(segments)

    @classmethod
    def normalize(cls, raw: PathLike, allow_root: bool = True) -> "PathKey":
        """Parse untrusted text into a key.

        Empty and ``.`` segments (and so any leading ``/``) are dropped. A
        ``..`` segment raises :class:`InvalidPath` carrying the raw input.
        With ``allow_root=False`` text that normalizes to the root is rejected
        too, which is what callers naming a single entry want.
        """
        if isinstance(raw, PathKey):
            key = raw
        else:
            segments = []
            for segment in _split(str(raw)):
                if segment == PARENT:
                    raise InvalidPath(raw)
                if segment in ("", CURRENT):
                    continue
                segments.append(segment)
            key = cls(segments)
        if not allow_root and key.is_root:
            raise InvalidPath(raw)
        return key

    # -- views ------------------------------------------------------------
    @property
    def segments(self) -> Tuple[str, ...]:
        return self._segments

    @property
    def text(self) -> str:
        return SEPARATOR.join(self._segments)

    @property
    def is_root(self) -> bool:
        return not self._segments

    @property
    def name(self) -> str:
        return self._segments[-1] if self._segments else ""

    @property
    def parent(self) -> "PathKey":
        return PathKey(self._segments[:-1])

    # -- relations --------------------------------------------------------
    def is_ancestor_of(self, other: "PathKey") -> bool:
        """True iff ``other`` starts with this key, segment by segment.

        A key counts as its own ancestor; ``ab`` is not an ancestor of ``abc``.
        """
        n = len(self._segments)
        return other._segments[:n] == self._segments

    def common_prefix(self, other: "PathKey") -> "PathKey":
        shared = []
        for mine, theirs in zip(self._segments, other._segments):
            if mine != theirs:
                break
            shared.append(mine)
        return PathKey(shared)

    def relative_to(self, prefix: "PathKey") -> "PathKey":
        if not prefix.is_ancestor_of(self):
            raise ValueError(f"{self.text!r} is not under {prefix.text!r}")
        return PathKey(self._segments[len(prefix._segments):])

    def joinpath(self, *segments: str) -> "PathKey":
        return PathKey(self._segments + tuple(segments))

    # -- dunder -----------------------------------------------------------
    def __iter__(self) -> Iterator[str]:
        return iter(self._segments)

    def __len__(self) -> int:
        return len(self._segments)

    def __hash__(self) -> int:
        return hash(self._segments)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PathKey):
            return NotImplemented
        return self._segments == other._segments

    def __lt__(self, other: "PathKey") -> bool:
        if not isinstance(other, PathKey):
            return NotImplemented
        return self._segments < other._segments

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"PathKey({self.text!r})"


def normalize(raw: PathLike, allow_root: bool = True) -> PathKey:
    return PathKey.normalize(raw, allow_root=allow_root)
