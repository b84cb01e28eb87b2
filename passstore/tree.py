"""Render store listings as an indented tree, the way ``pass ls`` does.

Directory lines are derived from shared key prefixes. Entries arrive in
ascending key order, so all keys under a given folder are contiguous and each
folder segment is printed exactly once.
"""

from __future__ import annotations

import sys
from typing import Iterable, List, Optional, TextIO

from common.errors import NotInStore
from passstore.pathkey import PathKey, PathLike
from passstore.store import Store

STORE_TITLE = "Password Store"
INDENT = "\t"


def tree_lines(keys: Iterable[PathKey], prefix: Optional[PathKey] = None) -> List[str]:
    """Header plus one line per newly reached segment of each key."""
    ancestor = prefix or PathKey()
    lines = [STORE_TITLE if ancestor.is_root else ancestor.text]

    for key in keys:
        # The shared prefix is always an ancestor of key; a key on a new branch
        # shares less with the previous one and so rewinds to a shallower level.
        ancestor = ancestor.common_prefix(key)
        remaining = key.relative_to(ancestor)
        for segment in remaining:
            lines.append(INDENT * len(ancestor) + segment)
            ancestor = ancestor.joinpath(segment)
    return lines


def render(store: Store, prefix: Optional[PathLike] = None, raw_single: bool = True) -> str:
    """Render the entries at or under ``prefix``.

    Raises :class:`NotInStore` when a non-root prefix matches nothing; an empty
    store listed as a whole is just the header. With ``raw_single`` an exact
    single match is returned as the bare secret, without a trailing newline.
    """
    key = PathKey.normalize(prefix) if prefix is not None else PathKey()
    entries = list(store.list(key))

    if not entries and not key.is_root:
        raise NotInStore(key.text)
    if raw_single and len(entries) == 1 and entries[0][0] == key:
        return entries[0][1]
    return "\n".join(tree_lines((k for k, _ in entries), key)) + "\n"


def show(store: Store, prefix: Optional[PathLike] = None, out: Optional[TextIO] = None) -> None:
    out = out or sys.stdout
    out.write(render(store, prefix))
    out.flush()


def ls(store: Store, prefix: Optional[PathLike] = None, out: Optional[TextIO] = None) -> None:
    out = out or sys.stdout
    out.write(render(store, prefix, raw_single=False))
    out.flush()
