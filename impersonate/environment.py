"""Child-process environment construction.

This is a pure function of its inputs: the parent's own ``os.environ`` is
never modified.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Mapping, Union

from common.config import SESSION_STORE_ENV

PATH_ENV = "PATH"


def prepend_search_path(current: str, directory: Union[str, Path]) -> str:
    if not current:
        return str(directory)
    return os.pathsep.join([str(directory), current])


def build_child_environment(
    base: Mapping[str, str],
    session_dir: Union[str, Path],
    store_file: Union[str, Path],
) -> Dict[str, str]:
    """Copy ``base`` with ``session_dir`` first on PATH and the store file announced."""
    env = dict(base)
    env[PATH_ENV] = prepend_search_path(env.get(PATH_ENV, ""), session_dir)
    env[SESSION_STORE_ENV] = str(store_file)
    return env
