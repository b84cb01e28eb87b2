"""Wrapper script and session-directory management.

The session directory is named after a hash of the real executable, so the
wrapper inside it is shared by every run (and every concurrent session) of the
same tool. Only the private store file is unique per run, and its location
reaches the wrapper through the environment.
"""

from __future__ import annotations

import hashlib
import os
import secrets
import shlex
import shutil
import stat
import sys
import time
from pathlib import Path
from typing import List, Sequence, Union

from common.config import DB_ENV, QUIET_ENV, SESSION_STORE_ENV
from common.errors import ImpersonationError
from common.logger import get_logger

SESSION_PREFIX = "imposter-pass-"
DIGEST_CHARS = 16
CHUNK_SIZE = 1 << 16
DIR_MODE = 0o700
STORE_FILE_MODE = 0o600


def current_command() -> List[str]:
    """Command line that re-runs the running CLI.

    A console script is executed directly; a ``.py`` file is run through the
    current interpreter.
    """
    argv0 = sys.argv[0]
    if os.sep not in argv0:
        argv0 = shutil.which(argv0) or argv0
    path = Path(argv0).resolve()
    if path.suffix == ".py":
        return [sys.executable, str(path)]
    return [str(path)]


def executable_digest(real_command: Sequence[str]) -> str:
    """sha256 over the executable's bytes and the full command line."""
    digest = hashlib.sha256()
    with open(real_command[0], "rb") as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            digest.update(chunk)
    for arg in real_command:
        digest.update(b"\0")
        digest.update(os.fsencode(arg))
    return digest.hexdigest()


def session_directory(real_command: Sequence[str], temp_root: Union[str, Path]) -> Path:
    return Path(temp_root) / (SESSION_PREFIX + executable_digest(real_command)[:DIGEST_CHARS])


def wrapper_script(real_command: Sequence[str]) -> str:
    command = " ".join(shlex.quote(arg) for arg in real_command)
    return (
        "#!/bin/sh\n"
        "# Generated by imposter-pass. Forwards to the real tool with a private store.\n"
        f"{QUIET_ENV}=true\n"
        f"export {QUIET_ENV}\n"
        f'{DB_ENV}="${{{SESSION_STORE_ENV}:?not inside an imposter-pass session}}"\n'
        f"export {DB_ENV}\n"
        f'exec {command} "$@"\n'
    )


def ensure_private_directory(directory: Path) -> None:
    """Create ``directory`` as 0700, or accept it only if it already is private to us.

    The name is predictable and lives in a shared temp root, so a directory
    someone else created (or can write to) must not be used.
    """
    directory.mkdir(parents=True, mode=DIR_MODE, exist_ok=True)
    st = os.lstat(directory)
    if stat.S_ISLNK(st.st_mode) or not stat.S_ISDIR(st.st_mode):
        raise ImpersonationError(f"session directory {directory} is not a plain directory")
    if hasattr(os, "getuid") and st.st_uid != os.getuid():
        raise ImpersonationError(f"session directory {directory} is owned by another user")
    if st.st_mode & (stat.S_IWGRP | stat.S_IWOTH):
        raise ImpersonationError(f"session directory {directory} is writable by other users")


def materialize_wrapper(directory: Path, tool_name: str, real_command: Sequence[str]) -> Path:
    """Write the wrapper unless an identical one is already there."""
    log = get_logger(__name__)
    ensure_private_directory(directory)
    target = directory / tool_name
    content = wrapper_script(real_command)

    if target.is_file() and target.read_text(encoding="utf-8") == content:
        log.debug("wrapper: reusing path=%s", target)
        return target

    tmp_path = directory / f".{tool_name}.{os.getpid()}.{secrets.token_hex(4)}.tmp"
    tmp_path.write_text(content, encoding="utf-8")
    tmp_path.chmod(stat.S_IRWXU | stat.S_IRGRP | stat.S_IXGRP | stat.S_IROTH | stat.S_IXOTH)
    os.replace(tmp_path, target)
    log.info("wrapper: written path=%s", target)
    return target


def new_store_file(directory: Path) -> Path:
    """Unique per-invocation store filename; time, pid and 64 random bits."""
    return directory / f"store-{time.time_ns()}-{os.getpid()}-{secrets.token_hex(8)}.json"


def create_store_file(path: Path, content: str) -> None:
    """Write a new store file readable by the owner only; never overwrite."""
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, STORE_FILE_MODE)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(content)
