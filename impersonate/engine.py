"""Run a program that believes it is talking to the real ``pass``.

The engine puts a wrapper named after the tool first on the child's PATH and
gives it a private copy of the store. When the child exits, the copy is read
back and handed to the caller, who decides whether to save it.
"""

from __future__ import annotations

import os
import subprocess
import sys
from typing import Callable, Mapping, Optional, Sequence

from common.config import DEFAULT_TOOL_NAME, Settings
from common.errors import ImpersonationError, SerializationError
from common.logger import get_logger
from impersonate.environment import build_child_environment
from impersonate.types import ImpersonationResult, Session
from impersonate.wrapper import (
    create_store_file,
    current_command,
    materialize_wrapper,
    new_store_file,
    session_directory,
)
from passstore.store import Store


def _warn_stderr(message: str) -> None:
    print(message, file=sys.stderr)


class ImpersonationEngine:
    def __init__(
        self,
        real_command: Optional[Sequence[str]] = None,
        temp_root: Optional[str] = None,
        tool_name: str = DEFAULT_TOOL_NAME,
        quiet: bool = False,
        warn: Callable[[str], None] = _warn_stderr,
    ):
        """
        real_command: command line re-running the real tool; defaults to the
            running CLI.
        temp_root: where session directories are created; defaults to the
            platform temp dir.
        """
        self.real_command = list(real_command or current_command())
        self.temp_root = temp_root or Settings().temp_root
        self.tool_name = tool_name
        self.quiet = quiet
        self._warn = warn

    @classmethod
    def from_settings(
        cls, settings: Settings, real_command: Optional[Sequence[str]] = None
    ) -> "ImpersonationEngine":
        return cls(
            real_command=real_command,
            temp_root=settings.temp_root,
            tool_name=settings.tool_name,
            quiet=settings.quiet,
        )

    def prepare(self, store: Store) -> Session:
        """Create the session directory and wrapper, then snapshot ``store``."""
        log = get_logger(__name__)
        try:
            directory = session_directory(self.real_command, self.temp_root)
            wrapper = materialize_wrapper(directory, self.tool_name, self.real_command)
            store_file = new_store_file(directory)
            create_store_file(store_file, store.to_json())
        except OSError as exc:
            raise ImpersonationError(f"could not prepare impersonation session: {exc}") from exc
        log.debug("impersonate: session ready dir=%s store=%s", directory, store_file)
        return Session(directory=directory, wrapper=wrapper, store_file=store_file)

    def collect(self, session: Session) -> Store:
        """Read back the session store. On failure the file is left for recovery."""
        try:
            text = session.store_file.read_text(encoding="utf-8")
        except OSError as exc:
            raise ImpersonationError(f"could not read session store {session.store_file}: {exc}") from exc
        try:
            return Store.from_json(text)
        except SerializationError as exc:
            raise SerializationError(f"{session.store_file}: {exc}") from exc

    def discard(self, session: Session) -> None:
        try:
            session.store_file.unlink()
        except OSError as exc:
            get_logger(__name__).warning(
                "impersonate: could not remove session store path=%s error=%s",
                session.store_file,
                exc,
            )

    def run(
        self,
        program: str,
        arguments: Sequence[str],
        store: Store,
        environ: Optional[Mapping[str, str]] = None,
    ) -> ImpersonationResult:
        """Spawn ``program`` against a private copy of ``store`` and wait for it.

        ``store`` itself is never modified; the child's version is returned.
        A non-zero exit status is reported in the result, not raised.
        """
        log = get_logger(__name__)
        session = self.prepare(store)
        env = build_child_environment(
            os.environ if environ is None else environ,
            session.directory,
            session.store_file,
        )

        if not self.quiet:
            self._warn(f"Impersonating {self.tool_name!r} from {str(session.directory)!r}.")
            self._warn(
                f"The temporary store lives at {str(session.store_file)!r}. "
                "If the program is interrupted, any changes it made can be recovered from that file."
            )

        log.info("impersonate: spawn program=%s args=%d", program, len(arguments))
        try:
            completed = subprocess.run([program, *arguments], env=env)
        except OSError as exc:
            raise ImpersonationError(f"could not run {program}: {exc}") from exc

        if completed.returncode != 0:
            log.warning("impersonate: child exited with status %d", completed.returncode)

        new_store = self.collect(session)
        self.discard(session)
        return ImpersonationResult(store=new_store, returncode=completed.returncode, session=session)
