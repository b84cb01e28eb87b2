#!/usr/bin/env python3
"""
imposter-pass CLI: a look-alike of `pass` backed by an unencrypted JSON store.

Usage:
  python -m pass_cli ls [pass-name]
  python -m pass_cli show [pass-name] [--password | --field KEY]
  python -m pass_cli insert [-e | -m] [-f] <pass-name>
  python -m pass_cli rm [-r] [-f] <pass-name>
  python -m pass_cli dump-db [--pretty]
  python -m pass_cli impersonate <program> [arguments...]

Options:
  --db <file|json>  Store location (or IMPOSTER_PASS_DB)
  -q, --quiet       No banners or warnings (or IMPOSTER_PASS_QUIET)
"""
import argparse
import getpass
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

# Allow running from repo root
sys.path.insert(0, str(Path(__file__).resolve().parent))

from common.config import load_settings
from common.errors import IsADirectory, NotInStore, PassError
from common.logger import get_logger
from impersonate import ImpersonationEngine
from passstore import MatchKind, PathKey, Store, resolve_backend, save_if_changed
from passstore.tree import ls, show

BANNER = (
    "BEWARE! THIS IS NOT THE REAL PASS (https://www.passwordstore.org/), BUT ONLY A CLEVER IMPOSTER!\n"
    "If you did not expect to see this message, STOP doing whatever you're doing!"
)


def confirm(prompt: str) -> bool:
    sys.stdout.write(prompt)
    sys.stdout.flush()
    reply = sys.stdin.readline()
    return reply.strip().lower() == "y"


def read_secret(prompt: str) -> str:
    return getpass.getpass(prompt)


def build_parser(settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="imposter-pass",
        description="A pass look-alike with an UNENCRYPTED store",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  ls [pass-name]             List entries as a tree
  show [pass-name]           Show an entry (or a tree for folders)
  insert <pass-name>         Insert a new entry
  rm <pass-name>             Remove an entry or folder
  dump-db                    Print the store as JSON
  impersonate <program> ...  Run a program with this tool standing in for pass
        """,
    )
    parser.add_argument("--db", default=settings.db, help="Store file path or inline JSON object")
    parser.add_argument("-q", "--quiet", action="store_true", default=settings.quiet, help="Suppress warnings")
    sub = parser.add_subparsers(dest="command")

    p_ls = sub.add_parser("ls", help="List entries")
    p_ls.add_argument("name", nargs="?", metavar="pass-name")

    p_show = sub.add_parser("show", help="Show an entry")
    p_show.add_argument("name", nargs="?", metavar="pass-name")
    which = p_show.add_mutually_exclusive_group()
    which.add_argument("--password", action="store_true", help="Only print the first line")
    which.add_argument("--field", metavar="KEY", help="Only print one metadata field")

    p_insert = sub.add_parser("insert", help="Insert an entry")
    p_insert.add_argument("name", metavar="pass-name")
    mode = p_insert.add_mutually_exclusive_group()
    mode.add_argument("-e", "--echo", action="store_true", help="Read a single echoed line")
    mode.add_argument("-m", "--multiline", action="store_true", help="Read until EOF")
    p_insert.add_argument("-f", "--force", action="store_true", help="Overwrite without asking")

    p_rm = sub.add_parser("rm", help="Remove an entry or folder")
    p_rm.add_argument("name", metavar="pass-name")
    p_rm.add_argument("-r", "--recursive", action="store_true", help="Remove folders")
    p_rm.add_argument("-f", "--force", action="store_true", help="Do not ask for confirmation")

    p_dump = sub.add_parser("dump-db", help="Print the store as JSON")
    p_dump.add_argument("--pretty", action="store_true")

    p_imp = sub.add_parser("impersonate", help="Run a program against a private copy of the store")
    p_imp.add_argument("program")
    p_imp.add_argument("arguments", nargs=argparse.REMAINDER)

    return parser


def cmd_show(store: Store, args: argparse.Namespace) -> int:
    if args.password or args.field:
        key = PathKey.normalize(args.name, allow_root=False)
        entry = store.entry(key)
        if entry is None:
            raise NotInStore(key.text)
        value = entry.password if args.password else entry.field(args.field)
        if value is None:
            what = "password" if args.password else f"field {args.field!r}"
            print(f"Error: no {what} in {args.name}", file=sys.stderr)
            return 1
        print(value)
        return 0
    show(store, args.name)
    return 0


def cmd_insert(store: Store, args: argparse.Namespace) -> int:
    slot = store.upsert(args.name)
    name = slot.key.text

    if slot.occupied and not args.force:
        if not confirm(f"An entry already exists for {name}. Overwrite it? [y/N] "):
            return 0

    if args.echo:
        sys.stdout.write(f"Enter password for {name}: ")
        sys.stdout.flush()
        secret = sys.stdin.readline().rstrip("\n")
    elif args.multiline:
        print(f"Enter contents of {name} and press Ctrl+D when finished:\n")
        secret = sys.stdin.read()
    else:
        secret = read_secret(f"Enter password for {name}: ")
        if read_secret(f"Retype password for {name}: ") != secret:
            print("Error: the entered passwords do not match.", file=sys.stderr)
            return 1

    slot.set(secret)
    return 0


def cmd_rm(store: Store, args: argparse.Namespace) -> int:
    key = PathKey.normalize(args.name, allow_root=False)
    match = store.match(key)

    if match.kind is MatchKind.NONE:
        raise NotInStore(key.text)
    if match.kind is MatchKind.MULTIPLE and not args.recursive:
        raise IsADirectory(key.text)

    if args.force or confirm(f"Are you sure you would like to delete {key.text}? [y/N] "):
        removed = store.remove_subtree(key)
        get_logger(__name__).info("rm: removed path=%s entries=%d", key.text, removed)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = load_settings()
    parser = build_parser(settings)
    parsed = parser.parse_args(argv)
    if parsed.command == "show" and (parsed.password or parsed.field) and not parsed.name:
        parser.error("show: --password and --field need a pass-name")

    cmd = parsed.command
    if not cmd:
        parser.print_help()
        return 0

    backend = resolve_backend(parsed.db)
    if not parsed.quiet:
        print(BANNER, file=sys.stderr)
        print(backend.describe(), file=sys.stderr)

    try:
        original = backend.load()
        store = original.copy()
        status = 0

        if cmd == "ls":
            ls(store, parsed.name)
        elif cmd == "show":
            status = cmd_show(store, parsed)
        elif cmd == "insert":
            status = cmd_insert(store, parsed)
        elif cmd == "rm":
            status = cmd_rm(store, parsed)
        elif cmd == "dump-db":
            print(store.to_json(pretty=parsed.pretty))
        elif cmd == "impersonate":
            engine = ImpersonationEngine.from_settings(replace(settings, quiet=parsed.quiet))
            result = engine.run(parsed.program, parsed.arguments, store)
            store = result.store
            status = result.exit_status

        if save_if_changed(backend, original, store) and not backend.persistent and not parsed.quiet:
            print(store.to_json(pretty=True))

    except (PassError, OSError) as e:
        print(str(e), file=sys.stderr)
        return 1

    return status


if __name__ == "__main__":
    raise SystemExit(main())
