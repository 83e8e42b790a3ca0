"""
File operation handlers.

Every handler takes the `Session`, parses `session.argv` and returns an exit
status. In the shell, arguments are paths on the live connection; when
invoked as a single-shot alias (e.g. `gfcat glfs://host/vol/file`) they are
full URLs and the handler opens the connection itself. The session owns that
connection either way, so teardown closes it.
"""

import argparse
import functools
import os
import stat as stat_mod
import sys
import time
from collections import deque
from datetime import datetime
from typing import Callable, Tuple

import structlog

from .errors import StorageError, UrlError
from .session import Session
from .storage import StorageConnection
from .url import StorageUrl

logger = structlog.get_logger(__name__)

CHUNK_SIZE = 128 * 1024
FOLLOW_INTERVAL = 1.0

Handler = Callable[[Session], int]


def resolve_target(session: Session, arg: str) -> Tuple[StorageConnection, str]:
    """Maps a command argument to (connection, path inside the volume)."""
    if session.in_shell:
        return session.require_connection(), arg
    url = StorageUrl.parse(arg)
    if session.connection is None:
        session.connect(url)
    elif session.connection_string != url.connection_string:
        raise StorageError(f"{arg}: all arguments must be on {session.connection_string}")
    return session.connection, url.path or "/"


def operation(build_parser: Callable[[str], argparse.ArgumentParser]):
    """Turns `body(session, args) -> int` into a handler with argv parsing and error reporting."""

    def decorator(body: Callable[[Session, argparse.Namespace], int]) -> Handler:
        @functools.wraps(body)
        def handler(session: Session) -> int:
            argv = session.argv or [body.__name__]
            parser = build_parser(session.program_name)
            try:
                args = parser.parse_args(argv[1:])
            except SystemExit:
                return 1
            try:
                return body(session, args)
            except (StorageError, UrlError) as e:
                session.error(str(e))
                return 1
            except OSError as e:
                session.error(e.strerror or str(e))
                return 1

        return handler

    return decorator


def _parser(prog: str, description: str) -> argparse.ArgumentParser:
    return argparse.ArgumentParser(prog=prog, description=description, add_help=False)


def _write_bytes(chunk: bytes) -> None:
    sys.stdout.flush()
    sys.stdout.buffer.write(chunk)
    sys.stdout.buffer.flush()


# --- cat ---


def _cat_parser(prog: str) -> argparse.ArgumentParser:
    parser = _parser(prog, "Concatenate files to standard output.")
    parser.add_argument("paths", nargs="+")
    return parser


@operation(_cat_parser)
def cat(session: Session, args: argparse.Namespace) -> int:
    for arg in args.paths:
        connection, path = resolve_target(session, arg)
        with connection.open_read(path) as f:
            for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
                _write_bytes(chunk)
    return 0


# --- cp ---


def _cp_parser(prog: str) -> argparse.ArgumentParser:
    parser = _parser(prog, "Copy SOURCE to DEST.")
    parser.add_argument("source")
    parser.add_argument("dest")
    return parser


@operation(_cp_parser)
def cp(session: Session, args: argparse.Namespace) -> int:
    src_conn, src_path = resolve_target(session, args.source)
    dst_conn, dst_path = resolve_target(session, args.dest)
    try:
        if dst_conn.stat(dst_path).is_dir:
            dst_path = f"{dst_path.rstrip('/')}/{os.path.basename(src_path.rstrip('/'))}"
    except StorageError:
        pass  # destination does not exist yet
    with src_conn.open_read(src_path) as src, dst_conn.open_write(dst_path) as dst:
        for chunk in iter(lambda: src.read(CHUNK_SIZE), b""):
            dst.write(chunk)
    logger.debug("Copied file.", source=src_path, dest=dst_path)
    return 0


# --- ls ---


def _ls_parser(prog: str) -> argparse.ArgumentParser:
    parser = _parser(prog, "List directory contents.")
    parser.add_argument("-l", dest="long", action="store_true", help="use a long listing format")
    parser.add_argument("paths", nargs="*")
    return parser


def _long_line(connection: StorageConnection, path: str, name: str) -> str:
    st = connection.stat(path)
    mtime = datetime.fromtimestamp(st.mtime).strftime("%b %d %H:%M")
    return f"{stat_mod.filemode(st.mode)} {st.nlink:>3} {st.size:>10} {mtime} {name}"


@operation(_ls_parser)
def ls(session: Session, args: argparse.Namespace) -> int:
    targets = args.paths or (["/"] if session.in_shell else [])
    if not targets:
        session.error("missing URL operand")
        return 1
    for arg in targets:
        connection, path = resolve_target(session, arg)
        st = connection.stat(path)
        entries = [(path, os.path.basename(path.rstrip("/")) or path)]
        if st.is_dir:
            entries = [
                (f"{path.rstrip('/')}/{name}", name) for name in connection.listdir(path)
            ]
        if len(targets) > 1:
            print(f"{arg}:")
        for entry_path, name in entries:
            print(_long_line(connection, entry_path, name) if args.long else name)
    return 0


# --- mkdir ---


def _mkdir_parser(prog: str) -> argparse.ArgumentParser:
    parser = _parser(prog, "Create directories.")
    parser.add_argument("-p", "--parents", action="store_true", help="make parent directories as needed")
    parser.add_argument("paths", nargs="+")
    return parser


@operation(_mkdir_parser)
def mkdir(session: Session, args: argparse.Namespace) -> int:
    for arg in args.paths:
        connection, path = resolve_target(session, arg)
        connection.mkdir(path, parents=args.parents)
    return 0


# --- rm ---


def _rm_parser(prog: str) -> argparse.ArgumentParser:
    parser = _parser(prog, "Remove files or directories.")
    parser.add_argument("-r", "--recursive", action="store_true", help="remove directories and their contents")
    parser.add_argument("paths", nargs="+")
    return parser


def _remove_tree(connection: StorageConnection, path: str) -> None:
    for name in connection.listdir(path):
        child = f"{path.rstrip('/')}/{name}"
        if connection.stat(child).is_dir:
            _remove_tree(connection, child)
        else:
            connection.remove(child)
    connection.rmdir(path)


@operation(_rm_parser)
def rm(session: Session, args: argparse.Namespace) -> int:
    status = 0
    for arg in args.paths:
        connection, path = resolve_target(session, arg)
        if connection.stat(path).is_dir:
            if not args.recursive:
                session.error(f"cannot remove '{arg}': Is a directory")
                status = 1
                continue
            _remove_tree(connection, path)
        else:
            connection.remove(path)
    return status


# --- stat ---


def _stat_parser(prog: str) -> argparse.ArgumentParser:
    parser = _parser(prog, "Display file status.")
    parser.add_argument("paths", nargs="+")
    return parser


@operation(_stat_parser)
def stat(session: Session, args: argparse.Namespace) -> int:
    for arg in args.paths:
        connection, path = resolve_target(session, arg)
        st = connection.stat(path)
        kind = "directory" if st.is_dir else "regular file"
        modified = datetime.fromtimestamp(st.mtime).isoformat(sep=" ")
        print(f"  File: '{arg}'")
        print(f"  Size: {st.size:<15} {kind}")
        print(f"Access: ({stat_mod.S_IMODE(st.mode):04o}/{stat_mod.filemode(st.mode)})  Uid: {st.uid}  Gid: {st.gid}")
        print(f"Modify: {modified}")
    return 0


# --- tail ---


def _tail_parser(prog: str) -> argparse.ArgumentParser:
    parser = _parser(prog, "Output the last part of a file.")
    parser.add_argument("-n", "--lines", type=int, default=10, help="output the last N lines")
    parser.add_argument("-f", "--follow", action="store_true", help="output appended data as the file grows")
    parser.add_argument("path")
    return parser


@operation(_tail_parser)
def tail(session: Session, args: argparse.Namespace) -> int:
    connection, path = resolve_target(session, args.path)
    with connection.open_read(path) as f:
        lines = deque(f, maxlen=max(args.lines, 0))
        for line in lines:
            _write_bytes(line)
        offset = f.tell()
    while args.follow:
        time.sleep(FOLLOW_INTERVAL)
        size = connection.stat(path).size
        if size < offset:
            offset = 0
        if size == offset:
            continue
        with connection.open_read(path) as f:
            f.seek(offset)
            chunk = f.read(size - offset)
        _write_bytes(chunk)
        offset += len(chunk)
    return 0
