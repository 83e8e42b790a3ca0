from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Optional

import structlog

from . import operations
from .errors import GfcliError
from .options import ParseAction, parse_options, usage_text, version_text
from .session import Session, console
from .url import StorageUrl

logger = structlog.get_logger(__name__)

Handler = Callable[[Session], int]

EXIT_NOT_IMPLEMENTED = 2

SHELL_COMMANDS = (
    "cat",
    "connect",
    "cp",
    "disconnect",
    "help",
    "ls",
    "mkdir",
    "quit",
    "rm",
    "stat",
    "tail",
)


@dataclass(frozen=True)
class CommandDescriptor:
    """Binds a command name, and the alias it can be invoked as, to its handler."""

    name: str
    handler: Handler
    alias: Optional[str] = None

    def matches(self, name: str) -> bool:
        return name == self.name or (self.alias is not None and name == self.alias)


class CommandTable:
    """A fixed, ordered set of commands. Names and aliases must all be distinct."""

    def __init__(self, descriptors: Iterable[CommandDescriptor]):
        self._descriptors = tuple(descriptors)
        seen = set()
        for descriptor in self._descriptors:
            for name in (descriptor.name, descriptor.alias):
                if name is None:
                    continue
                if name in seen:
                    raise ValueError(f"Duplicate command name or alias '{name}'.")
                seen.add(name)

    def resolve(self, name: str) -> Optional[CommandDescriptor]:
        """Finds a command by exact name or alias; the first match wins."""
        for descriptor in self._descriptors:
            if descriptor.matches(name):
                return descriptor
        return None

    def resolve_invocation(self, program_name: str) -> Optional[CommandDescriptor]:
        """Finds the single-shot command the process was invoked as, by alias only."""
        for descriptor in self._descriptors:
            if descriptor.alias is not None and descriptor.alias == program_name:
                return descriptor
        return None

    def names(self) -> List[str]:
        return [descriptor.name for descriptor in self._descriptors]

    def __iter__(self) -> Iterator[CommandDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)


# --- Built-in handlers ---


def connect(session: Session) -> int:
    """`connect [-o xlator.key=value]... URL` opens the session's connection."""
    argv = session.argv or ["connect"]
    try:
        outcome = parse_options(argv[1:], session.options)
    except GfcliError as e:
        session.error(str(e))
        return 1
    if outcome.action is ParseAction.HELP:
        console.print(usage_text(argv[0]), markup=False, highlight=False)
        return 0
    if outcome.action is ParseAction.VERSION:
        console.print(version_text(argv[0]), markup=False, highlight=False)
        return 0
    if not outcome.url:
        session.error("missing URL operand")
        return 1
    try:
        session.connect(StorageUrl.parse(outcome.url), outcome.options)
    except GfcliError as e:
        session.error(str(e))
        return 1
    return 0


def disconnect(session: Session) -> int:
    if not session.connected:
        session.error("not connected")
        return 1
    session.disconnect()
    return 0


def shell_usage(session: Session) -> int:
    lines = ["The following commands are supported:"]
    lines.extend(f"* {name}" for name in SHELL_COMMANDS)
    console.print("\n".join(lines), markup=False, highlight=False)
    return 0


def handle_quit(session: Session) -> int:
    session.is_running = False
    return 0


def not_implemented(session: Session) -> int:
    session.error("not implemented")
    return EXIT_NOT_IMPLEMENTED


def build_command_table() -> CommandTable:
    return CommandTable(
        [
            CommandDescriptor("connect", connect),
            CommandDescriptor("disconnect", disconnect),
            CommandDescriptor("cat", operations.cat, alias="gfcat"),
            CommandDescriptor("cp", operations.cp, alias="gfcp"),
            CommandDescriptor("help", shell_usage),
            CommandDescriptor("ls", operations.ls, alias="gfls"),
            CommandDescriptor("mkdir", operations.mkdir, alias="gfmkdir"),
            CommandDescriptor("mv", not_implemented, alias="gfmv"),
            CommandDescriptor("quit", handle_quit),
            CommandDescriptor("rm", operations.rm, alias="gfrm"),
            CommandDescriptor("stat", operations.stat, alias="gfstat"),
            CommandDescriptor("tail", operations.tail, alias="gftail"),
        ]
    )
