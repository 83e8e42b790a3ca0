import signal
from typing import Optional

import structlog

from .commands import CommandTable
from .config import TOOL_NAME
from .errors import GfcliError
from .reader import LineReader
from .session import Session, err_console
from .tokenizer import command_name, tokenize

logger = structlog.get_logger(__name__)


def prompt_for(session: Session) -> str:
    """The prompt is the only place the user can see whether a connection is open."""
    if session.connection_string:
        return f"{TOOL_NAME} {session.connection_string}> "
    return f"{TOOL_NAME}> "


class InterruptGuard:
    """
    Routes SIGINT to the session while the block runs.

    The handler only records the interrupt and raises KeyboardInterrupt so a
    blocking read or a running handler unwinds; teardown happens afterwards,
    on the main flow, through `Session.close()`.
    """

    def __init__(self, session: Session):
        self.session = session
        self._previous = None

    def __enter__(self) -> "InterruptGuard":
        self._previous = signal.signal(signal.SIGINT, self.handle)
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._previous is not None:
            signal.signal(signal.SIGINT, self._previous)
        return False

    def handle(self, signum, frame) -> None:
        logger.info("Interrupt received, shutting down.")
        self.session.request_cancel()
        raise KeyboardInterrupt


class Shell:
    """The read-dispatch loop of interactive mode."""

    def __init__(self, session: Session, table: CommandTable, reader: LineReader):
        self.session = session
        self.table = table
        self.reader = reader

    def run(self) -> int:
        """
        Runs until `quit`, end of input or an interrupt, all of which return 0.

        A failing read returns 1, as does running out of memory while
        splitting a line. Errors of individual commands never end the loop.
        """
        session = self.session
        session.in_shell = True
        while session.is_running and not session.cancelled:
            try:
                line = self.reader.read_line(prompt_for(session))
            except EOFError:
                logger.debug("End of input.")
                print()
                break
            except KeyboardInterrupt:
                session.request_cancel()
                print()
                break
            except OSError as e:
                err_console.print(f"{TOOL_NAME}: failed to read input: {e}", markup=False)
                return 1

            try:
                self.dispatch(line)
            except MemoryError:
                err_console.print(f"{TOOL_NAME}: out of memory", markup=False)
                return 1
            except KeyboardInterrupt:
                session.request_cancel()
                print()
                break
        return 0

    def dispatch(self, line: str) -> Optional[int]:
        """Resolves and runs one line; returns the handler's status, or None if nothing ran."""
        name = command_name(line)
        if not name:
            return None

        descriptor = self.table.resolve(name)
        if descriptor is None:
            err_console.print(
                f"Unknown command '{name}'. Type 'help' for more.", markup=False
            )
            return None

        argv = tokenize(line)
        argv[0] = name
        logger.debug("Dispatching command.", command=descriptor.name, argc=len(argv))
        with self.session.running(argv):
            try:
                return descriptor.handler(self.session)
            except MemoryError:
                raise
            except GfcliError as e:
                self.session.error(str(e))
                return 1
            except Exception as e:
                logger.exception("Command failed.", command=descriptor.name)
                self.session.error(f"command failed: {e}")
                return 1
