from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple, TYPE_CHECKING

import structlog
from rich.console import Console
from rich.table import Table

from . import storage
from .config import TOOL_NAME
from .errors import NotConnectedError, StorageError, XlatorOptionError
from .url import StorageUrl

if TYPE_CHECKING:
    from .storage.base import StorageConnection

logger = structlog.get_logger(__name__)

console = Console()
err_console = Console(stderr=True)


@dataclass(frozen=True)
class XlatorOption:
    """A translator option such as `*replicate*.data-self-heal=on`."""

    key: str
    value: str

    @classmethod
    def parse(cls, text: str) -> "XlatorOption":
        if "=" not in text:
            raise XlatorOptionError(text, "missing '=' between key and value")
        key, value = text.split("=", 1)
        if "." not in key:
            raise XlatorOptionError(text, "key must take the form xlator.key")
        xlator, name = key.rsplit(".", 1)
        if not xlator or not name or not value:
            raise XlatorOptionError(text, "translator, key and value must be non-empty")
        return cls(key=key, value=value)

    @property
    def xlator(self) -> str:
        return self.key.rsplit(".", 1)[0]

    @property
    def name(self) -> str:
        return self.key.rsplit(".", 1)[1]


@dataclass
class Options:
    debug: bool = False
    xlator_options: List[XlatorOption] = field(default_factory=list)

    def pairs(self) -> List[Tuple[str, str]]:
        return [(option.key, option.value) for option in self.xlator_options]


def print_xlator_options(options: Options) -> None:
    """Dumps the accumulated translator options (used by --debug)."""
    if not options.xlator_options:
        console.print("No translator options set.")
        return
    table = Table(title="Translator Options")
    table.add_column("Translator", style="cyan")
    table.add_column("Key", style="green")
    table.add_column("Value", style="magenta")
    for option in options.xlator_options:
        table.add_row(option.xlator, option.name, option.value)
    console.print(table)


class Session:
    """
    The state of one gfcli process: the live connection, the parsed options
    and the argument vector of the command currently executing.

    A single instance is created at startup and handed to the option parser,
    the dispatch loop and every command handler. `close()` is the only
    teardown path and is safe to call more than once.
    """

    def __init__(self, in_shell: bool = False, program_name: str = TOOL_NAME):
        self.connection_string: Optional[str] = None
        self.url: Optional[StorageUrl] = None
        self.connection: Optional["StorageConnection"] = None
        self.options = Options()
        self.argv: Optional[List[str]] = None
        self.in_shell = in_shell
        self.program_name = program_name

        # Cleared by `quit`, end-of-input or an interrupt.
        self.is_running: bool = True
        self.cancelled: bool = False
        self.closed: bool = False

    @property
    def connected(self) -> bool:
        return self.connection is not None

    def require_connection(self) -> "StorageConnection":
        if self.connection is None:
            raise NotConnectedError()
        return self.connection

    def connect(self, url: StorageUrl, options: Optional[Options] = None) -> "StorageConnection":
        """
        Opens a connection to `url` and applies every xlator option in
        `options` (default: the session's). The options replace the
        session's only once the connection is established.
        """
        if self.connection is not None:
            raise StorageError(
                f"already connected to {self.connection_string}; disconnect first"
            )
        options = self.options if options is None else options
        log = logger.bind(url=url.connection_string)
        connection = storage.connect(url)
        try:
            for option in options.xlator_options:
                connection.apply_xlator_option(option)
                log.debug("Applied translator option.", key=option.key, value=option.value)
        except BaseException:
            connection.close()
            raise
        self.options = options
        self.connection = connection
        self.url = url
        self.connection_string = url.connection_string
        log.info("Connection established.")
        return connection

    def disconnect(self) -> None:
        connection = self.connection
        self.connection = None
        self.url = None
        self.connection_string = None
        if connection is not None:
            connection.close()
            logger.info("Connection closed.")

    @contextmanager
    def running(self, argv: List[str], program_name: Optional[str] = None) -> Iterator[List[str]]:
        """
        Binds `argv` as the current command for the duration of one handler
        call. Diagnostics are prefixed with `program_name` (default `argv[0]`)
        meanwhile.
        """
        previous_name = self.program_name
        self.argv = argv
        self.program_name = program_name or argv[0]
        try:
            yield argv
        finally:
            self.argv = None
            self.program_name = previous_name

    def request_cancel(self) -> None:
        self.cancelled = True
        self.is_running = False

    def error(self, message: str) -> None:
        err_console.print(f"{self.program_name}: {message}", markup=False, highlight=False)

    def close(self) -> None:
        """Releases the target, the options and the connection, in that order."""
        if self.closed:
            return
        self.closed = True
        self.argv = None
        self.url = None
        self.connection_string = None
        self.options.xlator_options.clear()
        connection, self.connection = self.connection, None
        if connection is not None:
            try:
                connection.close()
            except StorageError as e:
                logger.warning("Failed to close connection during teardown.", error=str(e))
        logger.debug("Session torn down.")
