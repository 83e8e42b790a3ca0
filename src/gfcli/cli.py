import logging
import os
import sys
from typing import List, Optional, Sequence

import structlog
from rich.traceback import Traceback

from . import config
from .commands import CommandDescriptor, CommandTable, build_command_table
from .completer import CommandCompleter
from .config import TOOL_NAME
from .errors import GfcliError, OptionError, XlatorOptionError
from .options import ParseAction, parse_options, usage_text, version_text
from .reader import LineReader, PromptLineReader, StreamLineReader
from .session import Session, console, err_console, print_xlator_options
from .shell import InterruptGuard, Shell
from .url import StorageUrl

logger = structlog.get_logger(__name__)


def setup_logging(debug: bool) -> None:
    """
    Configures structlog for the entire application.
    - Default level: WARNING (stdout belongs to command output)
    - Debug level: DEBUG (enabled with --debug)
    - All logs are routed to stderr.
    """
    log_level = logging.DEBUG if debug else logging.WARNING

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.addHandler(logging.StreamHandler(sys.stderr))
    root_logger.setLevel(log_level)


def report_fatal(session: Session, error: GfcliError) -> None:
    err_console.print(f"{session.program_name}: {error}", markup=False, highlight=False)
    if isinstance(error, OptionError) and not isinstance(error, XlatorOptionError):
        err_console.print("Try --help for more information.", markup=False)
    if session.options.debug:
        err_console.print(
            Traceback.from_exception(type(error), error, error.__traceback__)
        )


def default_reader(table: CommandTable) -> LineReader:
    if sys.stdin.isatty():
        return PromptLineReader(config.HISTORY_FILE, CommandCompleter(table.names()))
    return StreamLineReader()


def run_single_shot(session: Session, descriptor: CommandDescriptor, argv: List[str]) -> int:
    """Runs the command the process was invoked as, once, with the process arguments."""
    session.in_shell = False
    logger.debug("Running single-shot command.", command=descriptor.name, argc=len(argv))
    with session.running(argv, program_name=session.program_name):
        return descriptor.handler(session)


def run_shell(
    session: Session,
    table: CommandTable,
    args: Sequence[str],
    reader: Optional[LineReader] = None,
) -> int:
    """Parses the global flags, opens the requested connection and enters the loop."""
    session.in_shell = True
    outcome = parse_options(args)
    if outcome.action is ParseAction.HELP:
        console.print(usage_text(session.program_name), markup=False, highlight=False)
        return 0
    if outcome.action is ParseAction.VERSION:
        console.print(version_text(session.program_name), markup=False, highlight=False)
        return 0

    session.options = outcome.options
    setup_logging(session.options.debug)
    if outcome.url:
        session.connect(StorageUrl.parse(outcome.url))
    if session.options.debug:
        print_xlator_options(session.options)

    shell = Shell(session, table, reader or default_reader(table))
    return shell.run()


def main(argv: Optional[Sequence[str]] = None, reader: Optional[LineReader] = None) -> int:
    """
    Entry point for every gfcli executable.

    Invoked as one of the aliases (gfcat, gfls, ...), the matching command
    runs once and its status is returned. Under any other name the global
    flags are parsed and the interactive shell starts. The session is torn
    down exactly once on every path, including an interrupt, which exits 0.
    """
    argv = list(sys.argv if argv is None else argv)
    program_name = os.path.basename(argv[0]) if argv else TOOL_NAME
    setup_logging(False)

    table = build_command_table()
    session = Session(program_name=program_name)
    try:
        with InterruptGuard(session):
            descriptor = table.resolve_invocation(program_name)
            if descriptor is not None:
                return run_single_shot(session, descriptor, argv)
            return run_shell(session, table, argv[1:], reader)
    except KeyboardInterrupt:
        return 0
    except GfcliError as e:
        report_fatal(session, e)
        return 1
    finally:
        session.close()


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
