"""
The gfcli flag grammar and its parser.

The same grammar is parsed twice with different consequences: once against
the process arguments at startup, and once for every `connect` typed in the
shell. `parse_options` therefore never exits or prints; it returns a
`ParseOutcome` or raises `OptionError`, and each caller decides whether that
is fatal to the process or only to the current command.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

import click
import structlog
import typer

from .config import AUTHORS, COPYRIGHT, LICENSE, PACKAGE_NAME, PACKAGE_VERSION, TOOL_NAME
from .errors import OptionError
from .session import Options, XlatorOption

logger = structlog.get_logger(__name__)


class ParseAction(Enum):
    RUN = "run"
    HELP = "help"
    VERSION = "version"


@dataclass
class ParseOutcome:
    action: ParseAction
    options: Options
    url: Optional[str] = None


grammar = typer.Typer(name=TOOL_NAME, add_completion=False)


@grammar.command(context_settings={"help_option_names": []})
def gfcli(
    url: Optional[str] = typer.Argument(
        None, help="Connection target, e.g. glfs://localhost/groot"
    ),
    xlator_option: Optional[List[str]] = typer.Option(
        None,
        "--xlator-option",
        "-o",
        help="A translator option of the form xlator.key=value (repeatable).",
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug output."),
    show_help: bool = typer.Option(False, "--help", help="Display this help and exit."),
    show_version: bool = typer.Option(
        False, "--version", help="Output version information and exit."
    ),
):
    """
    Start a Gluster shell to execute commands on a remote Gluster volume.

    Only the signature matters: it declares the flags that `parse_options`
    reads back through click. The shell itself is started by `gfcli.cli.run`.
    """


def parse_options(argv: Sequence[str], base: Optional[Options] = None) -> ParseOutcome:
    """
    Parses `argv` (without the program name) on top of `base`.

    `base` is never modified: the returned outcome carries a new `Options`
    holding the previous translator options followed by the new ones.
    """
    base = base or Options()
    command = typer.main.get_command(grammar)
    try:
        ctx = command.make_context(TOOL_NAME, list(argv))
    except click.UsageError as e:
        raise OptionError(e.format_message()) from e

    params = ctx.params
    new_options = [XlatorOption.parse(value) for value in params.get("xlator_option") or ()]
    options = Options(
        debug=base.debug or bool(params.get("debug")),
        xlator_options=list(base.xlator_options) + new_options,
    )
    logger.debug(
        "Parsed options.",
        argv=list(argv),
        debug=options.debug,
        xlator_options=options.pairs(),
    )

    if params.get("show_help"):
        action = ParseAction.HELP
    elif params.get("show_version"):
        action = ParseAction.VERSION
    else:
        action = ParseAction.RUN
    return ParseOutcome(action=action, options=options, url=params.get("url"))


def usage_text(prog: str = TOOL_NAME) -> str:
    return (
        f"Usage: {prog} [OPTION]... [URL]\n"
        "Start a Gluster shell to execute commands on a remote Gluster volume.\n\n"
        "  -o, --xlator-option=OPTION   specify a translator option for the\n"
        "                               connection. Multiple options are supported\n"
        "                               and take the form xlator.key=value.\n"
        "      --debug    enable debug output\n"
        "      --help     display this help and exit\n"
        "      --version  output version information and exit\n\n"
        "Examples:\n"
        f"  {prog} glfs://localhost/groot\n"
        "        Start a shell with a connection to localhost opened.\n"
        f"  {prog} -o *replicate*.data-self-heal=on glfs://localhost/groot\n"
        "        Start a shell with a connection localhost open, with the\n"
        "        translator option data-self-heal set to on."
    )


def version_text(prog: str = TOOL_NAME) -> str:
    return f"{prog} ({PACKAGE_NAME}) {PACKAGE_VERSION}\n{COPYRIGHT}\n{LICENSE}\n{AUTHORS}"
