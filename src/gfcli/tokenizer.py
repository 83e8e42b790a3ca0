"""
Line tokenization for the shell.

Arguments are separated by the space character only. Runs of spaces are
collapsed, so `"ls  -l"` yields two arguments, and the line terminator is
not part of the last argument. Tabs and other whitespace stay inside
arguments; `trim` strips them from the end of the command name before it is
looked up.
"""

from typing import List

SEPARATOR = " "


def tokenize(line: str) -> List[str]:
    """Splits a raw input line into an argument vector."""
    body = line.rstrip("\r\n")
    return [arg for arg in body.split(SEPARATOR) if arg]


def trim(token: str) -> str:
    """Removes trailing whitespace from a single token; empty input is fine."""
    return token.rstrip()


def command_name(line: str) -> str:
    """Returns the trimmed first argument of `line`, or "" if it has none."""
    for arg in line.split(SEPARATOR):
        if arg:
            return trim(arg)
    return ""
