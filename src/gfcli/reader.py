import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, TextIO

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer
from prompt_toolkit.history import FileHistory


class LineReader(ABC):
    """Obtains one line of input per call; raises EOFError at end of input."""

    @abstractmethod
    def read_line(self, prompt: str) -> str:
        raise NotImplementedError


class PromptLineReader(LineReader):
    """Interactive reader with persistent history and command completion."""

    def __init__(self, history_file: Path, completer: Optional[Completer] = None):
        history_file.parent.mkdir(parents=True, exist_ok=True)
        self.prompt_session = PromptSession(
            history=FileHistory(str(history_file)),
            completer=completer,
            complete_while_typing=True,
        )

    def read_line(self, prompt: str) -> str:
        return self.prompt_session.prompt(prompt)


class StreamLineReader(LineReader):
    """Reads from a plain stream, e.g. when commands are piped into the shell."""

    def __init__(self, stream: Optional[TextIO] = None, output: Optional[TextIO] = None):
        self.stream = stream or sys.stdin
        self.output = output or sys.stdout

    def read_line(self, prompt: str) -> str:
        self.output.write(prompt)
        self.output.flush()
        line = self.stream.readline()
        if line == "":
            raise EOFError
        return line
