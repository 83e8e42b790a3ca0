from typing import Iterable

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document


class CommandCompleter(Completer):
    """Completes the first word of the line from the shell's command names."""

    def __init__(self, names: Iterable[str]):
        self.names = sorted(set(names))

    def get_completions(self, document: Document, complete_event):
        text_before_cursor = document.text_before_cursor
        # Arguments are paths on the remote volume; only the command is completed.
        if " " in text_before_cursor:
            return
        word = document.get_word_before_cursor()
        for name in self.names:
            if name.startswith(word):
                yield Completion(text=name, start_position=-len(word))
