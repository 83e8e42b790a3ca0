from prompt_toolkit.document import Document

from gfcli.commands import build_command_table
from gfcli.completer import CommandCompleter


def complete(text):
    completer = CommandCompleter(build_command_table().names())
    return [c.text for c in completer.get_completions(Document(text), None)]


def test_completes_command_names():
    assert complete("c") == ["cat", "connect", "cp"]
    assert complete("di") == ["disconnect"]
    assert "quit" in complete("")


def test_does_not_complete_arguments():
    assert complete("cat c") == []
