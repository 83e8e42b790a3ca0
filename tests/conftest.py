import logging
from pathlib import Path
from typing import List

import pytest

from gfcli import config
from gfcli.reader import LineReader
from gfcli.session import Session


@pytest.fixture
def clean_gfcli_home(tmp_path: Path, monkeypatch):
    """
    Creates a pristine, isolated ~/.gfcli home for each test and redirects
    the app to use it.
    """
    temp_home = tmp_path / ".gfcli"
    monkeypatch.setattr(config, "GFCLI_HOME", temp_home)
    monkeypatch.setattr(config, "HISTORY_FILE", temp_home / "history")
    yield temp_home


@pytest.fixture
def local_volume(tmp_path: Path, monkeypatch):
    """A `file://localhost/vol` volume rooted in a temporary directory."""
    root = tmp_path / "exports"
    volume = root / "vol"
    volume.mkdir(parents=True)
    monkeypatch.setattr(config, "LOCAL_ROOT", root)
    yield volume


@pytest.fixture
def volume_url() -> str:
    return "file://localhost/vol"


@pytest.fixture
def shell_session():
    session = Session(in_shell=True)
    yield session
    session.close()


class ScriptedReader(LineReader):
    """Feeds a fixed list of lines to the shell, then reports end of input."""

    def __init__(self, lines: List):
        self.lines = list(lines)
        self.prompts: List[str] = []

    def read_line(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.lines:
            raise EOFError
        line = self.lines.pop(0)
        if isinstance(line, BaseException):
            raise line
        return line


@pytest.fixture
def make_reader():
    return ScriptedReader


@pytest.fixture(autouse=True)
def restore_root_logger():
    """`setup_logging` reconfigures the root logger; put it back after each test."""
    root_logger = logging.getLogger()
    handlers, level = root_logger.handlers[:], root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
