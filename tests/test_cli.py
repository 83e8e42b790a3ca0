import pytest

from gfcli import cli, operations
from gfcli.session import Session
from gfcli.shell import Shell


@pytest.fixture(autouse=True)
def isolated_home(clean_gfcli_home):
    yield clean_gfcli_home


def test_alias_invocation_runs_single_command(mocker):
    calls = []

    def fake_cat(session):
        calls.append((list(session.argv), session.in_shell, session.program_name))
        return 0

    mocker.patch.object(operations, "cat", fake_cat)
    shell_run = mocker.patch.object(Shell, "run")

    assert cli.main(["/usr/bin/gfcat", "/path/file"]) == 0
    assert calls == [(["/usr/bin/gfcat", "/path/file"], False, "gfcat")]
    shell_run.assert_not_called()


def test_alias_invocation_end_to_end(local_volume, volume_url, capsys):
    (local_volume / "hello.txt").write_text("hello world\n")
    assert cli.main(["gfcat", f"{volume_url}/hello.txt"]) == 0
    assert capsys.readouterr().out == "hello world\n"


def test_alias_invocation_failure_status(local_volume, volume_url, capsys):
    assert cli.main(["gfstat", f"{volume_url}/missing"]) == 1
    assert "gfstat:" in capsys.readouterr().err


def test_mv_alias_is_not_implemented(capsys):
    assert cli.main(["gfmv", "a", "b"]) == 2
    assert "gfmv: not implemented" in capsys.readouterr().err


def test_shell_quit_tears_down_once(make_reader, mocker):
    close = mocker.spy(Session, "close")
    reader = make_reader(["help\n", "quit\n"])
    assert cli.main(["gfcli"], reader=reader) == 0
    assert close.call_count == 1


def test_shell_with_initial_connection(local_volume, volume_url, make_reader, capsys):
    (local_volume / "f").write_text("data\n")
    reader = make_reader(["cat /f\n", "quit\n"])
    assert cli.main(["gfcli", "-o", "a.b=c", volume_url], reader=reader) == 0
    assert reader.prompts[0] == f"gfcli {volume_url}> "
    assert "data" in capsys.readouterr().out


def test_debug_dumps_translator_options(local_volume, volume_url, make_reader, capsys):
    reader = make_reader(["quit\n"])
    assert cli.main(["gfcli", "--debug", "-o", "a.b=c", volume_url], reader=reader) == 0
    out = capsys.readouterr().out
    assert "Translator Options" in out


def test_unknown_flag_is_fatal(make_reader, capsys):
    reader = make_reader(["help\n"])
    assert cli.main(["gfcli", "--bogus"], reader=reader) == 1
    err = capsys.readouterr().err
    assert "Try --help for more information." in err
    assert reader.prompts == []


def test_malformed_xlator_option_is_fatal(make_reader, capsys):
    reader = make_reader(["help\n"])
    assert cli.main(["gfcli", "-o", "novalue"], reader=reader) == 1
    assert "gfcli: novalue" in capsys.readouterr().err
    assert reader.prompts == []


def test_failed_initial_connection_is_fatal(make_reader, capsys):
    reader = make_reader(["help\n"])
    assert cli.main(["gfcli", "glfs://localhost/groot"], reader=reader) == 1
    assert "no storage backend" in capsys.readouterr().err
    assert reader.prompts == []


def test_help_and_version_exit_successfully(make_reader, capsys):
    reader = make_reader(["help\n"])
    assert cli.main(["gfcli", "--help"], reader=reader) == 0
    assert cli.main(["gfcli", "--version"], reader=reader) == 0
    out = capsys.readouterr().out
    assert "Usage: gfcli [OPTION]... [URL]" in out
    assert "gfcli (glusterfs-coreutils) 0.1.0" in out
    assert reader.prompts == []


def test_interrupt_exits_successfully_and_tears_down_once(make_reader, mocker):
    close = mocker.spy(Session, "close")
    reader = make_reader([KeyboardInterrupt()])
    assert cli.main(["gfcli"], reader=reader) == 0
    assert close.call_count == 1


def test_interrupt_during_single_shot_command(mocker):
    def interrupted(session):
        raise KeyboardInterrupt

    mocker.patch.object(operations, "ls", interrupted)
    close = mocker.spy(Session, "close")
    assert cli.main(["gfls", "file://localhost/vol"]) == 0
    assert close.call_count == 1


def test_default_reader_for_piped_input(mocker):
    stdin = mocker.patch("gfcli.cli.sys.stdin")
    stdin.isatty.return_value = False
    from gfcli.commands import build_command_table
    from gfcli.reader import StreamLineReader

    assert isinstance(cli.default_reader(build_command_table()), StreamLineReader)


@pytest.mark.parametrize(
    "args",
    [["--bogus"], ["-o"], ["file://localhost/a", "file://localhost/b"]],
)
def test_flag_errors_are_fatal_with_hint(args, make_reader, capsys):
    reader = make_reader(["help\n"])
    assert cli.main(["gfcli"] + args, reader=reader) == 1
    err = capsys.readouterr().err
    assert err.startswith("gfcli: ")
    assert "Try --help for more information." in err
    assert "Traceback" not in err
    assert reader.prompts == []


def test_connect_with_unknown_flag_in_the_shell(make_reader, capsys):
    reader = make_reader(["connect --bogus\n", "quit\n"])
    assert cli.main(["gfcli"], reader=reader) == 0
    err = capsys.readouterr().err
    assert "connect: " in err
    assert "--bogus" in err
    assert "command failed" not in err


def test_broken_pipe_in_single_shot_command(local_volume, volume_url, mocker, capsys):
    (local_volume / "hello.txt").write_text("hello world\n")
    mocker.patch.object(operations, "_write_bytes", side_effect=BrokenPipeError(32, "Broken pipe"))
    assert cli.main(["gfcat", f"{volume_url}/hello.txt"]) == 1
    assert "gfcat: Broken pipe" in capsys.readouterr().err
