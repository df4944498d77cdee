import sys, os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import io

import pytest

from pipe_lines import cli


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("PIPE_LINES_CHUNK_SIZE", raising=False)
    monkeypatch.delenv("PIPE_LINES_ENCODING", raising=False)


def run(argv, data):
    out = io.BytesIO()
    code = cli.main(argv, stdin=io.BytesIO(data), stdout=out)
    return code, out.getvalue()


def test_count():
    assert run(["count"], b"line1\nline2\nline3") == (0, b"3\n")


def test_count_empty_input():
    assert run(["count"], b"") == (0, b"0\n")


def test_echo_with_numbers():
    code, out = run(["echo", "--number"], b"a\nb")
    assert code == 0
    assert out == b"     1\ta\n     2\tb"


def test_count_custom_terminator():
    assert run(["--terminator", "\\0", "count"], b"a\x00b\x00") == (0, b"2\n")


def test_echo_text_transcodes():
    assert run(["--encoding", "latin-1", "echo", "--text"], b"caf\xe9\n") == (0, "café\n".encode())


def test_echo_text_rejects_invalid_input(capsys):
    code, _ = run(["echo", "--text"], b"\xff\n")
    assert code == cli.EXIT_READ_FAILURE
    assert "not valid utf-8" in capsys.readouterr().err


def test_echo_text_replace_policy():
    code, out = run(["--error-policy", "replace", "echo", "--text"], b"\xff\n")
    assert code == 0
    assert out == "�\n".encode()


def test_read_failure_exit_code(capsys):
    class Broken:
        def read(self, n):
            raise OSError("stdin vanished")

    code = cli.main(["count"], stdin=Broken(), stdout=io.BytesIO())
    assert code == cli.EXIT_READ_FAILURE
    assert "stdin vanished" in capsys.readouterr().err


def test_bad_config_exit_code(capsys):
    code, out = run(["--chunk-size", "0", "count"], b"a\n")
    assert code == cli.EXIT_USAGE
    assert out == b""
    assert "chunk_size" in capsys.readouterr().err


def test_no_command_prints_help(capsys):
    assert cli.main([]) == cli.EXIT_USAGE
    assert "pipe-lines" in capsys.readouterr().out


def test_broken_pipe_exit_code():
    class ClosedPipe(io.BytesIO):
        def write(self, data):
            raise BrokenPipeError()

    code = cli.main(["echo"], stdin=io.BytesIO(b"a\n"), stdout=ClosedPipe())
    assert code == cli.EXIT_READ_FAILURE
