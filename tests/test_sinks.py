"""
Tests for console and file sinks.
"""

import io

import pytest

from spgen.buffer import SecureBuffer
from spgen.sinks import ConsoleSink, FileSink, OutputError


def _password(text: str) -> SecureBuffer:
    buf = SecureBuffer(len(text))
    for i, char in enumerate(text):
        buf[i] = char
    buf.finalize()
    return buf


class TestConsoleSink:
    def setup_method(self):
        self.stream = io.StringIO()
        self.sink = ConsoleSink(self.stream)

    def test_writes_line(self):
        with _password("Abc123") as pw:
            self.sink.write(pw)
        assert self.stream.getvalue() == "Abc123\n"

    def test_banner_single(self):
        self.sink.banner(1)
        assert self.stream.getvalue() == "Generated secure password: "

    def test_banner_many(self):
        self.sink.banner(3)
        assert self.stream.getvalue() == "Generated secure passwords:\n"

    def test_defaults_to_stdout(self, capsys):
        with _password("Xyz789") as pw:
            ConsoleSink().write(pw)
        assert capsys.readouterr().out == "Xyz789\n"

    def test_stream_error_becomes_output_error(self):
        class ClosedPipe(io.StringIO):
            def write(self, text):
                raise BrokenPipeError(32, "Broken pipe")

        sink = ConsoleSink(ClosedPipe())
        with _password("Abc123") as pw:
            with pytest.raises(OutputError, match="Broken pipe"):
                sink.write(pw)
        with pytest.raises(OutputError):
            sink.banner(2)


class TestFileSink:
    def test_truncate_mode(self, tmp_path):
        path = tmp_path / "out.txt"
        path.write_text("old\n")
        with FileSink(path) as sink, _password("Abc123") as pw:
            sink.write(pw)
        assert path.read_text() == "Abc123\n"

    def test_append_mode(self, tmp_path):
        path = tmp_path / "out.txt"
        path.write_text("old\n")
        with FileSink(path, append=True) as sink, _password("Abc123") as pw:
            sink.write(pw)
        assert path.read_text() == "old\nAbc123\n"

    def test_unopenable_path(self, tmp_path):
        sink = FileSink(tmp_path / "missing" / "out.txt")
        with pytest.raises(OutputError, match="Cannot open output file"):
            sink.open()

    def test_write_before_open(self, tmp_path):
        sink = FileSink(tmp_path / "out.txt")
        with _password("Abc123") as pw:
            with pytest.raises(OutputError, match="not open"):
                sink.write(pw)

    def test_close_is_idempotent(self, tmp_path):
        sink = FileSink(tmp_path / "out.txt").open()
        sink.close()
        sink.close()
