"""
Tests for clipboard probing, backends and aggregation.
"""

import subprocess
from unittest.mock import patch

import pytest

from spgen.buffer import SecureBuffer
from spgen.clipboard import (
    ClipboardError,
    CommandClipboard,
    QtClipboard,
    aggregate,
    candidate_backends,
    detect_clipboard,
)
from spgen.sinks import OutputError


def _password(text: str) -> SecureBuffer:
    buf = SecureBuffer(len(text))
    for i, char in enumerate(text):
        buf[i] = char
    buf.finalize()
    return buf


def _which_only(*names):
    return lambda cmd: f"/usr/bin/{cmd}" if cmd in names else None


class TestAggregate:
    def test_joins_with_newlines_without_trailing(self):
        passwords = [_password("Aaaaa1"), _password("Bbbbb2"), _password("Ccccc3")]
        with aggregate(passwords) as joined:
            assert joined.decode() == "Aaaaa1\nBbbbb2\nCcccc3"
            assert len(joined) == 20
            assert joined.finalized
        assert all(p.decode() for p in passwords)
        for p in passwords:
            p.wipe()

    def test_single_password(self):
        with _password("Abc123") as pw, aggregate([pw]) as joined:
            assert joined.decode() == "Abc123"

    def test_empty(self):
        with aggregate([]) as joined:
            assert len(joined) == 0


class TestCandidates:
    def test_windows(self):
        backends = candidate_backends("win32", {})
        assert isinstance(backends[0], QtClipboard)
        assert backends[1].argv == ["clip"]

    def test_macos(self):
        backends = candidate_backends("darwin", {})
        assert backends[0].argv == ["pbcopy"]
        assert isinstance(backends[1], QtClipboard)

    def test_linux(self):
        names = [b.name for b in candidate_backends("linux", {})]
        assert names == ["wl-copy", "xclip", "xsel"]


class TestDetect:
    def test_prefers_wayland(self):
        env = {"WAYLAND_DISPLAY": "wayland-0", "DISPLAY": ":0"}
        with patch("spgen.clipboard.shutil.which", side_effect=_which_only("wl-copy", "xclip")):
            backend = detect_clipboard("linux", env)
        assert backend.name == "wl-copy"

    def test_falls_back_to_xsel(self):
        with patch("spgen.clipboard.shutil.which", side_effect=_which_only("xsel")):
            backend = detect_clipboard("linux", {"DISPLAY": ":0"})
        assert backend.argv == ["xsel", "-ib"]

    def test_requires_display(self):
        with patch("spgen.clipboard.shutil.which", side_effect=_which_only("xclip", "xsel")):
            with pytest.raises(ClipboardError, match="No clipboard mechanism found"):
                detect_clipboard("linux", {})

    def test_error_is_output_error(self):
        with patch("spgen.clipboard.shutil.which", return_value=None):
            with pytest.raises(OutputError):
                detect_clipboard("linux", {"DISPLAY": ":0"})

    def test_macos_falls_back_to_qt(self):
        with patch("spgen.clipboard.shutil.which", return_value=None), patch(
            "spgen.clipboard.importlib.util.find_spec", return_value=object()
        ):
            backend = detect_clipboard("darwin", {})
        assert isinstance(backend, QtClipboard)

    def test_qt_unavailable_without_pyside(self):
        with patch("spgen.clipboard.importlib.util.find_spec", return_value=None):
            assert QtClipboard().is_available() is False


class TestCommandClipboard:
    def setup_method(self):
        self.backend = CommandClipboard(["xclip", "-selection", "clipboard", "-i"], env={})

    def test_pipes_password_bytes(self):
        with patch("spgen.clipboard.subprocess.run") as run, _password("Abc123") as pw:
            self.backend.copy(pw)
            args, kwargs = run.call_args
            assert args[0] == ["xclip", "-selection", "clipboard", "-i"]
            assert bytes(kwargs["input"]) == b"Abc123"
            assert kwargs["check"] is True

    def test_command_failure(self):
        error = subprocess.CalledProcessError(1, ["xclip"])
        with patch("spgen.clipboard.subprocess.run", side_effect=error), _password("Abc123") as pw:
            with pytest.raises(ClipboardError, match="exit status 1"):
                self.backend.copy(pw)

    def test_command_missing(self):
        with patch("spgen.clipboard.subprocess.run", side_effect=FileNotFoundError()), _password("Abc123") as pw:
            with pytest.raises(ClipboardError, match="not found"):
                self.backend.copy(pw)
