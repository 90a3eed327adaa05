"""
Clipboard output.

A backend is anything with `is_available()` and `copy(buffer)`. At startup
`detect_clipboard()` probes the candidates for the host platform and
returns the first one that can run here:

- Windows: Qt clipboard, then clip.exe
- macOS:   pbcopy, then Qt clipboard
- Linux:   wl-copy (Wayland), xclip, xsel

Qt is not offered on Linux because X11 drops clipboard content owned by a
process once it exits.
"""

from __future__ import annotations

import importlib.util
import logging
import os
import shutil
import subprocess
import sys
from typing import Iterable, Mapping, Sequence

from .buffer import SecureBuffer
from .sinks import OutputError

logger = logging.getLogger(__name__)


class ClipboardError(OutputError):
    """No clipboard mechanism is usable, or copying failed."""


class ClipboardBackend:
    """Base class for clipboard mechanisms."""

    name = "clipboard"

    def is_available(self) -> bool:
        raise NotImplementedError

    def copy(self, data: SecureBuffer) -> None:
        """Place the buffer's content on the clipboard or raise ClipboardError."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class CommandClipboard(ClipboardBackend):
    """
    Pipes the password bytes into an external command's stdin.
    """

    def __init__(
        self,
        argv: Sequence[str],
        env: Mapping[str, str] | None = None,
        requires_env: str | None = None,
    ) -> None:
        self.argv = list(argv)
        self.name = self.argv[0]
        self._env = env if env is not None else os.environ
        # Variable that must be set for the command to reach a display.
        self._requires_env = requires_env

    def is_available(self) -> bool:
        if self._requires_env and not self._env.get(self._requires_env):
            return False
        return shutil.which(self.argv[0]) is not None

    def copy(self, data: SecureBuffer) -> None:
        try:
            # No output pipes: xclip/xsel keep running to serve the
            # selection and would hold a captured pipe open.
            subprocess.run(
                self.argv,
                input=data.view(),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=True,
            )
        except FileNotFoundError as exc:
            raise ClipboardError(f"Clipboard command '{self.name}' not found.") from exc
        except subprocess.CalledProcessError as exc:
            raise ClipboardError(
                f"Clipboard command '{self.name}' failed with exit status {exc.returncode}."
            ) from exc
        except OSError as exc:
            raise ClipboardError(f"Clipboard command '{self.name}' failed: {exc}") from exc


class QtClipboard(ClipboardBackend):
    """
    Uses the Qt application clipboard (PySide6).
    """

    name = "qt"

    def is_available(self) -> bool:
        return importlib.util.find_spec("PySide6") is not None

    def copy(self, data: SecureBuffer) -> None:
        from PySide6.QtGui import QGuiApplication

        app = QGuiApplication.instance() or QGuiApplication([sys.argv[0]])
        clipboard = app.clipboard()
        try:
            clipboard.setText(data.decode())
        except Exception as exc:
            # Windows clipboard can be temporarily locked by other apps
            raise ClipboardError(
                "Could not copy to clipboard because another application is using it."
            ) from exc
        app.processEvents()


def candidate_backends(
    platform: str | None = None,
    env: Mapping[str, str] | None = None,
) -> list[ClipboardBackend]:
    """Clipboard mechanisms worth probing on the given platform, in order."""
    platform = platform or sys.platform
    env = env if env is not None else os.environ

    if platform.startswith("win"):
        return [QtClipboard(), CommandClipboard(["clip"], env=env)]
    if platform == "darwin":
        return [CommandClipboard(["pbcopy"], env=env), QtClipboard()]
    return [
        CommandClipboard(["wl-copy"], env=env, requires_env="WAYLAND_DISPLAY"),
        CommandClipboard(
            ["xclip", "-selection", "clipboard", "-i"], env=env, requires_env="DISPLAY"
        ),
        CommandClipboard(["xsel", "-ib"], env=env, requires_env="DISPLAY"),
    ]


def detect_clipboard(
    platform: str | None = None,
    env: Mapping[str, str] | None = None,
) -> ClipboardBackend:
    """
    Return the first usable clipboard backend for this host.

    Raises ClipboardError when none is available.
    """
    candidates = candidate_backends(platform, env)
    for backend in candidates:
        if backend.is_available():
            logger.debug("Using clipboard backend %r", backend)
            return backend
        logger.debug("Clipboard backend %r is not available", backend)

    names = ", ".join(b.name for b in candidates) or "none"
    raise ClipboardError(
        f"No clipboard mechanism found (tried: {names}). "
        "Install one of them to copy passwords to the clipboard."
    )


def aggregate(passwords: Iterable[SecureBuffer]) -> SecureBuffer:
    """
    Join passwords with newlines into one new SecureBuffer.

    No trailing newline. The inputs are left untouched; the caller still
    owns (and wipes) them as well as the returned buffer.
    """
    passwords = list(passwords)
    total = sum(len(p) for p in passwords) + max(len(passwords) - 1, 0)
    joined = SecureBuffer(total)
    try:
        offset = 0
        for i, password in enumerate(passwords):
            if i:
                joined[offset] = "\n"
                offset += 1
            joined.write(offset, password)
            offset += len(password)
        joined.finalize()
    except BaseException:
        joined.wipe()
        raise
    return joined
