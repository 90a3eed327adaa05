"""
Output sinks for generated passwords: console and file.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import BinaryIO, TextIO

from .buffer import SecureBuffer

logger = logging.getLogger(__name__)

LINE_TERMINATOR = "\n"


class OutputError(Exception):
    """A password sink could not be opened or written."""


class ConsoleSink:
    """Writes one password per line to a text stream (stdout by default)."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        # Resolved lazily so a replaced sys.stdout is honoured.
        return self._stream if self._stream is not None else sys.stdout

    def banner(self, count: int) -> None:
        if count == 1:
            self._emit("Generated secure password: ")
        else:
            self._emit("Generated secure passwords:" + LINE_TERMINATOR)

    def write(self, password: SecureBuffer) -> None:
        self._emit(password.decode() + LINE_TERMINATOR)

    def _emit(self, text: str) -> None:
        try:
            self.stream.write(text)
            self.stream.flush()
        except OSError as exc:
            raise OutputError(
                f"Cannot write to standard output: {exc.strerror or exc}"
            ) from exc


class FileSink:
    """
    Writes one password per line to a file.

    The file is opened in binary mode so the raw buffer bytes go straight
    to the file object without an intermediate str.
    """

    def __init__(self, path: Path | str, append: bool = False) -> None:
        self.path = Path(path)
        self.append = append
        self._fh: BinaryIO | None = None

    def open(self) -> "FileSink":
        mode = "ab" if self.append else "wb"
        try:
            self._fh = open(self.path, mode)
        except OSError as exc:
            raise OutputError(
                f"Cannot open output file '{self.path}': {exc.strerror or exc}"
            ) from exc
        logger.debug(
            "Opened %s for %s", self.path, "appending" if self.append else "writing"
        )
        return self

    def write(self, password: SecureBuffer) -> None:
        if self._fh is None:
            raise OutputError(f"Output file '{self.path}' is not open.")
        try:
            self._fh.write(password.view())
            self._fh.write(LINE_TERMINATOR.encode("ascii"))
        except OSError as exc:
            raise OutputError(
                f"Cannot write to output file '{self.path}': {exc.strerror or exc}"
            ) from exc

    def close(self) -> None:
        if self._fh is not None:
            fh, self._fh = self._fh, None
            try:
                fh.close()
            except OSError as exc:
                raise OutputError(
                    f"Cannot write to output file '{self.path}': {exc.strerror or exc}"
                ) from exc

    def __enter__(self) -> "FileSink":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
