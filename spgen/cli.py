"""
Command-line interface and high-level generation pipeline.
"""
from __future__ import annotations

import argparse
import contextlib
import logging
import sys
from pathlib import Path
from typing import Callable, Sequence, TextIO

from . import __version__
from .buffer import SecureBuffer
from .clipboard import ClipboardBackend, aggregate, detect_clipboard
from .composer import generate_passwords
from .config import GeneratorConfig, MIN_PASSWORD_LENGTH
from .sinks import ConsoleSink, FileSink, OutputError

logger = logging.getLogger(__name__)

PROG = "spgen"

USAGE = f"""\
Usage: {PROG} [OPTIONS]
Generate secure passwords with optional constraints.
Version: {__version__}

Options:
  -l LENGTH\tSet the password length (default: 20, minimum: {MIN_PASSWORD_LENGTH})
  -b\t\tRequire at least one symbol character ('+', '-', '/' or '*')
  -s\t\tRequire at least one special character
  -n NUM\tGenerate NUM passwords (default: 1)
  -q\t\tQuiet mode - only print passwords
  -f FILE\tWrite passwords to FILE (-a to append, otherwise overwrite)
  -a\t\tAppend passwords to the file specified with -f
  -c\t\tCopy generated password(s) to clipboard without printing them
  -v\t\tVerbose diagnostics on stderr (never includes passwords)
  -V\t\tPrint the version and exit
  -h\t\tDisplay this help message and exit
"""


class UsageError(Exception):
    """Invalid command line."""


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of printing and exiting."""

    def error(self, message: str):
        raise UsageError(message[:1].upper() + message[1:])


def _password_length(value: str) -> int:
    try:
        length = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid password length: '{value}'")
    if length < MIN_PASSWORD_LENGTH:
        raise argparse.ArgumentTypeError(
            f"Password length must be at least {MIN_PASSWORD_LENGTH}."
        )
    return length


def _password_count(value: str) -> int:
    try:
        count = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number of passwords: '{value}'")
    if count < 1:
        raise argparse.ArgumentTypeError("Number of passwords must be at least 1.")
    return count


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog=PROG, add_help=False, allow_abbrev=False)
    parser.add_argument("-l", "--length", dest="password_length",
                        type=_password_length, default=20, metavar="LENGTH")
    parser.add_argument("-b", "--symbol", dest="include_symbol", action="store_true")
    parser.add_argument("-s", "--special", dest="include_special", action="store_true")
    parser.add_argument("-n", "--number", dest="count",
                        type=_password_count, default=1, metavar="NUM")
    parser.add_argument("-q", "--quiet", action="store_true")
    parser.add_argument("-f", "--file", dest="output_file", type=Path, metavar="FILE")
    parser.add_argument("-a", "--append", action="store_true")
    parser.add_argument("-c", "--clipboard", action="store_true")
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("-V", "--version", action="store_true")
    parser.add_argument("-h", "--help", action="store_true")
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse argv; raises UsageError for anything the tool cannot accept."""
    argv = list(sys.argv[1:] if argv is None else argv)
    # Help wins over any other option, valid or not.
    if "-h" in argv or "--help" in argv:
        return argparse.Namespace(help=True, version=False)
    args = build_parser().parse_args(argv)
    if args.help or args.version:
        return args
    config = _config_from_args(args)
    try:
        config.validate()
    except ValueError as exc:
        raise UsageError(str(exc)) from exc
    args.config = config
    return args


def _config_from_args(args: argparse.Namespace) -> GeneratorConfig:
    return GeneratorConfig(
        password_length=args.password_length,
        include_symbol=args.include_symbol,
        include_special=args.include_special,
        count=args.count,
        quiet=args.quiet,
        output_file=args.output_file,
        append=args.append,
        clipboard=args.clipboard,
        verbose=args.verbose,
    )


def run(
    config: GeneratorConfig,
    stdout: TextIO | None = None,
    clipboard_factory: Callable[[], ClipboardBackend] | None = None,
) -> None:
    """
    Generate config.count passwords and deliver them.

    - File output if config.output_file, else console unless clipboard.
    - Clipboard output collects every password, joins them, copies once.

    Raises OutputError (or ClipboardError) when a sink fails. Every buffer
    is wiped on the way out, whatever the exit path.
    """
    console = ConsoleSink(stdout)

    # Probe before generating anything so a missing mechanism fails fast.
    backend = None
    if config.clipboard:
        backend = (clipboard_factory or detect_clipboard)()

    with contextlib.ExitStack() as stack:
        file_sink = None
        if config.output_file is not None:
            file_sink = stack.enter_context(
                FileSink(config.output_file, append=config.append)
            )

        if not config.quiet and file_sink is None:
            console.banner(config.count)

        collected: list[SecureBuffer] = []
        for password in generate_passwords(config):
            if config.clipboard:
                # Stays alive until the aggregate is built.
                collected.append(stack.enter_context(password))
                if file_sink is not None:
                    file_sink.write(password)
                continue

            with password:
                if file_sink is not None:
                    file_sink.write(password)
                else:
                    console.write(password)

        if backend is not None and collected:
            with aggregate(collected) as joined:
                backend.copy(joined)
            logger.debug("Copied %d password(s) via %r", len(collected), backend)

    if config.output_file is not None:
        logger.debug("Wrote %d password(s) to %s", config.count, config.output_file)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: Sequence[str] | None = None) -> int:
    """
    Entry point for `spgen`, `python -m spgen` and `run_spgen.py`.
    """
    try:
        args = parse_args(argv)
    except UsageError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        print(USAGE, end="")
        return 1

    if args.help:
        print(USAGE, end="")
        return 0
    if args.version:
        print(f"{PROG} {__version__}")
        return 0

    config: GeneratorConfig = args.config
    _configure_logging(config.verbose)

    try:
        run(config)
    except OutputError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return 130
    return 0
