"""
Configuration for the Secure Password Generator.
"""

from __future__ import annotations

import string
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

# Shorter passwords cannot hold the seeded characters plus a special quota.
MIN_PASSWORD_LENGTH = 6


class CharacterClass(Enum):
    """
    Character categories a password is composed from.

    Each member's value is its alphabet. Alphabets are constants.
    """

    UPPER = string.ascii_uppercase
    LOWER = string.ascii_lowercase
    DIGIT = string.digits
    SYMBOL = "+-/*"
    # Includes a space. '*' is shared with SYMBOL.
    SPECIAL = "!@#$%^&*()_= [{]}\\|;:'\",<.>?`~"

    @property
    def alphabet(self) -> str:
        return self.value


@dataclass
class GeneratorConfig:
    # Desired password length in characters.
    password_length: int = 20

    # Require at least one of "+-/*".
    include_symbol: bool = False

    # Require between 1 and password_length // 3 special characters.
    include_special: bool = False

    # How many passwords to produce in one run.
    count: int = 1

    # Print only password lines, no banner.
    quiet: bool = False

    # Where passwords go instead of the console.
    output_file: Optional[Path] = None
    append: bool = False

    # Copy everything to the clipboard instead of echoing it.
    clipboard: bool = False

    verbose: bool = False

    def __post_init__(self) -> None:
        # Clipboard output never echoes password contents.
        if self.clipboard:
            self.quiet = True
        if self.output_file is not None and not isinstance(self.output_file, Path):
            self.output_file = Path(self.output_file)

    def validate(self) -> None:
        """
        Check the caller-side preconditions of the composer.

        Raises ValueError with a message suitable for the user.
        """
        if self.password_length < MIN_PASSWORD_LENGTH:
            raise ValueError(
                f"Password length must be at least {MIN_PASSWORD_LENGTH}."
            )
        if self.count < 1:
            raise ValueError("Number of passwords must be at least 1.")
        if self.append and self.output_file is None:
            raise ValueError("Append mode (-a) requires an output file (-f).")


# Default configuration instance you can import elsewhere
DEFAULT_CONFIG = GeneratorConfig()
