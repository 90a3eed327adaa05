"""
Secure Password Generator package.
"""

__version__ = "1.1.0"

from .config import CharacterClass, GeneratorConfig, DEFAULT_CONFIG, MIN_PASSWORD_LENGTH
from .buffer import SecureBuffer
from .composer import GenerationRequest, compose, generate_passwords

__all__ = [
    "__version__",
    "CharacterClass",
    "GeneratorConfig",
    "DEFAULT_CONFIG",
    "MIN_PASSWORD_LENGTH",
    "SecureBuffer",
    "GenerationRequest",
    "compose",
    "generate_passwords",
]
