"""
Password composer: fills a SecureBuffer with characters that satisfy the
category rules, then shuffles it.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from random import Random
from typing import Iterator

from .buffer import SecureBuffer
from .config import CharacterClass, GeneratorConfig, DEFAULT_CONFIG

logger = logging.getLogger(__name__)

# Categories every password gets one seeded character from, in seed order.
SEEDED_CLASSES = (CharacterClass.UPPER, CharacterClass.LOWER, CharacterClass.DIGIT)


@dataclass(frozen=True)
class GenerationRequest:
    length: int = DEFAULT_CONFIG.password_length
    include_symbol: bool = False
    include_special: bool = False

    @classmethod
    def from_config(cls, config: GeneratorConfig) -> "GenerationRequest":
        return cls(
            length=config.password_length,
            include_symbol=config.include_symbol,
            include_special=config.include_special,
        )


def _draw(rng: Random, char_class: CharacterClass) -> str:
    return rng.choice(char_class.alphabet)


def special_quota(length: int, include_special: bool, rng: Random) -> int:
    """
    Number of special characters to place: uniform in [1, length // 3]
    when specials are requested, else 0.
    """
    if not include_special:
        return 0
    return rng.randint(1, length // 3)


def compose(
    length: int,
    include_symbol: bool = False,
    include_special: bool = False,
    rng: Random | None = None,
) -> SecureBuffer:
    """
    Build one password of exactly `length` characters.

    Precondition: length >= MIN_PASSWORD_LENGTH. The caller validates it.

    Steps:
    - Seed one uppercase, one lowercase and one digit (plus one symbol if
      include_symbol) at the front.
    - Reserve the last `quota` slots for special characters.
    - Fill the rest uniformly from the free categories.
    - Shuffle the whole buffer so seeded and reserved slots move.

    Every draw uses `rng`, which defaults to the OS CSPRNG
    (secrets.SystemRandom). The returned buffer is finalized and owned
    by the caller, who must wipe it (use it in a with-block).
    """
    rng = rng or secrets.SystemRandom()
    password = SecureBuffer(length)
    try:
        for i, char_class in enumerate(SEEDED_CLASSES):
            password[i] = _draw(rng, char_class)

        free_classes = SEEDED_CLASSES
        start = len(SEEDED_CLASSES)
        if include_symbol:
            password[start] = _draw(rng, CharacterClass.SYMBOL)
            free_classes = SEEDED_CLASSES + (CharacterClass.SYMBOL,)
            start += 1

        quota = special_quota(length, include_special, rng)
        placed = 0
        for i in range(start, length):
            if placed < quota and i >= length - quota:
                password[i] = _draw(rng, CharacterClass.SPECIAL)
                placed += 1
            else:
                password[i] = _draw(rng, rng.choice(free_classes))

        password.shuffle(rng)
        password.finalize()
    except BaseException:
        password.wipe()
        raise

    return password


def generate_passwords(
    config: GeneratorConfig | None = None,
    rng: Random | None = None,
) -> Iterator[SecureBuffer]:
    """
    Yield config.count freshly composed passwords, one at a time.

    Each yielded buffer belongs to the consumer; nothing is retained here.
    """
    cfg = config or DEFAULT_CONFIG
    request = GenerationRequest.from_config(cfg)
    rng = rng or secrets.SystemRandom()

    logger.debug(
        "Generating %d password(s): length=%d symbol=%s special=%s",
        cfg.count,
        request.length,
        request.include_symbol,
        request.include_special,
    )
    for _ in range(cfg.count):
        yield compose(
            request.length,
            request.include_symbol,
            request.include_special,
            rng=rng,
        )
