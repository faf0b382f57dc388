"""Session token generators.

Tokens are short opaque strings over ``[0-9a-z]``. Nothing checks them for
uniqueness: two publications of the same group that draw the same token
overwrite each other, so the token source determines the collision rate.
"""

from __future__ import annotations

import random
import secrets
import string
from typing import Protocol

from meeting_edge.core.errors import ValidationAppError

TOKEN_ALPHABET = string.digits + string.ascii_lowercase
DEFAULT_TOKEN_LENGTH = 9


class TokenGenerator(Protocol):
    def generate(self) -> str:
        ...


class SecureTokenGenerator:
    """Tokens drawn from the operating system CSPRNG."""

    def __init__(self, length: int = DEFAULT_TOKEN_LENGTH) -> None:
        if length < 1:
            raise ValueError("length must be >= 1")
        self._length = length

    def generate(self) -> str:
        return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(self._length))


class RandomTokenGenerator:
    """Tokens drawn from the ``random`` module.

    Matches the tokens issued by earlier deployments. Predictable and prone
    to collisions at high publication volume; prefer SecureTokenGenerator.
    """

    def __init__(
        self, length: int = DEFAULT_TOKEN_LENGTH, *, rng: random.Random | None = None
    ) -> None:
        if length < 1:
            raise ValueError("length must be >= 1")
        self._length = length
        self._rng = rng or random.Random()

    def generate(self) -> str:
        return "".join(self._rng.choices(TOKEN_ALPHABET, k=self._length))


def create_token_generator(name: str, length: int = DEFAULT_TOKEN_LENGTH) -> TokenGenerator:
    """Build the token generator selected by configuration.

    Raises:
        ValidationAppError: If the generator name is unknown.
    """
    normalized = name.lower()
    if normalized == "secure":
        return SecureTokenGenerator(length)
    if normalized == "random":
        return RandomTokenGenerator(length)
    raise ValidationAppError(
        code="unsupported_token_generator",
        message=f"Unsupported token generator: '{name}'",
        details={"hint": "Use 'secure' or 'random'"},
    )
