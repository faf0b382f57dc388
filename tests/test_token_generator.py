"""Tests for session token generators."""

import random

import pytest

from meeting_edge.core.errors import ValidationAppError
from meeting_edge.services.token_generator import (
    TOKEN_ALPHABET,
    RandomTokenGenerator,
    SecureTokenGenerator,
    create_token_generator,
)


@pytest.mark.parametrize("generator", [SecureTokenGenerator(), RandomTokenGenerator()])
def test_tokens_are_nine_lowercase_alphanumerics(generator) -> None:
    for _ in range(50):
        token = generator.generate()
        assert len(token) == 9
        assert set(token) <= set(TOKEN_ALPHABET)


def test_length_is_configurable() -> None:
    assert len(SecureTokenGenerator(16).generate()) == 16


def test_random_generator_is_reproducible_with_seed() -> None:
    first = RandomTokenGenerator(rng=random.Random(42))
    second = RandomTokenGenerator(rng=random.Random(42))

    assert [first.generate() for _ in range(3)] == [second.generate() for _ in range(3)]


def test_secure_tokens_differ() -> None:
    generator = SecureTokenGenerator()
    assert len({generator.generate() for _ in range(100)}) == 100


def test_factory_selects_generator() -> None:
    assert isinstance(create_token_generator("secure"), SecureTokenGenerator)
    assert isinstance(create_token_generator("Random", 12), RandomTokenGenerator)


def test_factory_rejects_unknown_name() -> None:
    with pytest.raises(ValidationAppError) as exc_info:
        create_token_generator("uuid")

    assert exc_info.value.code == "unsupported_token_generator"


def test_invalid_length() -> None:
    with pytest.raises(ValueError):
        SecureTokenGenerator(0)
