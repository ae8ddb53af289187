"""Shared pytest fixtures."""

import random

import pytest

from deckodds import CardType, ResultCache


@pytest.fixture
def rng():
    """Seeded random source so simulation tests are reproducible."""
    return random.Random(12345)


@pytest.fixture
def commander_lands():
    """36 lands in 99 cards, two needed by turn 3."""
    return [CardType("Lands", 36, required=2, by_turn=3)]


@pytest.fixture
def cache():
    return ResultCache(max_size=10)
