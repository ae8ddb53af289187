"""Tests for library construction and shuffling."""

import random
from collections import Counter

import pytest

from deckodds import Library


class TestFromCounts:
    def test_builds_copies(self):
        library = Library.from_counts({"a": 2, "b": 3})
        assert Counter(library.cards) == {"a": 2, "b": 3}

    def test_fills_to_deck_size(self):
        library = Library.from_counts({1: 4}, deck_size=10, filler=0)
        assert len(library) == 10
        assert library.cards.count(0) == 6

    def test_negative_count(self):
        with pytest.raises(ValueError, match="Negative"):
            Library.from_counts({"a": -1})

    def test_counts_exceed_deck_size(self):
        with pytest.raises(ValueError, match="exceeds deck size"):
            Library.from_counts({"a": 11}, deck_size=10)


class TestShuffle:
    def test_shuffle_keeps_cards(self, rng):
        library = Library(list(range(60)))
        library.shuffle(rng)
        assert sorted(library.cards) == list(range(60))

    def test_seeded_shuffles_repeat(self):
        first = Library(list(range(60)))
        second = Library(list(range(60)))
        first.shuffle(random.Random(7))
        second.shuffle(random.Random(7))
        assert first.cards == second.cards

    def test_shuffle_moves_cards(self, rng):
        library = Library(list(range(60)))
        library.shuffle(rng)
        assert library.cards != list(range(60))

    def test_partial_shuffle_returns_top(self, rng):
        library = Library(list(range(60)))
        top = library.partial_shuffle(rng, 7)

        assert len(top) == 7
        assert top == library.cards[:7]
        assert sorted(library.cards) == list(range(60))

    def test_partial_shuffle_caps_at_library_size(self, rng):
        library = Library([1, 2, 3])
        assert sorted(library.partial_shuffle(rng, 10)) == [1, 2, 3]

    def test_reveal_yields_a_permutation(self, rng):
        library = Library(list(range(20)))
        revealed = list(library.reveal(rng))
        assert sorted(revealed) == list(range(20))

    def test_top_card_is_uniform(self):
        rng = random.Random(99)
        library = Library(["hit"] * 10 + ["miss"] * 30)
        trials = 20000
        hits = 0
        for _ in range(trials):
            if next(library.reveal(rng)) == "hit":
                hits += 1
        assert hits / trials == pytest.approx(0.25, abs=0.02)
