"""
Library representation and shuffling for Monte Carlo simulation.

All randomness comes from an injected random.Random, so a seeded generator
reproduces the same sequence of trials.
"""

import random
from typing import Generic, Iterator, List, Mapping, Optional, Sequence, TypeVar

T = TypeVar("T")


class Library(Generic[T]):
    """
    A library of card values that can be shuffled in place.

    Card values are whatever the simulation needs to classify a card: a
    bool, a type bitmask, a cost, or a ChainCard.
    """

    def __init__(self, cards: Sequence[T]):
        self.cards: List[T] = list(cards)

    @classmethod
    def from_counts(
        cls,
        counts: Mapping[T, int],
        deck_size: Optional[int] = None,
        filler: T = None,
    ) -> "Library[T]":
        """
        Build a library from value -> count.

        Args:
            counts: Copies of each card value
            deck_size: Total library size; missing cards are `filler`
            filler: Value for the unlisted cards

        Raises:
            ValueError: if a count is negative or the counts exceed deck_size
        """
        cards: List[T] = []
        for value, count in counts.items():
            if count < 0:
                raise ValueError(f"Negative count {count} for {value!r}")
            cards.extend([value] * count)

        if deck_size is not None:
            if len(cards) > deck_size:
                raise ValueError(
                    f"Sum of card counts ({len(cards)}) exceeds deck size ({deck_size})"
                )
            cards.extend([filler] * (deck_size - len(cards)))

        return cls(cards)

    def __len__(self) -> int:
        return len(self.cards)

    def shuffle(self, rng: random.Random) -> None:
        """Fisher-Yates shuffle of the whole library."""
        cards = self.cards
        for i in range(len(cards) - 1, 0, -1):
            j = int(rng.random() * (i + 1))
            cards[i], cards[j] = cards[j], cards[i]

    def partial_shuffle(self, rng: random.Random, count: int) -> List[T]:
        """
        Shuffle only the first `count` positions and return them.

        Each of those positions is uniform over the cards not yet placed,
        which is all a fixed-size reveal needs.
        """
        cards = self.cards
        size = len(cards)
        count = min(count, size)
        for i in range(count):
            j = i + int(rng.random() * (size - i))
            cards[i], cards[j] = cards[j], cards[i]
        return cards[:count]

    def reveal(self, rng: random.Random) -> Iterator[T]:
        """
        Reveal cards from the top one at a time.

        The shuffle happens lazily, so stopping early only pays for the
        cards actually revealed.
        """
        cards = self.cards
        size = len(cards)
        for i in range(size):
            j = i + int(rng.random() * (size - i))
            cards[i], cards[j] = cards[j], cards[i]
            yield cards[i]
