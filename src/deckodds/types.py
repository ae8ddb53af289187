"""
Types and records for deck probability calculations.

Inputs (CardType, DeckComposition) are validated on construction; results
are plain dataclasses of numbers so a presentation layer can render them
without knowing how they were computed.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple


OPENING_HAND_SIZE = 7

# Standard deck configurations (deck_size -> land_count)
STANDARD_LAND_COUNTS = {
    60: 24,  # Constructed (Standard/Modern/Pioneer)
    99: 36,  # Commander / Duel Commander
}

# Cost marker for lands in a chain-trigger library: never castable
LAND_COST = -1


@dataclass(frozen=True)
class CardType:
    """
    A labeled bucket of cards tracked by the exact-math path.

    A card belongs to exactly one CardType; anything untracked is "other".
    """

    name: str

    count: int
    """Copies in the library"""

    required: int = 0
    """Minimum copies that must have been seen"""

    by_turn: int = 1
    """Turn by which `required` copies must have been seen (hand included)"""

    def __post_init__(self):
        if self.count < 0:
            raise ValueError(f"{self.name}: count must be >= 0, got {self.count}")
        if self.required < 0:
            raise ValueError(
                f"{self.name}: required must be >= 0, got {self.required}"
            )
        if self.by_turn < 1:
            raise ValueError(f"{self.name}: by_turn must be >= 1, got {self.by_turn}")


@dataclass(frozen=True)
class DeckComposition:
    """Library size plus the tracked card types; the rest is "other"."""

    deck_size: int
    types: Tuple[CardType, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "types", tuple(self.types))
        if self.deck_size < 0:
            raise ValueError(f"deck_size must be >= 0, got {self.deck_size}")
        tracked = sum(t.count for t in self.types)
        if tracked > self.deck_size:
            raise ValueError(
                f"Sum of type counts ({tracked}) exceeds deck size ({self.deck_size})"
            )

    @property
    def counts(self) -> List[int]:
        return [t.count for t in self.types]

    @property
    def other_count(self) -> int:
        return self.deck_size - sum(self.counts)

    @property
    def is_empty(self) -> bool:
        """Too few cards for an opening hand, or nothing tracked to draw."""
        if self.deck_size < OPENING_HAND_SIZE:
            return True
        return not any(t.count for t in self.types)

    @property
    def max_turn(self) -> int:
        return max(t.by_turn for t in self.types)

    def with_extra_copy(self, index: int) -> "DeckComposition":
        """One more copy of types[index], and one more card in the deck."""
        types = list(self.types)
        types[index] = replace(types[index], count=types[index].count + 1)
        return DeckComposition(self.deck_size + 1, tuple(types))

    def with_count(self, index: int, count: int) -> "DeckComposition":
        """Same deck size with types[index] set to `count`."""
        types = list(self.types)
        types[index] = replace(types[index], count=count)
        return DeckComposition(self.deck_size, tuple(types))


@dataclass
class HandOutcome:
    """One opening-hand composition and its keep decision."""

    counts: Tuple[int, ...]
    hand_prob: float
    success_prob: float
    keep: bool = False


@dataclass
class MarginalBenefit:
    """Change from adding one copy of a type (deck grows by one card)."""

    name: str
    overall: float
    """Delta in expected success under the mulligan strategy"""
    baseline: float
    """Delta in success when every hand is kept"""


@dataclass
class MulliganStage:
    """One row of the keep-at-stage breakdown."""

    label: str
    mulligans: int
    cards_kept: int
    take_probability: float
    keep_probability: float
    cumulative: float
    success_rate: float


@dataclass
class Strategy:
    """Keep/mulligan policy over every reachable opening hand."""

    hands: List[HandOutcome]
    best_keep_prob: float
    threshold: float
    expected_success: float
    keep_probability: float = 0.0
    avg_mulligans: float = 0.0
    expected_cards: float = 0.0
    baseline_success: float = 0.0
    marginal_benefits: List[MarginalBenefit] = field(default_factory=list)
    breakdown: List[MulliganStage] = field(default_factory=list)

    @property
    def kept_hands(self) -> List[HandOutcome]:
        return [h for h in self.hands if h.keep]

    @property
    def improvement(self) -> float:
        """Gain over keeping every hand."""
        return self.expected_success - self.baseline_success


@dataclass
class RevealResult:
    """Aggregate of a reveal-until-stop simulation."""

    expected: float
    distribution: List[float]
    """distribution[i] = fraction of trials whose statistic was i"""
    iterations: int

    def probability_at_least(self, value: int) -> float:
        return sum(self.distribution[value:])


@dataclass
class DiversityResult(RevealResult):
    """Distinct card types among a fixed-size reveal."""

    threshold: int
    """Distinct types at which one revealed card is cast for free"""
    expected_cards_to_hand: float

    @property
    def expected_types(self) -> float:
        return self.expected

    @property
    def probability_at_threshold(self) -> float:
        return self.probability_at_least(self.threshold)


@dataclass(frozen=True)
class ChainCard:
    """A card in a chained-trigger library."""

    cost: int
    trigger_eligible: bool = False
    name: Optional[str] = None

    @property
    def is_land(self) -> bool:
        return self.cost == LAND_COST


@dataclass
class ChainResult:
    """Aggregate of a chained-trigger (discover) simulation."""

    mean_cost: float
    """Mean total cost cast per trigger"""
    mean_cast_count: float
    """Mean cards cast per trigger"""
    chain_rate: float
    """Fraction of trials with two or more cards cast"""
    mean_spell_cost: float
    """Mean cost of a cast card, over trials that cast anything"""
    mean_cards_exiled: float
    eligible_pool: List[ChainCard]
    iterations: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mean_cost": self.mean_cost,
            "mean_cast_count": self.mean_cast_count,
            "chain_rate": self.chain_rate,
            "mean_spell_cost": self.mean_spell_cost,
            "mean_cards_exiled": self.mean_cards_exiled,
            "castable_cards": len(self.eligible_pool),
            "trigger_eligible_in_range": sum(
                1 for c in self.eligible_pool if c.trigger_eligible
            ),
            "iterations": self.iterations,
        }
