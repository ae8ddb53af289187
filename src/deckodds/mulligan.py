"""
Mulligan strategy optimizer.

Enumerates every reachable 7-card hand composition, scores how likely each
hand is to meet all per-type requirements by the deciding turn, then keeps
every hand within a fixed relative drawdown of the best hand.

The expected value of taking a mulligan is a one-level lookahead: a
mulligan is worth the best keep probability discounted by the penalty.
This is the defined policy value, not an approximation of the
infinite-horizon keep-or-mulligan fixed point.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

from .cache import ResultCache, make_key
from .log_decorator import log_calls
from .multitype import enumerate_counts, joint_at_least, joint_exact
from .types import (
    OPENING_HAND_SIZE,
    CardType,
    DeckComposition,
    HandOutcome,
    MarginalBenefit,
    MulliganStage,
    Strategy,
)

logger = logging.getLogger(__name__)

# Stages summed for the expected hand size; later stages are negligible
MAX_MULLIGAN_STAGES = 10
# Stop summing stages once this much probability mass is left
STAGE_MASS_EPSILON = 1e-4
# Mulligans shown in the breakdown, and the take probability that ends it
BREAKDOWN_MULLIGANS = 4
BREAKDOWN_MIN_TAKE = 1e-3


class KeepPolicy(ABC):
    """Abstract base class for keep/mulligan decisions."""

    @abstractmethod
    def threshold(self, best_keep_prob: float) -> float:
        """Lowest success probability still worth keeping."""
        pass

    def should_keep(self, success_prob: float, best_keep_prob: float) -> bool:
        """
        Decide whether to keep a hand.

        Args:
            success_prob: Probability this hand meets every requirement
            best_keep_prob: Best success probability over all hands

        Returns:
            True if should keep, False if should mulligan
        """
        return success_prob >= self.threshold(best_keep_prob)


class ThresholdPolicy(KeepPolicy):
    """
    Keep any hand within `penalty` (relative) of the best hand.

    threshold = best_keep_prob * (1 - penalty); ties keep, so the best
    hand is always kept.
    """

    def __init__(self, penalty: float):
        if not 0.0 <= penalty <= 1.0:
            raise ValueError(f"penalty must be in [0, 1], got {penalty}")
        self.penalty = penalty

    def threshold(self, best_keep_prob: float) -> float:
        return best_keep_prob * (1 - self.penalty)


def cards_to_draw(max_turn: int, on_the_play: bool) -> int:
    """Cards drawn after the opening hand by the end of the draw step of max_turn."""
    if on_the_play:
        return max(0, max_turn - 1)
    return max_turn


def hand_success_probability(
    composition: DeckComposition,
    hand_counts: Sequence[int],
    on_the_play: bool = False,
) -> float:
    """
    P(meeting every requirement) starting from a given opening hand.

    The rest of the library is deck_size - 7 cards holding count - have
    copies of each type; the player draws until the latest by_turn.

    Args:
        composition: Deck being evaluated
        hand_counts: Copies of each type in the opening hand
        on_the_play: True if on play (no draw on turn 1)

    Returns:
        Probability in [0, 1]
    """
    draws = cards_to_draw(composition.max_turn, on_the_play)
    needs = [
        max(0, t.required - have) for t, have in zip(composition.types, hand_counts)
    ]
    satisfied = all(need == 0 for need in needs)

    if draws == 0 or satisfied:
        return 1.0 if satisfied else 0.0

    in_library = [t.count - have for t, have in zip(composition.types, hand_counts)]
    library_size = composition.deck_size - OPENING_HAND_SIZE

    return joint_at_least(library_size, in_library, draws, needs)


def enumerate_hands(
    composition: DeckComposition, on_the_play: bool = False
) -> List[HandOutcome]:
    """
    Every opening hand composition with non-zero probability, scored.

    Hand probabilities partition the hand space: they sum to 1.
    """
    totals = composition.counts
    hands = []

    for counts in enumerate_counts(totals, OPENING_HAND_SIZE):
        hand_prob = joint_exact(
            composition.deck_size, totals, OPENING_HAND_SIZE, counts
        )
        if hand_prob <= 0:
            continue
        success_prob = hand_success_probability(composition, counts, on_the_play)
        hands.append(HandOutcome(counts, hand_prob, success_prob))

    logger.debug("Enumerated %d opening hands", len(hands))
    return hands


def _baseline(hands: Sequence[HandOutcome]) -> float:
    return sum(h.hand_prob * h.success_prob for h in hands)


def _build_strategy(
    composition: DeckComposition,
    policy: ThresholdPolicy,
    free_mulligan: bool,
    on_the_play: bool,
) -> Strategy:
    hands = enumerate_hands(composition, on_the_play)
    best_keep_prob = max((h.success_prob for h in hands), default=0.0)
    threshold = policy.threshold(best_keep_prob)

    kept_mass = 0.0
    expected_success = 0.0
    for hand in hands:
        hand.keep = policy.should_keep(hand.success_prob, best_keep_prob)
        if hand.keep:
            kept_mass += hand.hand_prob
            expected_success += hand.hand_prob * hand.success_prob

    mulligan_prob = 1 - kept_mass

    # A mulligan is worth a fresh 7 already discounted by the penalty
    penalized_outcome = threshold
    ev_penalized = expected_success + mulligan_prob * penalized_outcome

    if free_mulligan:
        # Free first mulligan: worth a whole penalized round
        expected_success += mulligan_prob * ev_penalized
    else:
        expected_success = ev_penalized

    return Strategy(
        hands=hands,
        best_keep_prob=best_keep_prob,
        threshold=threshold,
        expected_success=expected_success,
        keep_probability=kept_mass,
    )


def mulligan_stats(
    hands: Sequence[HandOutcome], free_mulligan: bool
) -> Tuple[float, float]:
    """
    Average mulligans taken and expected cards in the kept hand.

    Mulligans follow a geometric distribution with the keep probability of a
    fresh 7. Each mulligan costs one card, except a free first mulligan.

    Returns:
        Tuple of (avg_mulligans, expected_cards)
    """
    keep_prob = sum(h.hand_prob for h in hands if h.keep)
    avg_mulligans = (1 - keep_prob) / keep_prob if keep_prob > 0 else 0.0

    expected_cards = 0.0
    accumulated = 0.0
    remaining = 1.0

    for mulligans in range(MAX_MULLIGAN_STAGES):
        keep_here = remaining * keep_prob
        expected_cards += keep_here * _cards_kept(mulligans, free_mulligan)
        accumulated += keep_here

        remaining *= 1 - keep_prob
        if remaining < STAGE_MASS_EPSILON:
            break

    # Normalize if truncation left some mass unaccounted
    if accumulated > 0:
        expected_cards /= accumulated

    return avg_mulligans, expected_cards


def _cards_kept(mulligans: int, free_mulligan: bool) -> int:
    if mulligans == 0:
        return OPENING_HAND_SIZE
    lost = mulligans - 1 if free_mulligan else mulligans
    return max(0, OPENING_HAND_SIZE - lost)


def mulligan_breakdown(strategy: Strategy, free_mulligan: bool) -> List[MulliganStage]:
    """
    Keep probability at the opening hand and each of the next mulligans.

    Success at a mulligan stage scales the best keep probability by 6/7 for
    every card lost to mulligans.
    """
    keep_prob = strategy.keep_probability
    mull_prob = 1 - keep_prob
    best = strategy.best_keep_prob

    stages = [
        MulliganStage(
            label=f"Opening hand ({OPENING_HAND_SIZE} cards)",
            mulligans=0,
            cards_kept=OPENING_HAND_SIZE,
            take_probability=1.0,
            keep_probability=keep_prob,
            cumulative=keep_prob,
            success_rate=best,
        )
    ]
    cumulative = keep_prob
    take_probability = mull_prob

    for mulligans in range(1, BREAKDOWN_MULLIGANS + 1):
        if take_probability <= BREAKDOWN_MIN_TAKE:
            break

        keep_here = take_probability * keep_prob
        cumulative += keep_here
        cards = _cards_kept(mulligans, free_mulligan)
        lost = OPENING_HAND_SIZE - cards

        if mulligans == 1 and free_mulligan:
            label = f"Mulligan 1 - Free (see 7, keep {cards})"
        else:
            label = f"Mulligan {mulligans} (see 7, keep {cards})"

        stages.append(
            MulliganStage(
                label=label,
                mulligans=mulligans,
                cards_kept=cards,
                take_probability=take_probability,
                keep_probability=keep_here,
                cumulative=cumulative,
                success_rate=best * (1 - 1 / OPENING_HAND_SIZE) ** lost,
            )
        )
        take_probability *= mull_prob

    return stages


def no_mulligan_success(
    deck_size: int, types: Sequence[CardType], on_the_play: bool = False
) -> Optional[float]:
    """
    Success rate when every opening hand is kept.

    Returns:
        Weighted average of success over all hands, or None for an empty deck
    """
    composition = DeckComposition(deck_size, tuple(types))
    if composition.is_empty:
        return None
    return _baseline(enumerate_hands(composition, on_the_play))


def marginal_benefits(
    composition: DeckComposition,
    penalty: float,
    free_mulligan: bool = False,
    on_the_play: bool = False,
    base: Optional[Strategy] = None,
) -> List[MarginalBenefit]:
    """
    Value of one more copy of each type (deck grows by one card).

    Args:
        composition: Deck being evaluated
        penalty: Mulligan penalty
        free_mulligan: First mulligan is free
        on_the_play: True if on play
        base: Already computed strategy for `composition` (optional)

    Returns:
        One MarginalBenefit per type, in type order
    """
    policy = ThresholdPolicy(penalty)
    if base is None:
        base = _build_strategy(composition, policy, free_mulligan, on_the_play)
    base_baseline = _baseline(base.hands)

    benefits = []
    for index, card_type in enumerate(composition.types):
        modified = _build_strategy(
            composition.with_extra_copy(index), policy, free_mulligan, on_the_play
        )
        benefits.append(
            MarginalBenefit(
                name=card_type.name,
                overall=modified.expected_success - base.expected_success,
                baseline=_baseline(modified.hands) - base_baseline,
            )
        )

    return benefits


@log_calls
def compute_mulligan_strategy(
    deck_size: int,
    types: Sequence[CardType],
    penalty: float = 0.2,
    free_mulligan: bool = False,
    on_the_play: bool = False,
    include_marginal: bool = True,
    cache: Optional[ResultCache] = None,
) -> Optional[Strategy]:
    """
    Compute the keep/mulligan strategy for a deck.

    Args:
        deck_size: Total cards in library
        types: Tracked card types (mutually exclusive)
        penalty: Relative success cost of taking a mulligan, in [0, 1]
        free_mulligan: First mulligan is free
        on_the_play: True if on play, False if on draw
        include_marginal: Also compute the value of one more copy per type
        cache: Optional caller-owned cache

    Returns:
        Strategy, or None when the deck is empty, has no tracked types, or
        every tracked count is zero
    """
    policy = ThresholdPolicy(penalty)
    composition = DeckComposition(deck_size, tuple(types))

    if composition.is_empty:
        logger.info("No cards or no tracked types; nothing to compute")
        return None

    def compute() -> Strategy:
        strategy = _build_strategy(composition, policy, free_mulligan, on_the_play)
        strategy.avg_mulligans, strategy.expected_cards = mulligan_stats(
            strategy.hands, free_mulligan
        )
        strategy.baseline_success = _baseline(strategy.hands)
        strategy.breakdown = mulligan_breakdown(strategy, free_mulligan)
        if include_marginal:
            strategy.marginal_benefits = marginal_benefits(
                composition, penalty, free_mulligan, on_the_play, base=strategy
            )
        return strategy

    if cache is None:
        return compute()

    key = make_key(
        "mulligan", composition, penalty, free_mulligan, on_the_play, include_marginal
    )
    return cache.get_or_compute(key, compute)


def find_minimum_count(
    deck_size: int,
    types: Sequence[CardType],
    index: int,
    target_probability: float = 0.90,
    penalty: float = 0.2,
    free_mulligan: bool = False,
    on_the_play: bool = False,
) -> int:
    """
    Find minimum copies of types[index] to hit a target expected success.

    The deck size stays fixed: extra copies replace "other" cards.

    Returns:
        Minimum count, or -1 if the target is impossible to reach
    """
    composition = DeckComposition(deck_size, tuple(types))
    policy = ThresholdPolicy(penalty)
    others = sum(composition.counts) - composition.types[index].count

    best = 0.0
    for count in range(deck_size - others + 1):
        candidate = composition.with_count(index, count)
        if candidate.is_empty:
            continue
        strategy = _build_strategy(candidate, policy, free_mulligan, on_the_play)
        logger.debug(
            "With %d %s: expected success %.4f",
            count,
            composition.types[index].name,
            strategy.expected_success,
        )
        if strategy.expected_success >= target_probability:
            return count
        best = max(best, strategy.expected_success)

    logger.warning(
        "Target %.0f%% not achievable for %s; maximum %.1f%%",
        target_probability * 100,
        composition.types[index].name,
        best * 100,
    )
    return -1
