"""
Joint hypergeometric probabilities for any number of card types.

Types are mutually exclusive buckets; whatever is not tracked is drawn
from the implicit "other" pool. One, two and three types use the closed
forms in `hypergeometric`; four or more fall back to a depth-first walk
over the per-type draw counts.
"""

import logging
from typing import Dict, Iterator, List, Sequence, Tuple

from .combinatorics import choose
from .hypergeometric import at_least, three_type_at_least, two_type_at_least
from .types import OPENING_HAND_SIZE, DeckComposition

logger = logging.getLogger(__name__)


def _check_lengths(totals: Sequence[int], drawn: Sequence[int]) -> None:
    if len(totals) != len(drawn):
        raise ValueError(
            f"Mismatched type lists: {len(totals)} totals, {len(drawn)} draw counts"
        )


def joint_exact(
    N: int, type_totals: Sequence[int], n: int, type_drawn: Sequence[int]
) -> float:
    """
    P(drawing exactly type_drawn[i] of every type i) in n draws.

    Args:
        N: Total cards in population
        type_totals: Copies of each tracked type
        n: Cards drawn
        type_drawn: Copies of each type drawn

    Returns:
        Probability in [0, 1]; 0 for impossible combinations
    """
    _check_lengths(type_totals, type_drawn)

    total_drawn = sum(type_drawn)
    if total_drawn > n:
        return 0.0

    others_total = N - sum(type_totals)
    others_drawn = n - total_drawn
    if others_drawn < 0 or others_drawn > others_total:
        return 0.0

    numerator = choose(others_total, others_drawn)
    for total, drawn in zip(type_totals, type_drawn):
        numerator *= choose(total, drawn)

    return numerator / choose(N, n)


def joint_at_least(
    N: int, type_totals: Sequence[int], n: int, min_drawn: Sequence[int]
) -> float:
    """
    P(drawing at least min_drawn[i] of every type i simultaneously).

    Args:
        N: Total cards in population
        type_totals: Copies of each tracked type
        n: Cards drawn
        min_drawn: Minimum copies of each type

    Returns:
        Probability in [0, 1]
    """
    _check_lengths(type_totals, min_drawn)

    m = len(type_totals)
    if m == 0:
        return 1.0 if 0 <= n <= N else 0.0
    if m == 1:
        return at_least(N, type_totals[0], n, min_drawn[0])
    if m == 2:
        return two_type_at_least(N, *type_totals, n, *min_drawn)
    if m == 3:
        return three_type_at_least(N, *type_totals, n, *min_drawn)

    return _at_least_recursive(N, list(type_totals), n, list(min_drawn), 0, [])


def _at_least_recursive(
    N: int,
    type_totals: List[int],
    n: int,
    min_drawn: List[int],
    index: int,
    current: List[int],
) -> float:
    if index == len(type_totals):
        return joint_exact(N, type_totals, n, current)

    remaining = n - sum(current)
    prob = 0.0
    low = max(min_drawn[index], 0)
    for drawn in range(low, min(type_totals[index], remaining) + 1):
        current.append(drawn)
        prob += _at_least_recursive(N, type_totals, n, min_drawn, index + 1, current)
        current.pop()

    return prob


def enumerate_counts(totals: Sequence[int], slots: int) -> Iterator[Tuple[int, ...]]:
    """
    Yield every per-type count vector that fits in `slots` cards.

    counts[i] never exceeds totals[i]; the "other" pool fills whatever is
    left, so vectors summing to less than `slots` are included.
    """

    def walk(index: int, current: List[int], remaining: int):
        if index == len(totals):
            yield tuple(current)
            return
        for count in range(min(totals[index], remaining) + 1):
            current.append(count)
            yield from walk(index + 1, current, remaining - count)
            current.pop()

    yield from walk(0, [], slots)


def probability_by_turn(
    composition: DeckComposition, extra_turns: int = 3
) -> List[Dict[str, object]]:
    """
    Natural-draw odds of meeting each requirement, turn by turn.

    By turn t the player has seen 7 + t cards (no mulligan). For every turn
    from 0 to max(by_turn) + extra_turns this reports each type's own
    probability of having seen `required` copies and the combined
    probability that every requirement is met at once.

    Returns:
        List of dicts with keys "turn", "type_probabilities" (one float per
        type) and "combined"
    """
    if composition.is_empty:
        return []

    N = composition.deck_size
    totals = composition.counts
    required = [t.required for t in composition.types]
    rows = []

    for turn in range(composition.max_turn + extra_turns + 1):
        cards_seen = OPENING_HAND_SIZE + turn
        type_probabilities = [
            at_least(N, total, cards_seen, need)
            for total, need in zip(totals, required)
        ]
        combined = joint_at_least(N, totals, cards_seen, required)
        rows.append(
            {
                "turn": turn,
                "type_probabilities": type_probabilities,
                "combined": combined,
            }
        )

    logger.debug("Computed natural draw curve for %d turns", len(rows))
    return rows
