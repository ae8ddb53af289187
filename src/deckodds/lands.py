"""
Land drop odds: opening-hand land counts and hitting a land every turn.

By turn t the player has seen 7 + t cards and needs t lands among them to
have made every drop. Land counts default to the standard count for the
deck size when omitted.
"""

import math
from typing import Dict, List, Optional

from .hypergeometric import at_most, exactly
from .types import OPENING_HAND_SIZE, STANDARD_LAND_COUNTS

MAX_TRACKED_TURN = 10


def _resolve_land_count(deck_size: int, land_count: Optional[int]) -> int:
    if land_count is None:
        if deck_size not in STANDARD_LAND_COUNTS:
            raise ValueError(
                f"Unknown deck size {deck_size}. "
                f"Valid sizes: {list(STANDARD_LAND_COUNTS.keys())}"
            )
        return STANDARD_LAND_COUNTS[deck_size]

    if land_count < 0 or land_count > deck_size:
        raise ValueError(
            f"land_count must be in [0, {deck_size}], got {land_count}"
        )
    return land_count


def _miss_probability(deck_size: int, land_count: int, turn: int) -> float:
    # Missed a drop: at most turn - 1 lands among the cards seen
    cards_seen = OPENING_HAND_SIZE + turn
    return at_most(deck_size, land_count, cards_seen, turn - 1)


def opening_hand_lands(
    deck_size: int, land_count: Optional[int] = None
) -> Dict[str, object]:
    """
    Distribution of lands in the opening hand.

    Args:
        deck_size: Total cards in deck
        land_count: Lands in deck (None = standard count for 60 or 99)

    Returns:
        Dict with "distribution" (list of {"lands", "probability"} for
        0..7 lands) and "median" (first land count whose cumulative
        probability reaches 50%)
    """
    land_count = _resolve_land_count(deck_size, land_count)
    distribution = []
    cumulative = 0.0
    median = None

    for lands in range(OPENING_HAND_SIZE + 1):
        prob = exactly(deck_size, land_count, OPENING_HAND_SIZE, lands)
        distribution.append({"lands": lands, "probability": prob})

        cumulative += prob
        if median is None and cumulative >= 0.5:
            median = lands

    return {"distribution": distribution, "median": median or 0}


def land_drop_by_turn(
    deck_size: int,
    land_count: Optional[int] = None,
    max_turn: int = MAX_TRACKED_TURN,
) -> List[Dict[str, float]]:
    """Probability of making (and missing) every land drop through each turn."""
    land_count = _resolve_land_count(deck_size, land_count)
    results = []
    for turn in range(1, max_turn + 1):
        miss = _miss_probability(deck_size, land_count, turn)
        results.append(
            {"turn": turn, "make_probability": 1 - miss, "miss_probability": miss}
        )
    return results


def land_drop_miss_turn(deck_size: int, land_count: Optional[int] = None) -> float:
    """
    Turn on which a land drop is more likely missed than made.

    Returns:
        First turn whose miss probability exceeds 50%; 1 with no lands,
        math.inf for a deck of only lands
    """
    land_count = _resolve_land_count(deck_size, land_count)
    if land_count == 0:
        return 1
    if land_count >= deck_size:
        return math.inf

    for turn in range(1, MAX_TRACKED_TURN + 1):
        if _miss_probability(deck_size, land_count, turn) > 0.5:
            return turn

    # Fallback formula for late misses
    return round(OPENING_HAND_SIZE / (1 - land_count / deck_size))
