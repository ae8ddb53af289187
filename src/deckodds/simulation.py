"""
Monte Carlo simulators for reveal and chained-trigger effects.

Used where a closed form is intractable (chains of discover triggers) or
where an approximate distribution is all the caller needs. Iteration
counts are fixed per call, never adaptive, so the standard error of every
estimate is predictable (it shrinks as 1/sqrt(iterations)).
Counts, the chain depth cap and the random source left unset come from
`Settings`, so the DECKODDS_* environment tunes every simulator.
"""

import logging
import random
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple, TypeVar

from .config import Settings
from .library import Library
from .log_decorator import log_calls
from .types import LAND_COST, ChainCard, ChainResult, DiversityResult, RevealResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Distinct types at which a diversity reveal casts one card for free
FREE_SPELL_THRESHOLD = 4


def _check_iterations(iterations: int) -> None:
    if iterations <= 0:
        raise ValueError(f"iterations must be positive, got {iterations}")


def _trial_setup(
    iterations: Optional[int],
    rng: Optional[random.Random],
    settings: Optional[Settings],
    field: str,
) -> Tuple[int, random.Random]:
    """Fill an unset iteration count or random source from settings."""
    if iterations is None or rng is None:
        if settings is None:
            settings = Settings.from_env()
        if iterations is None:
            iterations = getattr(settings, field)
        if rng is None:
            rng = settings.rng()
    _check_iterations(iterations)
    return iterations, rng


def _frequencies(counts: List[int], iterations: int) -> List[float]:
    return [c / iterations for c in counts]


@log_calls
def simulate_reveal_until(
    cards: Sequence[T],
    stop: Callable[[T, int], bool],
    iterations: Optional[int] = None,
    rng: Optional[random.Random] = None,
    settings: Optional[Settings] = None,
) -> RevealResult:
    """
    Reveal from the top of a shuffled library until `stop` says so.

    The statistic for a trial is the number of cards revealed before the
    stopping card (the whole library if nothing stops the reveal).

    Args:
        cards: Library contents, one value per card
        stop: Called as stop(card, position); True ends the reveal
        iterations: Number of trials (None = from settings)
        rng: Random source (None = from settings, seeded if configured)
        settings: Tunables; read from the environment when omitted

    Returns:
        RevealResult with the mean statistic and its distribution over
        0..len(cards)
    """
    iterations, rng = _trial_setup(iterations, rng, settings, "reveal_iterations")
    if not cards:
        return RevealResult(expected=0.0, distribution=[], iterations=0)

    library = Library(cards)
    counts = [0] * (len(library) + 1)
    total = 0

    for _ in range(iterations):
        passed = len(library)
        for position, card in enumerate(library.reveal(rng)):
            if stop(card, position):
                passed = position
                break
        counts[passed] += 1
        total += passed

    return RevealResult(
        expected=total / iterations,
        distribution=_frequencies(counts, iterations),
        iterations=iterations,
    )


def simulate_permanent_streak(
    deck_size: int,
    non_permanents: int,
    iterations: Optional[int] = None,
    rng: Optional[random.Random] = None,
    settings: Optional[Settings] = None,
) -> Dict[str, float]:
    """
    Permanents revealed before the first non-permanent (Primal Surge).

    Args:
        deck_size: Total cards in library
        non_permanents: Instants and sorceries in the library
        iterations: Number of trials (None = from settings)
        rng: Random source (None = from settings)
        settings: Tunables; read from the environment when omitted

    Returns:
        Dict with "expected_permanents", "percent_of_deck" and
        "probability_none" (the very first card is a non-permanent)
    """
    if non_permanents < 0 or non_permanents > deck_size:
        raise ValueError(
            f"non_permanents must be within [0, {deck_size}], got {non_permanents}"
        )
    if deck_size == 0:
        return {
            "expected_permanents": 0.0,
            "percent_of_deck": 0.0,
            "probability_none": 0.0,
        }
    iterations, rng = _trial_setup(iterations, rng, settings, "streak_iterations")

    library = Library.from_counts({True: non_permanents}, deck_size, filler=False)
    result = simulate_reveal_until(
        library.cards, lambda is_non_permanent, _: is_non_permanent, iterations, rng
    )

    return {
        "expected_permanents": result.expected,
        "percent_of_deck": result.expected / deck_size * 100,
        "probability_none": result.distribution[0],
    }


def _type_masks(
    type_counts: Mapping[Tuple[str, ...], int]
) -> Tuple[Dict[int, int], int]:
    """Map each card group to a bitmask over the distinct type names."""
    names = sorted({name for group in type_counts for name in group})
    bits = {name: 1 << i for i, name in enumerate(names)}

    masks: Dict[int, int] = {}
    for group, count in type_counts.items():
        if count <= 0:
            continue
        mask = 0
        for name in group:
            mask |= bits[name]
        masks[mask] = masks.get(mask, 0) + count
    return masks, len(names)


@log_calls
def simulate_type_diversity(
    type_counts: Mapping[Tuple[str, ...], int],
    reveal: int,
    deck_size: Optional[int] = None,
    threshold: int = FREE_SPELL_THRESHOLD,
    iterations: Optional[int] = None,
    rng: Optional[random.Random] = None,
    settings: Optional[Settings] = None,
) -> DiversityResult:
    """
    Distinct card types among the top `reveal` cards (Portent of Calamity).

    A card can carry several types ("Artifact Creature"), so each card is a
    bitmask and one revealed card may add more than one type.

    Args:
        type_counts: Copies per type group, e.g. {("artifact", "creature"): 4}
        reveal: Cards revealed (X)
        deck_size: Library size; unlisted cards have no tracked type
        threshold: Distinct types at which one card is cast for free
        iterations: Number of trials (None = from settings)
        rng: Random source (None = from settings)
        settings: Tunables; read from the environment when omitted

    Returns:
        DiversityResult; expected_cards_to_hand counts one card per type,
        minus the free cast once `threshold` types are seen
    """
    iterations, rng = _trial_setup(iterations, rng, settings, "reveal_iterations")
    masks, num_types = _type_masks(type_counts)
    library = Library.from_counts(masks, deck_size, filler=0)

    if len(library) == 0 or reveal <= 0:
        return DiversityResult(
            expected=0.0,
            distribution=[1.0] + [0.0] * num_types,
            iterations=0,
            threshold=threshold,
            expected_cards_to_hand=0.0,
        )

    counts = [0] * (num_types + 1)
    total_types = 0
    total_to_hand = 0

    for _ in range(iterations):
        seen = 0
        for mask in library.partial_shuffle(rng, reveal):
            seen |= mask
        distinct = bin(seen).count("1")

        counts[distinct] += 1
        total_types += distinct
        total_to_hand += distinct - 1 if distinct >= threshold else distinct

    return DiversityResult(
        expected=total_types / iterations,
        distribution=_frequencies(counts, iterations),
        iterations=iterations,
        threshold=threshold,
        expected_cards_to_hand=total_to_hand / iterations,
    )


@log_calls
def simulate_cost_reveal(
    cost_counts: Mapping[int, int],
    x: int,
    deck_size: Optional[int] = None,
    iterations: Optional[int] = None,
    rng: Optional[random.Random] = None,
    settings: Optional[Settings] = None,
) -> RevealResult:
    """
    Permanents with cost <= X among the top X cards (Genesis Wave).

    Args:
        cost_counts: Permanents per mana cost
        x: Cards revealed, and the highest cost put onto the battlefield
        deck_size: Library size; unlisted cards are misses
        iterations: Number of trials (None = from settings)
        rng: Random source (None = from settings)
        settings: Tunables; read from the environment when omitted

    Returns:
        RevealResult over the number of permanents put onto the battlefield
    """
    iterations, rng = _trial_setup(iterations, rng, settings, "reveal_iterations")
    library = Library.from_counts(dict(cost_counts), deck_size, filler=None)
    reveal = min(x, len(library))

    if reveal <= 0:
        return RevealResult(expected=0.0, distribution=[1.0], iterations=0)

    counts = [0] * (reveal + 1)
    total = 0

    for _ in range(iterations):
        hits = sum(
            1
            for cost in library.partial_shuffle(rng, reveal)
            if cost is not None and cost <= x
        )
        counts[hits] += 1
        total += hits

    return RevealResult(
        expected=total / iterations,
        distribution=_frequencies(counts, iterations),
        iterations=iterations,
    )


def free_spell_probability(
    deck_size: int, cost_counts: Mapping[int, int], cast_cost: int
) -> Dict[str, object]:
    """
    Odds that the top card is a cheaper spell (Rashmi, Eternities Crafter).

    Exact, single reveal: a spell whose cost is below `cast_cost` can be
    cast for free; lands and costlier spells whiff.

    Args:
        deck_size: Total cards in library
        cost_counts: Non-land cards per mana cost
        cast_cost: Mana value of the spell that triggered the reveal

    Returns:
        Dict with "prob_free_spell", "prob_whiff", "expected_cost" (given a
        free spell) and "cost_distribution" (cost -> probability)
    """
    if deck_size == 0 or cast_cost == 0:
        return {
            "prob_free_spell": 0.0,
            "prob_whiff": 0.0,
            "expected_cost": 0.0,
            "cost_distribution": {},
        }
    tracked = sum(cost_counts.values())
    if tracked > deck_size:
        raise ValueError(
            f"Sum of cost counts ({tracked}) exceeds deck size ({deck_size})"
        )

    cost_distribution = {}
    prob_free_spell = 0.0
    weighted_cost = 0.0

    for cost, count in sorted(cost_counts.items()):
        prob = count / deck_size
        cost_distribution[cost] = prob
        if cost < cast_cost:
            prob_free_spell += prob
            weighted_cost += prob * cost

    expected_cost = weighted_cost / prob_free_spell if prob_free_spell > 0 else 0.0

    return {
        "prob_free_spell": prob_free_spell,
        "prob_whiff": 1 - prob_free_spell,
        "expected_cost": expected_cost,
        "cost_distribution": cost_distribution,
    }


def build_chain_library(
    spells: Sequence[ChainCard],
    lands: int = 0,
    exclude: Optional[ChainCard] = None,
) -> List[ChainCard]:
    """
    Library for a chain simulation: the spells plus `lands` land sentinels.

    The first copy of `exclude` (the creature whose cast started the chain,
    now on the stack) is left out.
    """
    cards = [ChainCard(LAND_COST) for _ in range(lands)]
    excluded = exclude is None

    for card in spells:
        if not excluded and card == exclude:
            excluded = True
            continue
        cards.append(card)

    return cards


def _discover_chain(
    deck: List[ChainCard], threshold: int, offset: int, depth: int, max_depth: int
) -> Tuple[int, int, int]:
    """
    Follow one discover trigger and everything it chains into.

    Returns:
        Tuple of (total_cost_cast, cards_cast, cards_exiled)
    """
    if depth > max_depth or offset >= len(deck):
        return 0, 0, 0

    for i in range(offset, len(deck)):
        card = deck[i]
        if card.is_land or card.cost > threshold:
            continue

        total_cost, cast, exiled = card.cost, 1, i - offset + 1
        if card.trigger_eligible:
            chain_cost, chain_cast, chain_exiled = _discover_chain(
                deck, card.cost, i + 1, depth + 1, max_depth
            )
            total_cost += chain_cost
            cast += chain_cast
            exiled += chain_exiled
        return total_cost, cast, exiled

    # Nothing castable: every remaining card was exiled
    return 0, 0, len(deck) - offset


@log_calls
def simulate_chained_trigger(
    cards: Sequence[ChainCard],
    initial_threshold: int,
    max_depth: Optional[int] = None,
    iterations: Optional[int] = None,
    rng: Optional[random.Random] = None,
    settings: Optional[Settings] = None,
) -> ChainResult:
    """
    Simulate discover chains (Monstrous Vortex).

    Each trial shuffles once, then reveals until a non-land with cost <=
    the threshold. That card is cast; if it is trigger-eligible, it
    discovers again from the next card with its own cost as threshold.
    Chains stop after `max_depth` re-triggers.

    Args:
        cards: Library contents, lands as LAND_COST cards
        initial_threshold: Cost to discover for (X)
        max_depth: Re-trigger cap (None = from settings)
        iterations: Number of trials (None = from settings)
        rng: Random source (None = from settings)
        settings: Tunables; read from the environment when omitted

    Returns:
        ChainResult with per-trigger means and the pool of castable cards
    """
    if settings is None and None in (max_depth, iterations, rng):
        settings = Settings.from_env()
    if max_depth is None:
        max_depth = settings.chain_max_depth
    iterations, rng = _trial_setup(iterations, rng, settings, "chain_iterations")
    if max_depth < 0:
        raise ValueError(f"max_depth must be >= 0, got {max_depth}")

    eligible_pool = [c for c in cards if not c.is_land and c.cost <= initial_threshold]
    if not cards:
        return ChainResult(0.0, 0.0, 0.0, 0.0, 0.0, eligible_pool, 0)

    library = Library(cards)
    total_cost = 0
    total_cast = 0
    total_exiled = 0
    spell_cost_sum = 0.0
    successful = 0
    chains = 0

    for _ in range(iterations):
        library.shuffle(rng)
        cost, cast, exiled = _discover_chain(
            library.cards, initial_threshold, 0, 0, max_depth
        )
        total_exiled += exiled
        if cast == 0:
            continue

        successful += 1
        total_cast += cast
        total_cost += cost
        spell_cost_sum += cost / cast
        if cast > 1:
            chains += 1

    logger.debug(
        "Discover %d: %d/%d trials cast something, %d chained",
        initial_threshold,
        successful,
        iterations,
        chains,
    )

    return ChainResult(
        mean_cost=total_cost / iterations,
        mean_cast_count=total_cast / iterations,
        chain_rate=chains / iterations,
        mean_spell_cost=spell_cost_sum / successful if successful else 0.0,
        mean_cards_exiled=total_exiled / iterations,
        eligible_pool=eligible_pool,
        iterations=iterations,
    )
