"""
Card-draw probability package.

Exact multivariate hypergeometric math, a keep/mulligan strategy
optimizer built on it, and Monte Carlo simulators for reveal and
discover-chain effects.
"""

import logging

from .types import (
    OPENING_HAND_SIZE,
    STANDARD_LAND_COUNTS,
    LAND_COST,
    CardType,
    DeckComposition,
    HandOutcome,
    Strategy,
    MarginalBenefit,
    MulliganStage,
    RevealResult,
    DiversityResult,
    ChainCard,
    ChainResult,
)
from .combinatorics import choose, factorial
from .hypergeometric import (
    exactly,
    at_least,
    at_most,
    distribution,
    two_type_exactly,
    two_type_at_least,
    three_type_exactly,
    three_type_at_least,
)
from .multitype import (
    joint_exact,
    joint_at_least,
    enumerate_counts,
    probability_by_turn,
)
from .mulligan import (
    KeepPolicy,
    ThresholdPolicy,
    compute_mulligan_strategy,
    hand_success_probability,
    no_mulligan_success,
    marginal_benefits,
    mulligan_breakdown,
    mulligan_stats,
    find_minimum_count,
)
from .lands import opening_hand_lands, land_drop_by_turn, land_drop_miss_turn
from .library import Library
from .simulation import (
    simulate_reveal_until,
    simulate_permanent_streak,
    simulate_type_diversity,
    simulate_cost_reveal,
    free_spell_probability,
    build_chain_library,
    simulate_chained_trigger,
)
from .cache import ResultCache, make_key
from .config import Settings
from .logging_config import setup_logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Names from the language-neutral interface
hypergeometric_exactly = exactly
hypergeometric_at_least = at_least
joint_at_least_all_types = joint_at_least

__all__ = [
    # Types
    "OPENING_HAND_SIZE",
    "STANDARD_LAND_COUNTS",
    "LAND_COST",
    "CardType",
    "DeckComposition",
    "HandOutcome",
    "Strategy",
    "MarginalBenefit",
    "MulliganStage",
    "RevealResult",
    "DiversityResult",
    "ChainCard",
    "ChainResult",
    # Combinatorics
    "choose",
    "factorial",
    # Hypergeometric
    "exactly",
    "at_least",
    "at_most",
    "distribution",
    "two_type_exactly",
    "two_type_at_least",
    "three_type_exactly",
    "three_type_at_least",
    "hypergeometric_exactly",
    "hypergeometric_at_least",
    # Multi-type
    "joint_exact",
    "joint_at_least",
    "joint_at_least_all_types",
    "enumerate_counts",
    "probability_by_turn",
    # Mulligan
    "KeepPolicy",
    "ThresholdPolicy",
    "compute_mulligan_strategy",
    "hand_success_probability",
    "no_mulligan_success",
    "marginal_benefits",
    "mulligan_breakdown",
    "mulligan_stats",
    "find_minimum_count",
    # Lands
    "opening_hand_lands",
    "land_drop_by_turn",
    "land_drop_miss_turn",
    # Simulation
    "Library",
    "simulate_reveal_until",
    "simulate_permanent_streak",
    "simulate_type_diversity",
    "simulate_cost_reveal",
    "free_spell_probability",
    "build_chain_library",
    "simulate_chained_trigger",
    # Infrastructure
    "ResultCache",
    "make_key",
    "Settings",
    "setup_logging",
]
