"""
Runtime settings for the simulators.

Iteration counts trade runtime for Monte Carlo standard error, which
shrinks as 1/sqrt(iterations). The defaults below are the tunables; any of
them can be overridden from the environment or a .env file.
"""

import os
import random
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv

# Reveal-style simulations (type diversity, cost reveals)
DEFAULT_REVEAL_ITERATIONS = 25_000
# Streak-until-first-miss simulations
DEFAULT_STREAK_ITERATIONS = 15_000
# Chained-trigger (discover) simulations
DEFAULT_CHAIN_ITERATIONS = 20_000
# Recursion bound for chained triggers
DEFAULT_CHAIN_MAX_DEPTH = 10
DEFAULT_CACHE_SIZE = 100


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


@dataclass
class Settings:
    """Simulation and cache settings."""

    reveal_iterations: int = DEFAULT_REVEAL_ITERATIONS
    streak_iterations: int = DEFAULT_STREAK_ITERATIONS
    chain_iterations: int = DEFAULT_CHAIN_ITERATIONS
    chain_max_depth: int = DEFAULT_CHAIN_MAX_DEPTH
    cache_size: int = DEFAULT_CACHE_SIZE

    seed: Optional[int] = None
    """Seed for reproducible simulations (None = nondeterministic)"""

    log_level: str = "INFO"

    def __post_init__(self):
        for name in (
            "reveal_iterations",
            "streak_iterations",
            "chain_iterations",
            "cache_size",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.chain_max_depth < 0:
            raise ValueError(
                f"chain_max_depth must be >= 0, got {self.chain_max_depth}"
            )

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from DECKODDS_* environment variables (.env honored)."""
        load_dotenv(find_dotenv(usecwd=True))

        seed = os.getenv("DECKODDS_SEED")
        return cls(
            reveal_iterations=_env_int(
                "DECKODDS_REVEAL_ITERATIONS", DEFAULT_REVEAL_ITERATIONS
            ),
            streak_iterations=_env_int(
                "DECKODDS_STREAK_ITERATIONS", DEFAULT_STREAK_ITERATIONS
            ),
            chain_iterations=_env_int(
                "DECKODDS_CHAIN_ITERATIONS", DEFAULT_CHAIN_ITERATIONS
            ),
            chain_max_depth=_env_int(
                "DECKODDS_CHAIN_MAX_DEPTH", DEFAULT_CHAIN_MAX_DEPTH
            ),
            cache_size=_env_int("DECKODDS_CACHE_SIZE", DEFAULT_CACHE_SIZE),
            seed=int(seed) if seed else None,
            log_level=os.getenv("DECKODDS_LOG_LEVEL", "INFO"),
        )

    def rng(self) -> random.Random:
        """A fresh random source, seeded when a seed is configured."""
        return random.Random(self.seed)
