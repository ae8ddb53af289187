"""
Hypergeometric probabilities for one, two and three card types.

Naming follows the deck: N cards in the library, K of the tracked type,
n cards drawn, k of them of the tracked type. Multi-type variants draw the
remainder from the "other" pool (N minus every tracked total).
"""

from typing import List

from .combinatorics import choose


def exactly(N: int, K: int, n: int, k: int) -> float:
    """
    P(exactly k successes) when drawing n from N with K successes.

    Args:
        N: Total cards in population
        K: Success cards in population
        n: Cards drawn
        k: Success cards drawn

    Returns:
        Probability in [0, 1]; 0 for impossible draws
    """
    if k < 0 or k > K:
        return 0.0
    if k > n:
        return 0.0
    if n - k > N - K:
        return 0.0

    return choose(K, k) * choose(N - K, n - k) / choose(N, n)


def at_least(N: int, K: int, n: int, k: int) -> float:
    """P(at least k successes) drawing n from N with K successes."""
    prob = 0.0
    for i in range(max(k, 0), min(K, n) + 1):
        prob += exactly(N, K, n, i)
    return prob


def at_most(N: int, K: int, n: int, k: int) -> float:
    """P(at most k successes); complement of at_least(k + 1)."""
    return 1.0 - at_least(N, K, n, k + 1)


def distribution(N: int, K: int, n: int) -> List[float]:
    """Probabilities of 0..min(K, n) successes, indexed by success count."""
    return [exactly(N, K, n, k) for k in range(min(K, n) + 1)]


def two_type_exactly(
    N: int, K_a: int, K_b: int, n: int, k_a: int, k_b: int
) -> float:
    """
    P(exactly k_a of type A and exactly k_b of type B) in n draws.

    Args:
        N: Total cards
        K_a: Total type A cards
        K_b: Total type B cards
        n: Cards drawn
        k_a: Type A cards drawn
        k_b: Type B cards drawn
    """
    if k_a < 0 or k_b < 0:
        return 0.0
    if k_a + k_b > n:
        return 0.0

    others_total = N - K_a - K_b
    others_drawn = n - k_a - k_b
    if others_drawn < 0 or others_drawn > others_total:
        return 0.0

    numerator = choose(K_a, k_a) * choose(K_b, k_b) * choose(others_total, others_drawn)
    return numerator / choose(N, n)


def two_type_at_least(
    N: int, K_a: int, K_b: int, n: int, k_a: int, k_b: int
) -> float:
    """P(at least k_a of A and at least k_b of B) in n draws."""
    others_total = N - K_a - K_b
    prob = 0.0

    for a in range(max(k_a, 0), min(K_a, n) + 1):
        for b in range(max(k_b, 0), min(K_b, n - a) + 1):
            if n - a - b > others_total:
                continue
            prob += two_type_exactly(N, K_a, K_b, n, a, b)

    return prob


def three_type_exactly(
    N: int,
    K_a: int,
    K_b: int,
    K_c: int,
    n: int,
    k_a: int,
    k_b: int,
    k_c: int,
) -> float:
    """P(exactly k_a of A, k_b of B and k_c of C) in n draws."""
    if k_a < 0 or k_b < 0 or k_c < 0:
        return 0.0
    if k_a + k_b + k_c > n:
        return 0.0

    others_total = N - K_a - K_b - K_c
    others_drawn = n - k_a - k_b - k_c
    if others_drawn < 0 or others_drawn > others_total:
        return 0.0

    numerator = (
        choose(K_a, k_a)
        * choose(K_b, k_b)
        * choose(K_c, k_c)
        * choose(others_total, others_drawn)
    )
    return numerator / choose(N, n)


def three_type_at_least(
    N: int,
    K_a: int,
    K_b: int,
    K_c: int,
    n: int,
    k_a: int,
    k_b: int,
    k_c: int,
) -> float:
    """P(at least k_a of A, k_b of B and k_c of C) in n draws."""
    others_total = N - K_a - K_b - K_c
    prob = 0.0

    for a in range(max(k_a, 0), min(K_a, n) + 1):
        for b in range(max(k_b, 0), min(K_b, n - a) + 1):
            for c in range(max(k_c, 0), min(K_c, n - a - b) + 1):
                if n - a - b - c > others_total:
                    continue
                prob += three_type_exactly(N, K_a, K_b, K_c, n, a, b, c)

    return prob
