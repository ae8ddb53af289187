"""
Binomial coefficients and factorials.

Everything here returns floats, since callers only ever divide one binomial
by another.
"""

from functools import lru_cache


@lru_cache(maxsize=None)
def factorial(n: int) -> float:
    """
    Factorial as a float, memoized.

    Returns 0 for negative n (an impossible count, not an error).
    """
    if n < 0:
        return 0
    if n in (0, 1):
        return 1

    result = 1.0
    for i in range(2, n + 1):
        result *= i
    return result


def choose(n: int, k: int) -> float:
    """
    Binomial coefficient (n choose k).

    Uses the multiplicative form over min(k, n - k) terms, dividing at every
    step so no intermediate grows past the final result by more than a
    factor of n.

    Args:
        n: Total items
        k: Items to choose

    Returns:
        Number of combinations, 0 when k is outside [0, n]
    """
    if k < 0 or k > n:
        return 0
    if k == 0 or k == n:
        return 1

    k = min(k, n - k)

    result = 1.0
    for i in range(k):
        result *= n - i
        result /= i + 1

    return result
