# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Reviewer selection — pure computation, no side effects.
"""

import random
from typing import Iterable


def select_reviewers(
    pool: Iterable[str],
    count: int,
    rng: random.Random,
) -> list[str]:
    """
    Pick up to ``count`` distinct ids from ``pool`` uniformly at random,
    without replacement. Returns fewer when the pool is smaller, and an empty
    list for an empty pool. The input is never mutated; repeated ids in the
    pool are treated as one candidate.
    """
    candidates = list(dict.fromkeys(pool))
    if count <= 0 or not candidates:
        return []
    return rng.sample(candidates, min(count, len(candidates)))
