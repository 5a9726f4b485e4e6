# src/ttpgen/permutations.py

import logging
import math
import random
from typing import Sequence, Set, Tuple

logger = logging.getLogger(__name__)

Ordering = Tuple[int, ...]


def generate_random_permutations(team_ids: Sequence[int], count: int, seed: int) -> Set[Ordering]:
    """
    `count` distinct shuffles of `team_ids`, drawn from one Random(seed) stream.
    Duplicated shuffles are drawn again from the same stream, so the same
    arguments always give the same set.
    """
    team_ids = list(team_ids)
    if count < 0:
        raise ValueError(f"Number of permutations must be >= 0, got {count}")
    available = math.factorial(len(team_ids))
    if count > available:
        raise ValueError(
            f"Asked for {count} distinct permutations of {len(team_ids)} teams, "
            f"only {available} exist"
        )

    rng = random.Random(seed)
    permutations: Set[Ordering] = set()
    draws = 0
    while len(permutations) < count:
        perm = team_ids[:]
        rng.shuffle(perm)
        permutations.add(tuple(perm))
        draws += 1

    logger.info("Generated %d permutations (seed=%d, %d draws)", count, seed, draws)
    return permutations
