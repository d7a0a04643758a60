"""
genepool.operators.mutation
===========================

Mutation of integer gene arrays.
"""

from __future__ import annotations

import numpy as np

from genepool.core.rng import RandomService


def reset_mutation(genes: np.ndarray, rate: float, domain_size: int, rng: RandomService) -> np.ndarray:
    """Return a mutated copy of ``genes``.

    Parameters
    ----------
    genes : numpy.ndarray
        1-D array of gene values in ``[0, domain_size)``.
    rate : float
        Per-gene probability of being replaced by a fresh draw from the domain.
    domain_size : int
        Number of valid values per gene.
    rng : RandomService
        Source of every draw.
    """
    if not (0.0 <= rate <= 1.0):
        raise ValueError("rate must be in [0,1]")
    if domain_size <= 0:
        raise ValueError("domain_size must be > 0")
    mutated = genes.copy()
    for i in range(mutated.size):
        # uniform() is half-open, so rate 0 never fires and rate 1 always does
        if rng.uniform(0.0, 1.0) < rate:
            mutated[i] = rng.randint(0, domain_size - 1)
    return mutated
