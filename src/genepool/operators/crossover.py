"""
genepool.operators.crossover
============================

Crossover (recombination) of integer gene arrays.
"""

from __future__ import annotations

import numpy as np

from genepool.core.rng import RandomService


def uniform_crossover(genes_a: np.ndarray, genes_b: np.ndarray, rng: RandomService) -> np.ndarray:
    """Return a child whose every position is taken from either parent with equal probability.

    One ``randint(0, 1)`` is drawn per position, so two calls on the same
    parents produce independent children.
    """
    if genes_a.shape != genes_b.shape:
        raise ValueError(f"Parents must have the same shape, got {genes_a.shape} and {genes_b.shape}.")
    from_b = np.array([rng.randint(0, 1) == 1 for _ in range(genes_a.size)], dtype=np.bool_)
    return np.where(from_b, genes_b, genes_a).astype(genes_a.dtype, copy=False)
