"""
genepool.operators
==================

Gene-level variation operators shared by concrete individuals.

Design:
 - Operators work on 1-D integer numpy arrays of gene values and return new arrays.
 - Every stochastic choice goes through an injected :class:`genepool.core.rng.RandomService`.
"""

from __future__ import annotations

from genepool.operators.crossover import uniform_crossover
from genepool.operators.mutation import reset_mutation

__all__ = ["reset_mutation", "uniform_crossover"]
