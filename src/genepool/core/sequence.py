"""
genepool.core.sequence
======================

A string-matching individual: the genome is a sequence of alphabet indices that
evolves toward a fixed target string.
"""

from __future__ import annotations

import string
from collections.abc import Callable

import numpy as np

from genepool.core.rng import RandomService
from genepool.operators import reset_mutation, uniform_crossover

DEFAULT_ALPHABET = string.ascii_lowercase + " "


def _encode(text: str, alphabet: str) -> np.ndarray:
    missing = sorted(set(text) - set(alphabet))
    if missing:
        raise ValueError(f"Characters {missing} are not in the alphabet {alphabet!r}.")
    return np.array([alphabet.index(ch) for ch in text], dtype=np.int32)


class GeneSequence:
    """Gene sequence scored by per-position closeness to a target string.

    Parameters
    ----------
    genes : numpy.ndarray
        Integer array of alphabet indices, same length as ``target``.
    target : str
        Solution the sequence evolves toward.
    alphabet : str, default DEFAULT_ALPHABET
        Valid gene values; each gene is an index into this string.
    """

    __slots__ = ("_fitness", "_target_genes", "alphabet", "genes", "target")

    def __init__(self, genes: np.ndarray, target: str, alphabet: str = DEFAULT_ALPHABET) -> None:
        if not np.issubdtype(genes.dtype, np.integer):
            raise TypeError(f"GeneSequence genes must be integer dtype, got dtype={genes.dtype}.")
        if not target:
            raise ValueError("target must not be empty")
        if len(set(alphabet)) != len(alphabet):
            raise ValueError("alphabet must not contain duplicate characters")
        if genes.shape != (len(target),):
            raise ValueError(f"Expected {len(target)} genes for target {target!r}, got shape {genes.shape}.")
        if genes.size and (genes.min() < 0 or genes.max() >= len(alphabet)):
            raise ValueError(f"Genes must be in [0, {len(alphabet) - 1}].")
        self.genes: np.ndarray = genes.astype(np.int32, copy=False)
        self.target: str = target
        self.alphabet: str = alphabet
        self._target_genes: np.ndarray = _encode(target, alphabet)
        self._fitness: float | None = None

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def random(
        cls, rng: RandomService, target: str = "hello world", alphabet: str = DEFAULT_ALPHABET
    ) -> GeneSequence:
        """Create a sequence whose every gene is drawn uniformly from the alphabet."""
        genes = np.array(rng.sample(0, len(alphabet) - 1, len(target)), dtype=np.int32)
        return cls(genes, target, alphabet)

    @classmethod
    def from_string(cls, text: str, target: str, alphabet: str = DEFAULT_ALPHABET) -> GeneSequence:
        return cls(_encode(text, alphabet), target, alphabet)

    @classmethod
    def factory(cls, target: str, alphabet: str = DEFAULT_ALPHABET) -> Callable[[RandomService], GeneSequence]:
        """Return a population factory producing random sequences for ``target``."""
        _encode(target, alphabet)

        def make(rng: RandomService) -> GeneSequence:
            return cls.random(rng, target=target, alphabet=alphabet)

        return make

    @classmethod
    def breed(cls, parent_a: GeneSequence, parent_b: GeneSequence, rng: RandomService) -> GeneSequence:
        """Uniform crossover of two parents sharing target and alphabet."""
        if parent_a.target != parent_b.target or parent_a.alphabet != parent_b.alphabet:
            raise ValueError("Parents must share the same target and alphabet.")
        child_genes = uniform_crossover(parent_a.genes, parent_b.genes, rng)
        return cls(child_genes, parent_a.target, parent_a.alphabet)

    # ------------------------------------------------------------------
    # Individual protocol
    # ------------------------------------------------------------------
    def fitness(self) -> float:
        if self._fitness is None:
            closeness = (len(self.alphabet) - 1) - np.abs(self.genes - self._target_genes)
            self._fitness = float(closeness.sum())
        return self._fitness

    def max_fitness(self) -> float:
        return float(len(self.target) * (len(self.alphabet) - 1))

    def mutate(self, rate: float, rng: RandomService) -> None:
        self.genes = reset_mutation(self.genes, rate, len(self.alphabet), rng)
        self._fitness = None

    def copy(self) -> GeneSequence:
        clone = GeneSequence(np.copy(self.genes), self.target, self.alphabet)
        clone._fitness = self._fitness
        return clone

    # ------------------------------------------------------------------
    # Dunder helpers
    # ------------------------------------------------------------------
    def __eq__(self, other) -> bool:
        if not isinstance(other, GeneSequence):
            return False
        return (
            np.array_equal(self.genes, other.genes)
            and self.target == other.target
            and self.alphabet == other.alphabet
        )

    def __hash__(self):
        return hash((self.genes.tobytes(), self.target, self.alphabet))

    def __len__(self) -> int:
        return self.genes.size

    def __str__(self) -> str:
        return "".join(self.alphabet[g] for g in self.genes)

    def __repr__(self) -> str:
        return f"GeneSequence({str(self)!r}, target={self.target!r}, fitness={self.fitness():.1f})"
