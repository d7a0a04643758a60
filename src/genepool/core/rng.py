"""
genepool.core.rng
=================

Seedable random service that drives every stochastic decision of the engine.

A :class:`RandomService` wraps a :class:`numpy.random.Generator` and remembers
the last seed it was given, so :meth:`RandomService.reset` can replay the exact
same draw sequence without the caller re-specifying the seed.

The module also keeps one process-wide default instance, seeded with
:data:`DEFAULT_SEED`. Components that are not handed an explicit service fall
back to it; independent runs should inject their own instance instead.
"""

from __future__ import annotations

import numpy as np

__all__ = [
    "DEFAULT_SEED",
    "InvalidRangeError",
    "RandomService",
    "default_random",
    "reset",
    "seed",
]

DEFAULT_SEED = 0


class InvalidRangeError(ValueError):
    """Raised when a draw is requested from an interval that cannot satisfy it."""


class RandomService:
    """Deterministic pseudo-random source.

    Parameters
    ----------
    seed : int, default DEFAULT_SEED
        Initial seed. Must be non-negative.
    """

    def __init__(self, seed: int = DEFAULT_SEED) -> None:
        self._last_seed: int = DEFAULT_SEED
        self._rng: np.random.Generator = np.random.default_rng(DEFAULT_SEED)
        self.seed(seed)

    def __repr__(self) -> str:
        return f"RandomService(last_seed={self._last_seed})"

    @property
    def last_seed(self) -> int:
        return self._last_seed

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------
    def seed(self, value: int) -> None:
        """(Re)initialize the generator from ``value`` and record it as the last seed."""
        value = int(value)
        if value < 0:
            raise ValueError("seed must be >= 0")
        self._last_seed = value
        self._rng = np.random.default_rng(value)

    def reset(self) -> None:
        """Reinitialize the generator from the last recorded seed."""
        self._rng = np.random.default_rng(self._last_seed)

    # ------------------------------------------------------------------
    # Draws
    # ------------------------------------------------------------------
    def uniform(self, low: float, high: float) -> float:
        """Return a float drawn uniformly from ``[low, high)``."""
        if low >= high:
            raise ValueError(f"Invalid interval [{low}, {high}): low must be < high.")
        value = float(self._rng.uniform(low, high))
        # floating-point rounding can land exactly on high
        if value >= high:
            value = float(np.nextafter(high, low))
        return value

    def randint(self, low: int, high: int) -> int:
        """Return an integer drawn uniformly from the closed interval ``[low, high]``."""
        if low > high:
            raise InvalidRangeError(f"Invalid interval [{low}, {high}]: low must be <= high.")
        return int(self._rng.integers(low, high, endpoint=True))

    def sample(self, low: int, high: int, count: int, unique: bool = False) -> list[int]:
        """Draw ``count`` integers from ``[low, high]`` in draw order.

        With ``unique=True`` no value repeats. The range is validated before
        anything is drawn, so a rejected call leaves the generator untouched.
        """
        if count < 0:
            raise InvalidRangeError("count must be >= 0")
        if low > high:
            raise InvalidRangeError(f"Invalid interval [{low}, {high}]: low must be <= high.")
        if count == 0:
            return []
        span = high - low + 1
        if unique:
            if count > span:
                raise InvalidRangeError(
                    f"Cannot draw {count} unique values from [{low}, {high}] ({span} available)."
                )
            picks = self._rng.choice(span, size=count, replace=False)
            return [int(p) + low for p in picks]
        return [self.randint(low, high) for _ in range(count)]


# ---------------------------------------------------------------------------
# Process-wide default
# ---------------------------------------------------------------------------
_default = RandomService(DEFAULT_SEED)


def default_random() -> RandomService:
    """Return the process-wide random service."""
    return _default


def seed(value: int) -> None:
    """Seed the process-wide random service."""
    _default.seed(value)


def reset() -> None:
    """Reset the process-wide random service to its last seed."""
    _default.reset()
