"""Individual capability contract and population factory utilities.

Any type that exposes the members of :class:`Individual` can be evolved by a
:class:`genepool.population.Population`; no base class is required.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, TypeVar, runtime_checkable

from genepool.core.rng import RandomService

I = TypeVar("I", bound="Individual")


@runtime_checkable
class Individual(Protocol):
    """A single candidate solution.

    Implementations must satisfy:

    - ``fitness()`` is non-negative and a pure function of the current
      representation (memoization is allowed).
    - ``mutate(rate, rng)`` resets each unit with probability ``rate`` and
      invalidates any cached fitness.
    - ``breed(a, b, rng)`` is a classmethod returning a fresh child; every
      call draws its own randomness.
    - ``__eq__`` compares representations only, never fitness.
    - ``random(rng)`` is a classmethod building a uniformly random instance.

    Individuals may also expose ``max_fitness()``, the best attainable score;
    the runner uses it as the default target.
    """

    def fitness(self) -> float: ...

    def mutate(self, rate: float, rng: RandomService) -> None: ...

    def copy(self: I) -> I: ...

    @classmethod
    def breed(cls: type[I], parent_a: I, parent_b: I, rng: RandomService) -> I: ...

    @classmethod
    def random(cls: type[I], rng: RandomService) -> I: ...


IndividualFactory = Callable[[RandomService], Individual]


def create_individuals(factory: IndividualFactory, size: int, rng: RandomService) -> list[Individual]:
    """Create ``size`` freshly randomized individuals.

    Parameters
    ----------
    factory : IndividualFactory
        Callable receiving the random service and returning a new individual.
    size : int
        Number of individuals to create (must be > 0).
    rng : RandomService
        Service every random initialization draws from.
    """
    if size <= 0:
        raise ValueError("size must be > 0")
    individuals = [factory(rng) for _ in range(size)]
    for ind in individuals:
        if not isinstance(ind, Individual):
            raise TypeError(f"Factory returned {type(ind).__name__}, which does not implement Individual.")
    return individuals
