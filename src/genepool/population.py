from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from genepool.core.individual import Individual, IndividualFactory, create_individuals
from genepool.core.rng import RandomService, default_random

# ---------------------------------------------------------------------------
# Stats & exceptions
# ---------------------------------------------------------------------------

DEFAULT_DEATH_FRACTION = 1.0 / 3.0


@dataclass
class EvolutionStats:
    generation: int = 0
    best_fitness: float = float("-inf")
    mean_fitness: float = float("-inf")
    history: list[dict[str, Any]] = field(default_factory=list)


class PopulationError(RuntimeError):
    pass


# ---------------------------------------------------------------------------
# Population
# ---------------------------------------------------------------------------


class Population:
    """Fixed-size, ordered collection of individuals evolving together.

    Parameters
    ----------
    size : int
        Number of individuals; constant for the lifetime of the population.
    factory : IndividualFactory
        Builds one freshly randomized individual from the random service.
    rng : RandomService | None
        Source of every stochastic choice. Defaults to the process-wide service.
    death_fraction : float, default 1/3
        Share of the population discarded by :meth:`death` each generation.
    max_history : int | None
        Keep only the newest ``max_history`` generation snapshots in ``stats``.
    logger : logging.Logger | None
        Defaults to the ``genepool.population`` logger.
    """

    def __init__(  # noqa: PLR0913
        self,
        size: int,
        factory: IndividualFactory,
        rng: RandomService | None = None,
        *,
        death_fraction: float = DEFAULT_DEATH_FRACTION,
        max_history: int | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        if size <= 0:
            raise ValueError("size must be > 0")
        if not (0.0 <= death_fraction < 1.0):
            raise ValueError("death_fraction must be in [0,1)")
        if max_history is not None and max_history < 0:
            raise ValueError("max_history must be >= 0 or None")
        self.rng: RandomService = rng if rng is not None else default_random()
        self.death_fraction = death_fraction
        self.max_history = max_history
        self.logger = logger or logging.getLogger("genepool.population")

        self._individuals: list[Individual] = create_individuals(factory, size, self.rng)
        # slots at the tail that death() has freed and repopulate() has yet to refill
        self._vacancies: int = 0
        self.generation: int = 0
        self.stats = EvolutionStats()

    # -----------------------------
    # Accessors
    # -----------------------------

    def get_size(self) -> int:
        return len(self._individuals)

    def __len__(self) -> int:
        return len(self._individuals)

    def __iter__(self) -> Iterator[Individual]:
        return (ind.copy() for ind in self._individuals)

    def __repr__(self) -> str:
        return f"Population(size={self.get_size()}, generation={self.generation})"

    def _check_index(self, index: int) -> None:
        if not (0 <= index < len(self._individuals)):
            raise IndexError(f"index {index} out of range for population of size {len(self._individuals)}")

    def get_individual(self, index: int) -> Individual:
        """Return a copy of the individual in slot ``index``."""
        self._check_index(index)
        return self._individuals[index].copy()

    def store_individual(self, index: int, individual: Individual) -> None:
        """Overwrite slot ``index`` with a copy of ``individual``."""
        self._check_index(index)
        expected = type(self._individuals[index])
        if not isinstance(individual, expected):
            raise PopulationError(f"cannot store {type(individual).__name__} in a population of {expected.__name__}")
        self._individuals[index] = individual.copy()

    def _fittest_index(self) -> int:
        best = 0
        for i, ind in enumerate(self._individuals):
            if ind.fitness() > self._individuals[best].fitness():
                best = i
        return best

    def get_fittest(self) -> Individual:
        """Return a copy of the individual with maximum fitness; ties go to the earliest slot."""
        return self._individuals[self._fittest_index()].copy()

    def get_fitness(self) -> float:
        """Return the summed fitness of every individual."""
        return sum(ind.fitness() for ind in self._individuals)

    def copy(self) -> Population:
        """Deep-copy the individuals; the random service is shared."""
        clone = Population.__new__(Population)
        clone.rng = self.rng
        clone.death_fraction = self.death_fraction
        clone.max_history = self.max_history
        clone.logger = self.logger
        clone._individuals = [ind.copy() for ind in self._individuals]
        clone._vacancies = self._vacancies
        clone.generation = self.generation
        clone.stats = EvolutionStats(
            generation=self.stats.generation,
            best_fitness=self.stats.best_fitness,
            mean_fitness=self.stats.mean_fitness,
            history=[dict(h) for h in self.stats.history],
        )
        return clone

    # -----------------------------
    # Evolution
    # -----------------------------

    def evolve(self, max_generations: int, target_fitness: float, mutation_rate: float, elitism: bool) -> bool:
        """Evolve for up to ``max_generations`` generations.

        Returns True as soon as the fittest individual reaches ``target_fitness``
        after a generation, False once the budget is exhausted without it.
        """
        if max_generations < 0:
            raise ValueError("max_generations must be >= 0")
        if not (0.0 <= mutation_rate <= 1.0):
            raise ValueError("mutation_rate must be in [0,1]")

        for _ in range(max_generations):
            self.death()
            self.repopulate()
            self._mutate(mutation_rate, elitism)
            self.generation += 1
            self._update_stats()

            if self._individuals[self._fittest_index()].fitness() >= target_fitness:
                self.logger.info("Target fitness %s reached at generation %d", target_fitness, self.generation)
                return True

        self.logger.info(
            "Target fitness %s not reached after %d generations (best=%s)",
            target_fitness,
            max_generations,
            self.stats.best_fitness,
        )
        return False

    def death(self) -> None:
        """Rank individuals best-first and mark the weakest tail as vacant.

        Discarded individuals stay in their slots until :meth:`repopulate`
        replaces them, so the size never changes.
        """
        self._individuals.sort(key=lambda ind: ind.fitness(), reverse=True)
        self._vacancies = int(len(self._individuals) * self.death_fraction)
        self.logger.debug(
            "Death: %d survivors, %d vacancies", len(self._individuals) - self._vacancies, self._vacancies
        )

    def repopulate(self) -> None:
        """Refill vacant slots with children bred from uniformly chosen survivors."""
        if self._vacancies == 0:
            return
        survivors = len(self._individuals) - self._vacancies
        for slot in range(survivors, len(self._individuals)):
            if survivors >= 2:
                i, j = self.rng.sample(0, survivors - 1, 2, unique=True)
            else:
                i = j = 0
            parent_a, parent_b = self._individuals[i], self._individuals[j]
            child = type(parent_a).breed(parent_a, parent_b, self.rng)
            if not isinstance(child, type(parent_a)):
                raise PopulationError(
                    f"breed() returned {type(child).__name__}, expected {type(parent_a).__name__}"
                )
            self._individuals[slot] = child
        self._vacancies = 0

    def _mutate(self, mutation_rate: float, elitism: bool) -> None:
        elite_index = self._fittest_index() if elitism else -1
        for i, ind in enumerate(self._individuals):
            if i == elite_index:
                # carried over as a value copy so later generations never alias it
                self._individuals[i] = ind.copy()
                continue
            ind.mutate(mutation_rate, self.rng)

    def _update_stats(self) -> None:
        scores = [ind.fitness() for ind in self._individuals]
        self.stats.generation = self.generation
        self.stats.best_fitness = max(scores)
        self.stats.mean_fitness = sum(scores) / len(scores)

        snapshot = {
            "generation": self.generation,
            "best": self.stats.best_fitness,
            "mean": self.stats.mean_fitness,
            "time": time.time(),
        }
        self.stats.history.append(snapshot)
        if self.max_history is not None:
            excess = len(self.stats.history) - self.max_history
            if excess > 0:
                del self.stats.history[:excess]
        self.logger.info(
            "Generation %d stats: best=%s mean=%s",
            self.generation,
            self.stats.best_fitness,
            self.stats.mean_fitness,
        )
