from __future__ import annotations

import logging
from dataclasses import dataclass

from genepool.core.individual import Individual, IndividualFactory
from genepool.core.rng import RandomService, default_random
from genepool.population import DEFAULT_DEATH_FRACTION, EvolutionStats, Population

# ---------------------------------------------------------------------------
# Config & result
# ---------------------------------------------------------------------------


@dataclass
class EvolutionConfig:
    population_size: int = 100
    max_generations: int = 100
    target_fitness: float | None = None  # None => the individuals' max_fitness()
    mutation_rate: float = 0.1
    elitism: bool = True
    death_fraction: float = DEFAULT_DEATH_FRACTION
    seed: int | None = None
    max_history: int | None = None

    def __post_init__(self) -> None:
        """Validate configuration parameters early to fail fast.

        Rules
        -----
        - population_size > 0
        - max_generations >= 0
        - target_fitness is None or >= 0
        - mutation_rate in [0,1]
        - death_fraction in [0,1)
        - seed is None or >= 0
        - max_history is None or >= 0
        """
        if self.population_size <= 0:
            raise ValueError("population_size must be > 0")
        if self.max_generations < 0:
            raise ValueError("max_generations must be >= 0")
        if self.target_fitness is not None and self.target_fitness < 0:
            raise ValueError("target_fitness must be >= 0 if provided")
        if not (0.0 <= self.mutation_rate <= 1.0):
            raise ValueError("mutation_rate must be in [0,1]")
        if not (0.0 <= self.death_fraction < 1.0):
            raise ValueError("death_fraction must be in [0,1)")
        if self.seed is not None and self.seed < 0:
            raise ValueError("seed must be >= 0 if provided")
        if self.max_history is not None and self.max_history < 0:
            raise ValueError("max_history must be >= 0 if provided")


@dataclass
class EvolutionResult:
    success: bool
    generations: int
    best: Individual
    target_fitness: float
    stats: EvolutionStats


class EvolutionError(RuntimeError):
    pass


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


def _resolve_target(config: EvolutionConfig, population: Population) -> float:
    if config.target_fitness is not None:
        return float(config.target_fitness)
    sample = population.get_individual(0)
    max_fitness = getattr(sample, "max_fitness", None)
    if max_fitness is None:
        raise EvolutionError(
            f"No target_fitness configured and {type(sample).__name__} does not expose max_fitness()."
        )
    return float(max_fitness())


def evolve_population(
    config: EvolutionConfig,
    factory: IndividualFactory,
    rng: RandomService | None = None,
    logger: logging.Logger | None = None,
) -> EvolutionResult:
    """Build a population from ``factory`` and evolve it as described by ``config``.

    Parameters
    ----------
    config : EvolutionConfig
        Run parameters. ``config.seed`` (when set) reseeds the random service first.
    factory : IndividualFactory
        Builds one random individual from the random service.
    rng : RandomService | None
        Service to draw from; defaults to the process-wide one.
    logger : logging.Logger | None
        Defaults to the ``genepool.engine`` logger.
    """
    logger = logger or logging.getLogger("genepool.engine")
    rng = rng if rng is not None else default_random()
    if config.seed is not None:
        rng.seed(config.seed)
        logger.info("Seeded random service with %d", config.seed)

    population = Population(
        config.population_size,
        factory,
        rng,
        death_fraction=config.death_fraction,
        max_history=config.max_history,
    )
    target = _resolve_target(config, population)
    logger.info(
        "Evolving %d individuals for up to %d generations (target=%s, mutation_rate=%s, elitism=%s)",
        config.population_size,
        config.max_generations,
        target,
        config.mutation_rate,
        config.elitism,
    )

    success = population.evolve(config.max_generations, target, config.mutation_rate, config.elitism)
    best = population.get_fittest()
    logger.info(
        "Run %s after %d generations: best=%r",
        "succeeded" if success else "failed",
        population.generation,
        best,
    )
    return EvolutionResult(
        success=success,
        generations=population.generation,
        best=best,
        target_fitness=target,
        stats=population.stats,
    )
