from __future__ import annotations

import logging

import pytest

from genepool.core.rng import RandomService
from genepool.core.sequence import GeneSequence
from genepool.population import EvolutionStats, Population, PopulationError

TARGET = "hello world"


class Bits:
    """Minimal duck-typed individual: fitness is the number of set bits."""

    def __init__(self, bits: list[int]) -> None:
        self.bits = bits

    @classmethod
    def random(cls, rng: RandomService) -> Bits:
        return cls(rng.sample(0, 1, 12))

    @classmethod
    def breed(cls, parent_a: Bits, parent_b: Bits, rng: RandomService) -> Bits:
        point = rng.randint(1, len(parent_a.bits) - 1)
        return cls(parent_a.bits[:point] + parent_b.bits[point:])

    def fitness(self) -> float:
        return float(sum(self.bits))

    def max_fitness(self) -> float:
        return float(len(self.bits))

    def mutate(self, rate: float, rng: RandomService) -> None:
        self.bits = [rng.randint(0, 1) if rng.uniform(0.0, 1.0) < rate else b for b in self.bits]

    def copy(self) -> Bits:
        return Bits(list(self.bits))

    def __eq__(self, other) -> bool:
        return isinstance(other, Bits) and self.bits == other.bits


class Mule(Bits):
    @classmethod
    def breed(cls, parent_a, parent_b, rng):
        return object()


class BaseTestPopulation:
    def _population(self, size: int, seed: int = 1, **kwargs) -> Population:
        return Population(size, GeneSequence.factory(TARGET), RandomService(seed), **kwargs)


class TestConstruction(BaseTestPopulation):
    def test_size_and_members(self):
        pop = self._population(10)
        assert pop.get_size() == 10
        assert len(pop) == 10
        assert all(isinstance(ind, GeneSequence) for ind in pop)

    def test_members_are_independent(self):
        pop = self._population(10)
        assert pop.get_individual(0) != pop.get_individual(1)
        assert pop.get_individual(0) is not pop.get_individual(1)

    @pytest.mark.parametrize("size", [0, -1])
    def test_invalid_size(self, size):
        with pytest.raises(ValueError, match="size"):
            self._population(size)

    @pytest.mark.parametrize("death_fraction", [-0.1, 1.0])
    def test_invalid_death_fraction(self, death_fraction):
        with pytest.raises(ValueError, match="death_fraction"):
            self._population(5, death_fraction=death_fraction)

    def test_same_seed_same_population(self):
        a = self._population(8, seed=5)
        b = self._population(8, seed=5)
        assert list(a) == list(b)


class TestAccessors(BaseTestPopulation):
    @pytest.mark.parametrize("index", [-1, 10, 100])
    def test_get_individual_out_of_range(self, index):
        pop = self._population(10)
        with pytest.raises(IndexError):
            pop.get_individual(index)

    @pytest.mark.parametrize("index", [-1, 10])
    def test_store_individual_out_of_range(self, index):
        pop = self._population(10)
        with pytest.raises(IndexError):
            pop.store_individual(index, pop.get_individual(0))

    def test_store_individual_copies(self):
        pop = self._population(5)
        perfect = GeneSequence.from_string(TARGET, TARGET)
        pop.store_individual(3, perfect)
        assert pop.get_individual(3) == perfect
        assert pop.get_individual(3) is not perfect
        assert pop.get_size() == 5

    def test_get_fittest_prefers_first_occurrence(self):
        pop = self._population(6)
        # both are one letter step away from the target, so their fitness ties
        first = GeneSequence.from_string("hello worle", TARGET)
        second = GeneSequence.from_string("hello worlc", TARGET)
        assert first.fitness() == second.fitness() == first.max_fitness() - 1
        pop.store_individual(2, second)
        pop.store_individual(1, first)
        assert pop.get_fittest() == first
        pop.store_individual(3, first)
        pop.store_individual(1, pop.get_individual(0))
        assert pop.get_fittest() == second

    def test_get_fitness_is_sum(self):
        pop = self._population(7)
        assert pop.get_fitness() == sum(ind.fitness() for ind in pop)

    def test_copy_is_deep(self):
        pop = self._population(9)
        clone = pop.copy()
        assert list(clone) == list(pop)
        replacement = GeneSequence.from_string(TARGET, TARGET)
        clone.store_individual(0, replacement)
        assert clone.get_individual(0) == replacement
        assert pop.get_individual(0) != replacement

    def test_get_individual_returns_a_copy(self):
        pop = self._population(5)
        before = pop.get_individual(0)
        got = pop.get_individual(0)
        got.mutate(1.0, pop.rng)
        assert got != before
        assert pop.get_individual(0) == before

    def test_get_fittest_returns_a_copy(self):
        pop = self._population(20)
        best_before = pop.get_fittest().fitness()
        pop.get_fittest().mutate(1.0, pop.rng)
        assert pop.get_fittest().fitness() == best_before

    def test_iteration_yields_copies(self):
        pop = self._population(5)
        before = list(pop)
        for ind in pop:
            ind.mutate(1.0, pop.rng)
        assert list(pop) == before

    def test_store_individual_rejects_other_type(self):
        pop = self._population(5)
        with pytest.raises(PopulationError, match="cannot store Bits"):
            pop.store_individual(1, Bits([1, 0, 1]))
        assert isinstance(pop.get_individual(1), GeneSequence)


class TestGeneration(BaseTestPopulation):
    @pytest.mark.parametrize("size", [1, 2, 3, 4, 10, 99, 100, 101])
    def test_death_and_repopulate_preserve_size(self, size):
        pop = self._population(size)
        pop.death()
        assert pop.get_size() == size
        pop.repopulate()
        assert pop.get_size() == size

    def test_death_ranks_best_first(self):
        pop = self._population(30)
        pop.death()
        scores = [ind.fitness() for ind in pop]
        assert scores == sorted(scores, reverse=True)

    def test_repopulate_keeps_survivors(self):
        pop = self._population(30)
        pop.death()
        survivors = [ind.copy() for ind in list(pop)[:20]]
        pop.repopulate()
        assert list(pop)[:20] == survivors

    def test_repopulate_without_death_is_noop(self):
        pop = self._population(12)
        before = list(pop)
        pop.repopulate()
        assert list(pop) == before

    def test_breed_returning_wrong_type_raises(self):
        pop = Population(6, Mule.random, RandomService(1))
        pop.death()
        with pytest.raises(PopulationError, match="breed"):
            pop.repopulate()


class TestEvolve(BaseTestPopulation):
    @pytest.mark.parametrize("size", [99, 101])
    def test_population_size_constant_through_evolution(self, size):
        pop = self._population(size)
        assert pop.get_size() == size
        pop.evolve(1, GeneSequence.from_string(TARGET, TARGET).max_fitness(), 0.2, True)
        assert pop.get_size() == size

    @pytest.mark.parametrize("generations", [1, 20])
    def test_elitism_never_lowers_best_fitness(self, generations):
        pop = self._population(99)
        pop_old = pop.copy()
        pop.evolve(generations, pop.get_individual(0).max_fitness(), 0.1, True)
        assert pop.get_fittest().fitness() >= pop_old.get_fittest().fitness()
        assert pop.get_size() == pop_old.get_size()

    def test_elitism_monotonic_each_generation(self):
        pop = self._population(31)
        target = pop.get_individual(0).max_fitness()
        best = pop.get_fittest().fitness()
        for _ in range(15):
            pop.evolve(1, target, 0.3, True)
            current = pop.get_fittest().fitness()
            assert current >= best
            best = current

    def test_zero_generations_reports_failure(self):
        pop = self._population(9)
        assert pop.evolve(0, 0.0, 0.1, True) is False
        assert pop.generation == 0

    def test_unreachable_target_reports_failure(self):
        pop = self._population(12)
        assert pop.evolve(5, float("inf"), 0.1, False) is False
        assert pop.generation == 5
        assert pop.stats.generation == 5

    def test_reached_target_stops_early(self):
        pop = self._population(12)
        assert pop.evolve(50, 0.0, 0.1, True) is True
        assert pop.generation == 1

    def test_evolve_is_reproducible(self):
        a = self._population(20, seed=8)
        b = self._population(20, seed=8)
        a.evolve(5, float("inf"), 0.1, True)
        b.evolve(5, float("inf"), 0.1, True)
        assert list(a) == list(b)

    @pytest.mark.parametrize("rate", [-0.5, 1.1])
    def test_invalid_mutation_rate(self, rate):
        with pytest.raises(ValueError, match="mutation_rate"):
            self._population(5).evolve(1, 1.0, rate, True)

    def test_invalid_generations(self):
        with pytest.raises(ValueError, match="max_generations"):
            self._population(5).evolve(-1, 1.0, 0.1, True)

    def test_duck_typed_individual(self):
        pop = Population(25, Bits.random, RandomService(2))
        before = pop.get_fittest().fitness()
        pop.evolve(10, 12.0, 0.05, True)
        assert pop.get_size() == 25
        assert pop.get_fittest().fitness() >= before


class TestStats(BaseTestPopulation):
    def test_stats_track_generations(self):
        pop = self._population(10)
        pop.evolve(4, float("inf"), 0.1, True)
        assert isinstance(pop.stats, EvolutionStats)
        assert [h["generation"] for h in pop.stats.history] == [1, 2, 3, 4]
        assert pop.stats.best_fitness == pop.get_fittest().fitness()
        assert pop.stats.mean_fitness == pytest.approx(pop.get_fitness() / 10)

    def test_stats_history_pruned_to_cap(self):
        pop = self._population(10, max_history=3)
        pop.evolve(7, float("inf"), 0.1, True)
        assert [h["generation"] for h in pop.stats.history] == [5, 6, 7]

    def test_stats_history_zero_cap(self):
        pop = self._population(10, max_history=0)
        pop.evolve(3, float("inf"), 0.1, True)
        assert pop.stats.history == []

    def test_generation_logged(self, caplog):
        pop = self._population(10)
        with caplog.at_level(logging.INFO, logger="genepool.population"):
            pop.evolve(2, float("inf"), 0.1, True)
        assert "Generation 1 stats" in caplog.text
        assert "not reached" in caplog.text
