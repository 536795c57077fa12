"""
Unit tests for the SpeciesManager class.

Three genome structures are used, at pairwise distances of at least 1.0:
    A: no connections
    B: connection 0 -> 2 (innovation 0)
    C: connection 1 -> 2 (innovation 1)
"""

import math
import pytest

from evotopo.run.config import Config
from evotopo.genotype import Genome
from evotopo.phenotype import Individual
from evotopo.pool.species_manager import SpeciesManager


A = []
B = [(0, 0, 2, 1.0)]
C = [(1, 1, 2, 1.0)]


# ============================================================================
# Helpers
# ============================================================================

def make_config(**overrides):
    parameters = dict(num_inputs=2, num_outputs=1, population_size=10,
                      compatibility_threshold=0.5, distance_includes_nodes=False,
                      min_species_size=0)
    parameters.update(overrides)
    return Config(**parameters)


def make_individual(config, connections, fitness=None):
    genome = Genome.from_dict({
        "connections": [{"innovation": i, "from": a, "to": b, "weight": w} for i, a, b, w in connections]
    }, config)
    individual = Individual(genome)
    individual.fitness = fitness
    return individual


def make_population(config, structures, fitnesses=None):
    fitnesses = fitnesses or [None] * len(structures)
    return [make_individual(config, s, f) for s, f in zip(structures, fitnesses)]


def speciated(config, structures, fitnesses=None, generation=0):
    individuals = make_population(config, structures, fitnesses)
    manager = SpeciesManager(config)
    manager.speciate(individuals, generation)
    return manager, individuals


# ============================================================================
# Test: Speciation
# ============================================================================

class TestSpeciate:
    """Test SpeciesManager.speciate()."""

    def test_identical_individuals_form_one_species(self):
        manager, individuals = speciated(make_config(), [B] * 5)

        assert list(manager.species) == [1]
        assert set(manager.species[1].members) == {ind.ID for ind in individuals}

    def test_distinct_individuals_form_separate_species(self):
        manager, individuals = speciated(make_config(), [A, B, C, A, B])

        assert list(manager.species) == [1, 2, 3]
        assert manager.individual_to_species[individuals[3].ID].id == 1
        assert manager.individual_to_species[individuals[4].ID].id == 2

    def test_every_individual_in_exactly_one_species(self):
        manager, individuals = speciated(make_config(), [A, B, C, C, A, B, A])

        assert set(manager.individual_to_species) == {ind.ID for ind in individuals}
        member_ids = [ind_id for spec in manager.species.values() for ind_id in spec.members]
        assert sorted(member_ids) == sorted(ind.ID for ind in individuals)

    def test_first_matching_species_wins(self):
        """A is at distance 1.0 from both B and C; it joins the older species."""
        manager, individuals = speciated(make_config(compatibility_threshold=1.0), [B, C, A])

        assert list(manager.species) == [1, 2]
        assert manager.individual_to_species[individuals[2].ID].id == 1

    def test_representatives_are_members(self):
        manager, _ = speciated(make_config(), [A, B, C, A, B, C])
        for spec in manager.species.values():
            assert spec.representative.ID in spec.members

    def test_extinct_species_are_removed(self):
        config = make_config()
        manager, _ = speciated(config, [A, B])

        manager.speciate(make_population(config, [A, A]), 1)

        assert list(manager.species) == [1]

    def test_species_ids_are_never_reused(self):
        config = make_config()
        manager, _ = speciated(config, [A, B])
        manager.speciate(make_population(config, [A]), 1)
        manager.speciate(make_population(config, [A, B]), 2)

        assert list(manager.species) == [1, 3]
        assert manager.species[3].created == 2

    def test_existing_species_keep_their_history(self):
        config = make_config()
        manager, _ = speciated(config, [A])
        manager.speciate(make_population(config, [A, A]), 1)

        assert manager.species[1].created == 0
        assert len(manager.species[1].members) == 2


class TestCompatibilityThreshold:
    """Test the adjustment of the compatibility threshold."""

    def test_fixed_threshold(self):
        manager, _ = speciated(make_config(), [A, B, C])
        assert manager.compatibility_threshold == 0.5

    def test_too_many_species_raises_threshold(self):
        manager, _ = speciated(make_config(target_species_count=1, threshold_step=0.1), [A, B, C])
        assert manager.compatibility_threshold == pytest.approx(0.6)

    def test_too_few_species_lowers_threshold(self):
        manager, _ = speciated(make_config(target_species_count=5, threshold_step=0.1), [A, B, C])
        assert manager.compatibility_threshold == pytest.approx(0.4)

    def test_threshold_has_a_floor(self):
        config = make_config(target_species_count=5, threshold_step=0.1,
                             compatibility_threshold=0.35, min_compatibility_threshold=0.3)
        manager, _ = speciated(config, [A, B, C])
        assert manager.compatibility_threshold == pytest.approx(0.3)

    def test_target_reached(self):
        manager, _ = speciated(make_config(target_species_count=3, threshold_step=0.1), [A, B, C])
        assert manager.compatibility_threshold == 0.5


# ============================================================================
# Test: Offspring allocation
# ============================================================================

class TestOffspringAllocations:
    """Test SpeciesManager.calculate_offspring_allocations()."""

    def test_proportional_allocation(self):
        manager, individuals = speciated(make_config(), [A, A, B, C], [1.0, 1.0, 3.0, 0.0])
        allocations = manager.calculate_offspring_allocations(individuals)

        # exact shares 2.5, 7.5 and 0: the tied remainder goes to the lowest species ID
        assert allocations == {1: 3, 2: 7, 3: 0}

    def test_minimum_species_size_is_reserved(self):
        config = make_config(min_species_size=2)
        manager, individuals = speciated(config, [A, A, B, C], [1.0, 1.0, 3.0, 0.0])
        assert manager.calculate_offspring_allocations(individuals) == {1: 3, 2: 5, 3: 2}

    def test_unaffordable_minimum_species_size_is_ignored(self):
        config = make_config(population_size=5, min_species_size=2)
        manager, individuals = speciated(config, [A, A, B, C], [1.0, 1.0, 3.0, 0.0])
        assert manager.calculate_offspring_allocations(individuals) == {1: 1, 2: 4, 3: 0}

    def test_equal_fitness_gives_even_split(self):
        manager, individuals = speciated(make_config(), [A, B, C], [2.0, 2.0, 2.0])
        assert manager.calculate_offspring_allocations(individuals) == {1: 4, 2: 3, 3: 3}

    def test_negative_fitness_is_shifted(self):
        config = make_config(population_size=12)
        manager, individuals = speciated(config, [A, B, C], [-5.0, -3.0, -1.0])
        assert manager.calculate_offspring_allocations(individuals) == {1: 0, 2: 4, 3: 8}

    def test_failed_evaluations_count_as_lowest(self):
        manager, individuals = speciated(make_config(), [A, A, B, C], [-math.inf, -math.inf, 2.0, 4.0])
        assert manager.calculate_offspring_allocations(individuals) == {1: 0, 2: 0, 3: 10}

    def test_all_evaluations_failed(self):
        manager, individuals = speciated(make_config(), [A, B], [-math.inf, -math.inf])
        assert manager.calculate_offspring_allocations(individuals) == {1: 5, 2: 5}

    def test_fitness_is_shared_within_species(self):
        """A large species does not get more offspring than a small one of equal member fitness."""
        manager, individuals = speciated(make_config(), [A, A, A, A, B, C], [2.0, 2.0, 2.0, 2.0, 2.0, 0.0])
        assert manager.calculate_offspring_allocations(individuals) == {1: 5, 2: 5, 3: 0}

    @pytest.mark.parametrize("population_size", [1, 7, 10, 33, 150])
    def test_allocations_add_up_to_population_size(self, population_size):
        config = make_config(population_size=population_size, min_species_size=1)
        manager, individuals = speciated(config, [A, B, C, A, B], [0.3, 1.7, 2.9, 0.1, 0.6])
        assert sum(manager.calculate_offspring_allocations(individuals).values()) == population_size

    def test_no_species(self):
        assert SpeciesManager(make_config()).calculate_offspring_allocations([]) == {}


# ============================================================================
# Test: Stagnation
# ============================================================================

class TestStagnation:
    """Test SpeciesManager.remove_stagnating_species()."""

    def test_stagnant_species_removed_except_the_fittest(self):
        config = make_config(stagnation_after=2, species_elitism=0)
        manager, individuals = speciated(config, [A, B], [1.0, 5.0])
        manager.update_fitness(0)
        manager.update_fitness(3)

        stagnant, survivors = manager.remove_stagnating_species(individuals, 3)

        assert stagnant == {1}
        assert survivors == [individuals[1]]
        assert list(manager.species) == [2]
        assert individuals[0].ID not in manager.individual_to_species

    def test_recently_improved_species_survive(self):
        config = make_config(stagnation_after=2, species_elitism=0)
        manager, individuals = speciated(config, [A, B], [1.0, 5.0])
        manager.update_fitness(0)
        individuals[0].fitness = 2.0
        manager.update_fitness(2)

        stagnant, survivors = manager.remove_stagnating_species(individuals, 3)

        assert stagnant == set()
        assert survivors == individuals

    @pytest.mark.parametrize("species_elitism, expected_survivors", [(0, [2]), (1, [1, 2]), (3, [1, 2, 3])])
    def test_species_elitism(self, species_elitism, expected_survivors):
        """
        Species 1 has the best mean fitness, species 2 holds the fittest individual.
        """
        config = make_config(stagnation_after=0, species_elitism=species_elitism)
        manager, individuals = speciated(config, [A, A, B, B, C], [5.0, 5.0, 6.0, 0.0, 1.0])
        manager.update_fitness(0)

        manager.remove_stagnating_species(individuals, 5)

        assert list(manager.species) == expected_survivors

    def test_nothing_to_remove(self):
        manager = SpeciesManager(make_config())
        assert manager.remove_stagnating_species([], 0) == (set(), [])
