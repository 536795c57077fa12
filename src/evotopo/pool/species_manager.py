"""
Species Manager Module

This module implements the SpeciesManager class. The manager coordinates the
speciation process and manages the lifecycle of all species across generations.

New structural innovations often have lower initial fitness and would quickly be
eliminated in a single pool. Organizing the population into species (groups of
genetically similar individuals that compete primarily within their own niche)
gives novel structures time to optimize before facing global competition.

How Speciation Works:
1. Each individual, in population order, is compared with the representative of
   each species, in the order in which the species were formed
2. It joins the first species whose representative is within the compatibility threshold
3. An individual that fits no species founds a new one
4. Species left without members go extinct; each surviving species picks a new
   random representative among its members
5. Each species spawns offspring in proportion to its (shared) fitness
6. Stagnant species are removed to free resources for innovation

Classes:
    SpeciesManager: Manages all species, handles speciation and offspring allocation
"""

import logging
import math
from itertools import count
from typing    import TYPE_CHECKING

if TYPE_CHECKING:
    from evotopo.phenotype import Individual
from evotopo.run.config   import Config
from evotopo.pool.species import Species

logger = logging.getLogger(__name__)

class SpeciesManager:
    """
    Manages the collection of species and speciation process across generations.

    Public Attributes:
        species:                 Dictionary mapping species IDs to Species instances (creation order)
        individual_to_species:   Dictionary mapping individual IDs to their Species
        compatibility_threshold: Current maximum distance for same-species membership

    Public Methods:
        speciate(individuals, generation):                  Assign all individuals to species
        update_fitness(generation):                         Calculate and update all species fitnesses
        remove_stagnating_species(individuals, generation): Remove species that haven't improved
        calculate_offspring_allocations(individuals):       Determine offspring count per species
    """

    class DistanceCache:
        """
        Caches the genomic distance between individuals.
        """
        def __init__(self):
            self.distances = {}

        def __call__(self, individual1, individual2):
            id1  = individual1.ID
            id2  = individual2.ID
            dist = self.distances.get((id1, id2))
            if dist is None:
                dist = individual1.distance(individual2)
                self.distances[(id1, id2)] = dist
                self.distances[(id2, id1)] = dist
            return dist

    def __init__(self, config: Config):
        """
        Initialize the Species Manager.

        Parameters:
            config: Stores configuration parameters.
        """
        self.species              : dict[int, Species] = {}   # species ID    => Species instance
        self.individual_to_species: dict[int, Species] = {}   # individual ID => Species instance
        self.compatibility_threshold = config.compatibility_threshold
        self._id_generator = count(1)                         # generates species IDs
        self._config       = config

    def speciate(self, individuals: list['Individual'], generation: int) -> None:
        """
        Assign all individuals of a generation to species based on genetic similarity.

        Individuals are processed in population order. Each one is compared with the
        species representatives in the order in which the species were created, and
        joins the first species whose representative is at a distance not greater than
        the compatibility threshold. If there is none, the individual founds a new
        species and becomes its representative.

        Afterwards, species without members are removed, and every surviving species
        picks a new representative at random among its members. When a target number
        of species is configured, the compatibility threshold is finally moved towards
        the value that produces it.

        Postconditions:
            - Every individual is assigned to exactly one species
            - Each species has at least one member
            - Species representatives are from the current population

        Parameters:
            individuals: all individuals of the current generation
            generation:  the current generation
        """
        dist_cache = SpeciesManager.DistanceCache()

        representatives = {spec_id: spec.representative for spec_id, spec in self.species.items()}
        new_members: dict[int, list['Individual']] = {spec_id: [] for spec_id in self.species}

        for individual in individuals:
            for spec_id, rep in representatives.items():
                if dist_cache(individual, rep) <= self.compatibility_threshold:
                    new_members[spec_id].append(individual)
                    break

            # No species is similar enough, assign to a new species,
            # with this individual as its species representative.
            else:
                spec_id = next(self._id_generator)
                self.species[spec_id]     = Species(spec_id, individual, generation, self._config)
                representatives[spec_id] = individual
                new_members[spec_id]     = [individual]

        # Update all species, removing the extinct ones
        self.individual_to_species = {}
        for spec_id, members in new_members.items():
            if not members:
                logger.debug("Species %d went extinct in generation %d", spec_id, generation)
                del self.species[spec_id]
                continue

            spec = self.species[spec_id]
            spec.init_for_next_generation(members)
            for individual in members:
                self.individual_to_species[individual.ID] = spec

        self._adjust_compatibility_threshold()

    def _adjust_compatibility_threshold(self) -> None:
        target = self._config.target_species_count
        if target is None:
            return

        if len(self.species) > target:
            self.compatibility_threshold += self._config.threshold_step
        elif len(self.species) < target:
            self.compatibility_threshold = max(self._config.min_compatibility_threshold,
                                               self.compatibility_threshold - self._config.threshold_step)

    def update_fitness(self, generation: int) -> None:
        """
        Calculate and update the fitness of all species.
        Assumes that the fitness of all members has already been evaluated.
        """
        for spec in self.species.values():
            spec.update_fitness(generation)

    def remove_stagnating_species(self,
                                  individuals: list['Individual'],
                                  generation : int) -> tuple[set[int], list['Individual']]:
        """
        Identify and remove species that have been stagnating for too long.

        A species is stagnant if it hasn't improved its best fitness for a
        given number of generations. However, a species is protected from
        being marked as stagnant if:
        - It contains the fittest individual in the entire population, OR
        - It is in the top 'species_elitism' species ranked by fitness

        Parameters:
            individuals: all individuals of the current generation
            generation:  the current generation

        Returns:
            Tuple of (stagnant species IDs, surviving individuals)
        """
        if not individuals or not self.species:
            return set(), individuals

        # Find the fittest individual in the entire population and its species
        fittest_individual = min(individuals, key=lambda ind: (-ind.fitness, ind.ID))
        species_fittest_indiv = self.individual_to_species[fittest_individual.ID]

        # Protect from elimination the top N species,
        # plus the species with the fittest individual
        sorted_species = sorted(self.species.values(), key=lambda s: (-s.fitness, s.id))
        protected_spec_ids = {s.id for s in sorted_species[:self._config.species_elitism]}
        protected_spec_ids.add(species_fittest_indiv.id)

        stagnating_spec_ids = {spec.id for spec in self.species.values()
                               if spec.id not in protected_spec_ids and spec.is_stagnant(generation)}

        stagnating_indiv_ids = set()
        for spec_id in stagnating_spec_ids:
            spec = self.species.pop(spec_id)
            stagnating_indiv_ids.update(spec.members.keys())
            logger.debug("Species %d removed as stagnant (last improved in generation %d)",
                         spec_id, spec.last_improved)
        for indiv_id in stagnating_indiv_ids:
            del self.individual_to_species[indiv_id]

        survivors = [ind for ind in individuals if ind.ID not in stagnating_indiv_ids]
        return stagnating_spec_ids, survivors

    def calculate_offspring_allocations(self, individuals: list['Individual']) -> dict[int, int]:
        """
        Calculate how many offspring each species should produce.

        Explicit fitness sharing divides the fitness of each individual by the size
        of its species, so the share of a species is the mean fitness of its members.
        Fitness values are first shifted by the lowest finite fitness in the population,
        making all shares non-negative (failed evaluations count as that lowest value).

        Each species is first reserved 'min_species_size' offspring, if the population
        is large enough to afford it for every species. The rest of the population is
        allocated in proportion to the shares (evenly if they are all zero), rounding
        with the largest remainder method. The allocations add up to exactly the
        population size.

        Parameters:
            individuals: all individuals of the species being allocated

        Returns:
            Dictionary mapping species ID to the number of offspring to produce
        """
        if not self.species:
            return {}

        population_size = self._config.population_size
        num_species     = len(self.species)

        finite    = [ind.fitness for ind in individuals if math.isfinite(ind.fitness)]
        min_value = min(finite) if finite else 0.0

        shares = {}
        for spec_id, spec in self.species.items():
            adjusted = [max(ind.fitness, min_value) - min_value if math.isfinite(ind.fitness) else 0.0
                        for ind in spec.members.values()]
            shares[spec_id] = sum(adjusted) / len(adjusted)
        total_share = sum(shares.values())

        # Reserve the minimum species size only when every species can get it
        reserved = self._config.min_species_size
        if reserved * num_species > population_size:
            reserved = 0
        remaining = population_size - reserved * num_species

        if total_share > 0:
            exact = {spec_id: remaining * share / total_share for spec_id, share in shares.items()}
        else:
            exact = {spec_id: remaining / num_species for spec_id in shares}

        allocations = {spec_id: reserved + math.floor(value) for spec_id, value in exact.items()}

        # Largest remainder rounding: hand out the leftover slots one at a time
        leftover     = population_size - sum(allocations.values())
        by_remainder = sorted(exact, key=lambda spec_id: (-(exact[spec_id] - math.floor(exact[spec_id])), spec_id))
        for spec_id in by_remainder[:leftover]:
            allocations[spec_id] += 1

        return allocations
