"""
Species Module

This module implements the Species class. A species represents a cluster
of genetically similar individuals that compete primarily within their own niche.

Classes:
    Species: Represents a single species with members and fitness tracking
"""

import math
import random
from statistics import mean
from typing     import TYPE_CHECKING

from evotopo.run.config import Config
if TYPE_CHECKING:
    from evotopo.genotype  import InnovationTracker
    from evotopo.phenotype import Individual

class Species:
    """
    A species representing a cluster of genetically similar individuals.

    The population is divided into species based on genetic similarity, allowing
    different evolutionary niches to develop independently. This protects innovative
    structures from being eliminated by competition with more mature solutions, as
    individuals only compete for offspring within their own species.

    Each species maintains a representative individual used for distance calculations
    during speciation. Species track their fitness over time and are removed if they
    stagnate (fail to improve).

    Public Attributes:
        id:              Unique species identifier
        representative:  Individual used for distance calculations during speciation
        members:         The individuals that are part of this species (ID => Individual)
        created:         Generation in which the species was formed
        age:             Number of generations this species has existed
        last_improved:   Last generation in which the max fitness improved
        fitness:         Mean fitness of the members (None until calculated)
        max_fitness:     Best member fitness ever achieved by this species
        fitness_history: List of mean fitness values over generations

    Public Methods:
        init_for_next_generation(members): Assign the members of a new generation
        update_fitness(generation):        Update species fitness and history
        is_stagnant(generation):           Check if species has stopped improving
        distance_to(individual):           Calculate genetic distance to an individual
        spawn(num_offspring, tracker):     Generate offspring for the next generation
    """

    def __init__(self, species_id: int, representative: 'Individual', generation: int, config: Config):
        """
        Initialize a new species.

        Parameters:
            species_id:     unique species identifier
            representative: the Individual that founds this species
            generation:     the generation in which the species is formed
            config:         stores configuration parameters
        """
        self._config: Config = config

        self.id: int = species_id

        # Representative individual for distance calculations during speciation
        self.representative: 'Individual' = representative

        # All individuals in this species: individual ID => Individual
        # For now we only have one member: the representative.
        self.members: dict[int, 'Individual'] = {representative.ID: representative}

        self.created      : int = generation   # Generation in which this species was formed
        self.age          : int = 0            # How many generations this species has existed
        self.last_improved: int = generation   # Last generation when the best fitness improved

        self.fitness        : float | None = None       # Species fitness (mean fitness of all members)
        self.max_fitness    : float        = -math.inf  # Best member fitness ever achieved by this species
        self.fitness_history: list[float]  = []         # Track fitness over generations

    def init_for_next_generation(self, members: list['Individual']) -> None:
        """
        Reset the species with the members of a new generation.
        The new representative is one of the members, picked at random.

        Parameters:
            members: the individuals of the new generation assigned to this species
        """
        self.members        = {individual.ID: individual for individual in members}
        self.representative = random.choice(members)
        self.fitness        = None

    def update_fitness(self, generation: int) -> None:
        """
        Update the species fitness from the fitness of its members.

        The species fitness is the mean fitness of the members whose evaluation
        succeeded (-inf if none did). The species improves when its best member
        beats the best fitness ever achieved by the species.

        Parameters:
            generation: the current generation
        """
        fitnesses = [individual.fitness for individual in self.members.values()]
        finite    = [f for f in fitnesses if math.isfinite(f)]

        self.fitness = mean(finite) if finite else -math.inf
        self.fitness_history.append(self.fitness)
        self.age = generation - self.created

        best = max(fitnesses)
        if best > self.max_fitness:
            self.max_fitness   = best
            self.last_improved = generation

    def is_stagnant(self, generation: int) -> bool:
        """
        Check whether the species is stagnant: its best fitness
        has not improved in more than 'stagnation_after' generations.
        """
        return generation - self.last_improved > self._config.stagnation_after

    def distance_to(self, individual: 'Individual') -> float:
        """
        Calculate the genetic distance between this species and a given individual.
        Uses the species representative individual for comparison.
        """
        return self.representative.distance(individual)

    def spawn(self,
              num_offspring: int,
              tracker      : 'InnovationTracker',
              population   : list['Individual'] | None = None) -> list['Individual']:
        """
        Generate offspring for the next generation through elitism and reproduction.

        The spawning process:
        1. Sort all members by fitness (highest first, ties broken by lowest ID)
        2. Transfer elite individuals unchanged to preserve the best solutions
        3. Create the parent pool from top performers, based on the survival threshold
        4. Fill the remaining offspring slots: each offspring is produced either by
           crossover of two parents (followed by mutation) or by mutating a clone of
           a single parent. Parents are picked by tournament selection; the second
           parent of a crossover may come from the whole population.

        All member individuals must have their fitness evaluated.

        Parameters:
            num_offspring: number of individuals this species should produce
            tracker:       the run's innovation tracker
            population:    all individuals of the current generation (for interspecies mating)

        Returns:
            List of exactly 'num_offspring' individuals for the next generation
        """
        if num_offspring <= 0 or not self.members:
            return []

        sorted_members = sorted(self.members.values(), key=lambda ind: (-ind.fitness, ind.ID))

        # Apply elitism: the top individuals from the species
        # are transferred to the next generation unchanged.
        elite_number = min(self._config.elitism, num_offspring, len(sorted_members))
        offspring    = [individual.copy() for individual in sorted_members[:elite_number]]

        # Select the parent pool - this is the top fraction of individuals in the species
        num_parents = max(1, int(len(sorted_members) * self._config.survival_threshold))
        parent_pool = sorted_members[:num_parents]

        while len(offspring) < num_offspring:
            parent1 = self._tournament(parent_pool)

            if random.random() < self._config.crossover_probability:
                if population and random.random() < self._config.interspecies_mating_rate:
                    parent2 = self._tournament(population)
                else:
                    parent2 = self._tournament(parent_pool)
                child = parent1.mate(parent2, tracker)
            else:
                child = parent1.clone()
                child.genome.mutate(tracker)

            offspring.append(child)

        return offspring

    def _tournament(self, candidates: list['Individual']) -> 'Individual':
        """
        Pick the fittest of 'tournament_size' individuals drawn at random from 'candidates'.
        """
        size = min(self._config.tournament_size, len(candidates))
        contestants = random.sample(candidates, size)
        return min(contestants, key=lambda ind: (-ind.fitness, ind.ID))

    def __repr__(self):
        return (f"Species(id={self.id}, members={len(self.members)}, age={self.age}, "
                f"fitness={self.fitness}, max_fitness={self.max_fitness})")
