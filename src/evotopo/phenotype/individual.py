"""
Individual Module

This module implements the Individual class, representing a member of the
evolving population.

Classes:
    Individual: A genome with a unique ID and a fitness
"""

from itertools import count
from typing    import Optional, TYPE_CHECKING

from evotopo.phenotype.network import Network
if TYPE_CHECKING:
    from evotopo.genotype import Genome, InnovationTracker

class Individual:
    """
    An individual organism in the population.

    You can regard an individual as a thin wrapper around a genome, to which it
    adds a unique ID and a fitness. The evolutionary algorithm operates on
    Individual(s), which are evaluated, compared, and reproduced to create
    offspring through mutation and crossover. The network expressed by the
    genome is built on demand.

    Public Attributes:
        ID:      Unique identifier for this individual
        genome:  The genome of this individual
        fitness: Fitness score (None until evaluated)

    Public Methods:
        build_network(): Build the network expressed by the genome
        copy():          Create an identical copy (same ID and fitness)
        clone():         Create a new Individual with a copy of the genome
        distance(other): Calculate genetic distance to another individual
        mate(other):     Reproduce with another individual via crossover and mutation
        prune():         Create a pruned copy of this individual
    """

    _id_generator = count(0)

    def __init__(self, genome: 'Genome'):
        """
        Initialize the Individual given its genotype.

        Parameters:
            genome: The Genome encoding the neural network that powers this Individual
        """
        self.ID     : int             = next(Individual._id_generator)
        self.genome : 'Genome'        = genome
        self.fitness: Optional[float] = None

    def build_network(self) -> Network:
        """
        Build the network expressed by the genome of this individual.
        """
        return Network.from_genome(self.genome)

    def copy(self) -> 'Individual':
        """
        Create a copy of this individual with the same ID and fitness, and an independent genome.
        """
        individual = Individual.__new__(Individual)
        individual.ID      = self.ID
        individual.genome  = self.genome.copy()
        individual.fitness = self.fitness
        return individual

    def clone(self) -> 'Individual':
        """
        Create a new Individual from the same genome as the current one.
        """
        return Individual(self.genome.copy())

    def distance(self, other: 'Individual') -> float:
        """
        Calculate the genetic distance between this individual and another.
        """
        return self.genome.distance(other.genome)

    def mate(self, other: 'Individual', tracker: 'InnovationTracker') -> 'Individual':
        """
        Create a new Individual by mating with another Individual.

        Mating involves the following steps:
         - create a new genome, via crossover between the genomes of the two mating Individuals
         - if the new genome contains a cycle, replace it by a copy of the fitter parent's genome
         - mutate the new genome
         - create a new Individual based on the new genome, this is the offspring

        Parameters:
            other:   the Individual with whom this Individual is mating
            tracker: the run's innovation tracker

        Returns:
            the offspring resulting from the mating process
        """
        genome_child = self.genome.crossover(other.genome, self.fitness, other.fitness)
        if genome_child.has_cycle():
            fitter = self if self.fitness >= other.fitness else other
            genome_child = fitter.genome.copy()
        genome_child.mutate(tracker)
        return Individual(genome_child)

    def prune(self) -> 'Individual':
        """
        Create a pruned copy of this individual, removing dead-end nodes and disabled connections.
        The ID and fitness are copied from the original individual.
        """
        pruned_individual = self.copy()
        pruned_individual.genome = self.genome.prune()
        return pruned_individual

    def __str__(self):
        fitness = "None" if self.fitness is None else f"{self.fitness:.4f}"
        return f"ID={self.ID}, fitness={fitness}\n{self.genome}"

    def __repr__(self):
        return f"Individual(ID={self.ID}, genome={self.genome!r})"
