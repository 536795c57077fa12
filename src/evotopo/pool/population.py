"""
Population Module

This module implements the Population class, the container of the individuals
of one generation, which coordinates speciation and reproduction.

Classes:
    Population: Manages the individuals and species of the current generation
"""

import logging
import random
from typing import TYPE_CHECKING

from evotopo.errors                import ExtinctionError
from evotopo.run.config            import Config
from evotopo.genotype              import ConnectionGene, Genome
from evotopo.phenotype             import Individual
from evotopo.pool.species_manager  import SpeciesManager

if TYPE_CHECKING:
    from evotopo.genotype import InnovationTracker

logger = logging.getLogger(__name__)

class Population:
    """
    A population of evolving individuals.

    The population holds the individuals of the current generation, in order, and
    the species they are split into. Its size never changes across generations.

    Public Attributes:
        individuals: List of all Individual objects in the current generation

    Public Properties:
        species_manager: The manager of the species of this population

    Public Methods:
        get_fittest_individual():          Return the individual with highest fitness
        speciate(generation):              Split the current generation into species
        spawn_next_generation(generation): Replace the current generation with its offspring
    """

    def __init__(self, config: Config, tracker: 'InnovationTracker'):
        """
        Create the initial population of minimal individuals.

        Parameters:
            config:  Stores configuration parameters
            tracker: the run's innovation tracker
        """
        self._config  = config
        self._tracker = tracker

        # Step 1: create a number of individuals, each with a network
        # consisting only of unconnected input, output and bias nodes.
        self.individuals = [Individual(Genome(config)) for _ in range(config.population_size)]

        # Step 2: add connections to the neural networks of each Individual.
        # The manner in which this is done depends on the initialization policy.
        if config.initial_cxn_policy == "none":
            pass
        elif config.initial_cxn_policy == "one-input":
            self._connect_one_input()
        elif config.initial_cxn_policy == "partial":
            self._connect_partial()
        elif config.initial_cxn_policy == "full":
            self._connect_full()
        else:
            raise ValueError(f"bad initial connection policy '{config.initial_cxn_policy}'")

        self._species_manager = SpeciesManager(config)

    @property
    def species_manager(self) -> SpeciesManager:
        return self._species_manager

    def _connect(self, genome: Genome, node_in: int, node_out: int) -> None:
        innovation = self._tracker.get_innovation_number(node_in, node_out)
        weight     = ConnectionGene.random_weight(self._config)
        genome.conn_genes[innovation] = ConnectionGene(node_in, node_out, weight, innovation, self._config)

    def _connect_one_input(self) -> None:
        """
        For each network, connect one random input node to all outputs nodes.
        """
        for individual in self.individuals:
            genome = individual.genome
            input_node = random.choice(genome.input_nodes)
            for output_node in genome.output_nodes:
                self._connect(genome, input_node.id, output_node.id)

    def _connect_partial(self) -> None:
        """
        For each network, create a random fraction of all possible
        connections from the input and bias nodes to the output nodes.
        """
        for individual in self.individuals:
            genome = individual.genome
            sources    = genome.input_nodes + [genome.bias_node]
            all_pairs  = [(src.id, out.id) for src in sources for out in genome.output_nodes]
            num_conns  = int(len(all_pairs) * self._config.initial_cxn_fraction)
            for node_in, node_out in sorted(random.sample(all_pairs, num_conns)):
                self._connect(genome, node_in, node_out)

    def _connect_full(self) -> None:
        """
        For each network, connect all inputs nodes and the bias node to all output nodes.
        """
        for individual in self.individuals:
            genome = individual.genome
            for source in genome.input_nodes + [genome.bias_node]:
                for output_node in genome.output_nodes:
                    self._connect(genome, source.id, output_node.id)

    def get_fittest_individual(self) -> 'Individual | None':
        """
        Find and return the individual with the highest fitness in the population
        (the one with the lowest ID among equally fit individuals).

        Returns:
            The fittest individual, or None if the population is empty or
            the fitness of individuals has not been calculated yet
        """
        if not self.individuals or any(ind.fitness is None for ind in self.individuals):
            return None
        return min(self.individuals, key=lambda ind: (-ind.fitness, ind.ID))

    def speciate(self, generation: int) -> None:
        """
        Split the current generation into species.
        """
        self._species_manager.speciate(self.individuals, generation)

    def spawn_next_generation(self, generation: int) -> None:
        """
        Replace the current generation by its offspring.

        The current generation must have been evaluated and speciated.

        Step 1: update the fitness (and improvement record) of all species
        Step 2: remove stagnant species and all their members
        Step 3: calculate how many offspring each surviving species produces
        Step 4: each species spawns its offspring

        Parameters:
            generation: the current generation

        Raises:
            ExtinctionError: if no species survives
        """
        manager = self._species_manager
        manager.update_fitness(generation)

        stagnant, survivors = manager.remove_stagnating_species(self.individuals, generation)
        if stagnant:
            logger.info("Generation %d: removed %d stagnant species", generation, len(stagnant))
        if not manager.species:
            raise ExtinctionError(f"No species left in generation {generation}")

        allocations = manager.calculate_offspring_allocations(survivors)

        offspring_all = []
        for spec_id, spec in manager.species.items():
            offspring_all.extend(spec.spawn(allocations[spec_id], self._tracker, survivors))

        if not offspring_all:
            raise ExtinctionError(f"No offspring produced in generation {generation}")
        self.individuals = offspring_all

    def __len__(self):
        return len(self.individuals)

    def __str__(self):
        return '\n'.join(str(individual) for individual in self.individuals)
