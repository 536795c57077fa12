"""
Evolution Module

This module implements the Evolution class, the driver of a complete run:
it evaluates each generation, splits it into species, reproduces it, and
calls the registered hooks, until the run terminates.

The first generation is evaluated on its own; after that, each step goes through:
    Speciating -> Reproducing -> Evaluating (the offspring) -> Hooking
so every generation built is evaluated, and hooks see the fitness of the generation
they are called for. The run terminates once 'max_generations' generations have been
reproduced, as soon as the best fitness reaches 'fitness_goal' (if set), or when no
species survives.

Classes:
    Evolution: Runs the evolutionary algorithm for a given fitness function
"""

import logging
import math
import random
import numpy as np
from joblib import Parallel, delayed
from typing import Callable

from evotopo.errors          import ConfigError
from evotopo.run.config      import Config
from evotopo.run.reporter    import Reporter, Snapshot, SpeciesSummary
from evotopo.genotype        import Genome, InnovationTracker
from evotopo.phenotype       import Individual, Network
from evotopo.pool            import Population

logger = logging.getLogger(__name__)

# Fitness assigned to an individual whose evaluation failed
FAILED_FITNESS = -math.inf

def _evaluate_network(fitness_function: Callable[[Network], float], network: Network) -> tuple[float, str | None]:
    """
    Evaluate one network, never raising.

    Returns:
        (fitness, None) on success, or (FAILED_FITNESS, reason) if the fitness
        function raised an exception or returned a non-finite value
    """
    try:
        fitness = float(fitness_function(network))
    except Exception as e:
        return FAILED_FITNESS, f"{type(e).__name__}: {e}"
    if not math.isfinite(fitness):
        return FAILED_FITNESS, f"non-finite fitness {fitness}"
    return fitness, None

class Evolution:
    """
    Runs the evolutionary algorithm, evolving networks that maximize a fitness function.

    The fitness function receives a Network and returns a number (higher is better).
    If it raises, or returns NaN or an infinite value, the individual gets the lowest
    possible fitness and the run goes on. The configured complexity costs are
    subtracted from every successful evaluation:
        fitness = raw_fitness - node_cost * nodes - connection_cost * connections

    Parallelization of fitness evaluation:
        num_jobs=1:  Serial evaluation (no parallelization)
        num_jobs>1:  Use specified number of workers (threads or processes, see 'parallel_prefer')
        num_jobs=-1: Use all available CPU cores

    Public Attributes:
        generation:   Number of generations completed so far
        best_genome:  Copy of the best genome found so far
        best_network: Network of the best genome found so far
        best_fitness: Fitness of the best genome found so far

    Public Methods:
        add_hook(every, callback): Register a callback(generation, snapshot) called every N generations
        start():                   Run the algorithm, returning the best network and its fitness
    """

    def __init__(self,
                 config          : Config,
                 fitness_function: Callable[[Network], float],
                 num_jobs        : int | None = None):
        """
        Initialize the evolution driver.

        Parameters:
            config:           Configuration parameters
            fitness_function: Evaluates a network, returning its fitness
            num_jobs:         Number of parallel workers (defaults to the configured 'num_jobs')

        Raises:
            ConfigError: if the configuration is invalid
        """
        config.validate()
        self._config           = config
        self._fitness_function = fitness_function
        self._num_jobs         = config.num_jobs if num_jobs is None else num_jobs
        if self._num_jobs == 0:
            raise ConfigError("num_jobs cannot be 0")
        self._reporter         = Reporter()

        self.tracker     : InnovationTracker | None = None
        self.population  : Population        | None = None
        self.generation  : int                      = 0
        self.best_genome : Genome            | None = None
        self.best_network: Network           | None = None
        self.best_fitness: float                    = FAILED_FITNESS

        self._last_fitness_values: tuple[float, ...] = ()

    def add_hook(self, every: int, callback: Callable[[int, Snapshot], None]) -> None:
        """
        Register a hook called as callback(generation, snapshot) after every
        generation whose number is a multiple of 'every'.
        """
        self._reporter.add_hook(every, callback)

    def start(self) -> tuple[Network | None, float]:
        """
        Run the evolutionary algorithm until it terminates.

        Returns:
            (best_network, best_fitness): the network with the highest fitness found
            during the run, and its fitness (None and -inf if every evaluation failed)

        Raises:
            ConfigError:     if the configuration is invalid
            ExtinctionError: if no species survives
        """
        self._config.validate()
        self._config.freeze()

        if self._config.seed is not None:
            random.seed(self._config.seed)
            np.random.seed(self._config.seed)

        self.tracker      = InnovationTracker(self._config.num_inputs, self._config.num_outputs)
        self.population   = Population(self._config, self.tracker)
        self.generation   = 0
        self.best_genome  = None
        self.best_network = None
        self.best_fitness = FAILED_FITNESS

        logger.info("Starting run: population %d, up to %d generations",
                    self._config.population_size, self._config.max_generations)

        # Every generation built is evaluated before the hooks see it
        self._evaluate_fitness_all()

        while not self._goal_reached() and self.generation < self._config.max_generations:
            self.population.speciate(self.generation)
            logger.info("Generation %d: best fitness %.6f, %d species",
                        self.generation, self.best_fitness, len(self.population.species_manager.species))

            self.population.spawn_next_generation(self.generation)
            self.generation += 1
            self._evaluate_fitness_all()

            self._reporter.fire(self.generation, self._make_snapshot)

        if self._goal_reached():
            logger.info("Generation %d: fitness goal %s reached (best fitness %.6f)",
                        self.generation, self._config.fitness_goal, self.best_fitness)

        logger.info("Run finished after %d generations, best fitness %.6f", self.generation, self.best_fitness)
        return self.best_network, self.best_fitness

    def _evaluate_fitness_all(self) -> None:
        """
        Evaluate the fitness of all individuals of the current generation, in order,
        and update the best individual found so far.

        Raises:
            StructuralError: if the network of an individual cannot be built
        """
        individuals = self.population.individuals
        networks    = [individual.build_network() for individual in individuals]

        if self._num_jobs == 1:
            results = [_evaluate_network(self._fitness_function, network) for network in networks]
        else:
            parallel = Parallel(n_jobs=self._num_jobs, prefer=self._config.parallel_prefer)
            results  = parallel(delayed(_evaluate_network)(self._fitness_function, network) for network in networks)

        for individual, network, (fitness, error) in zip(individuals, networks, results):
            if error is not None:
                logger.warning("Generation %d: evaluation of individual %d failed (%s)",
                               self.generation, individual.ID, error)
            else:
                fitness -= self._config.node_cost       * network.number_nodes
                fitness -= self._config.connection_cost * network.number_connections
            individual.fitness = fitness
            self._update_best(individual, network)

        self._last_fitness_values = tuple(individual.fitness for individual in individuals)

    def _update_best(self, individual: Individual, network: Network) -> None:
        if individual.fitness > self.best_fitness:
            self.best_fitness = individual.fitness
            self.best_genome  = individual.genome.copy()
            self.best_network = network

    def _goal_reached(self) -> bool:
        goal = self._config.fitness_goal
        return goal is not None and self.best_fitness >= goal

    def _make_snapshot(self) -> Snapshot:
        manager = self.population.species_manager
        species = tuple(SpeciesSummary(id            = spec.id,
                                       size          = len(spec.members),
                                       fitness       = spec.fitness,
                                       max_fitness   = spec.max_fitness,
                                       created       = spec.created,
                                       last_improved = spec.last_improved)
                        for spec in manager.species.values())

        return Snapshot(generation              = self.generation,
                        population_size         = len(self.population),
                        fitness_values          = self._last_fitness_values,
                        species                 = species,
                        best_genome             = None if self.best_genome is None else self.best_genome.copy(),
                        best_fitness            = self.best_fitness,
                        compatibility_threshold = manager.compatibility_threshold)

