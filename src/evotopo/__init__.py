"""
evotopo - evolving the topology and weights of neural networks.

This package evolves feed-forward neural networks with a NEAT-style genetic
algorithm: a population of variable-structure genomes is split into species by
structural similarity, reproduced through mutation and structurally-aware
crossover, and iterated over generations to maximize a fitness function.

Main components:
- genotype:    Genetic encoding (genomes, genes, innovation tracking)
- phenotype:   Neural network expression and evaluation
- pool:        Population, speciation and reproduction
- run:         Configuration, the evolution driver, hooks and persistence
- activations: Activation functions for neural networks

Example:
    >>> from evotopo import Config, Evolution
    >>> config = Config(num_inputs=2, num_outputs=1)
    >>> def fitness(network):
    ...     return 1.0 - abs(network.forward_pass([1.0, 0.0])[0] - 1.0)
    >>> best_network, best_fitness = Evolution(config, fitness).start()
"""

__version__ = "0.1.0"

# The configuration is imported first: the genotype modules depend on it
from evotopo.run.config              import Config
from evotopo.run.evolution           import Evolution
from evotopo.run.reporter            import Snapshot
from evotopo.run.persistence         import save_network, load_network
from evotopo.errors                  import ConfigError, ExtinctionError, RegistryExhaustedError, StructuralError
from evotopo.genotype.genome         import Genome
from evotopo.genotype.node_gene      import NodeGene, NodeType
from evotopo.genotype.connection_gene import ConnectionGene
from evotopo.phenotype.individual    import Individual
from evotopo.phenotype.network       import Network
from evotopo.pool.population         import Population

__all__ = [
    "Config",
    "Evolution",
    "Snapshot",
    "save_network",
    "load_network",
    "ConfigError",
    "ExtinctionError",
    "RegistryExhaustedError",
    "StructuralError",
    "Genome",
    "NodeGene",
    "NodeType",
    "ConnectionGene",
    "Individual",
    "Network",
    "Population",
]
