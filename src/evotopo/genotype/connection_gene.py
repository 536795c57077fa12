"""
Connection Gene Module

This module implements the ConnectionGene class.

Classes:
    ConnectionGene: Gene encoding a weighted connection between nodes
"""

from evotopo.run.config               import Config
from evotopo.genotype.gene_parameter  import GeneParameter

class ConnectionGene:
    """
    A directed, weighted edge of the network graph.

    The innovation number is the identity of the gene within the run: two genes
    with the same innovation number connect the same pair of nodes, which is how
    genes of different genomes are aligned during crossover and distance
    calculations. A disabled gene stays in the genome (and keeps its weight) but
    is left out of the network built from it.

    Public Attributes:
        node_in:    ID of the source node
        node_out:   ID of the destination node
        weight:     Weight of the connection
        enabled:    Whether the connection is expressed in the network
        innovation: Innovation number of the connection

    Public Properties:
        endpoints: The (node_in, node_out) pair

    Public Methods:
        mutate(): Stochastically mutate the weight

    Static Methods:
        random_weight(config): Draw the weight of a new connection
    """

    def __init__(self,
                 node_in   : int,
                 node_out  : int,
                 weight    : float,
                 innovation: int,
                 config    : Config,
                 enabled   : bool = True):
        self.node_in   : int    = node_in
        self.node_out  : int    = node_out
        self.weight    : float  = float(weight)
        self.enabled   : bool   = enabled
        self.innovation: int    = innovation
        self._config   : Config = config

    @property
    def endpoints(self) -> tuple[int, int]:
        return self.node_in, self.node_out

    @staticmethod
    def random_weight(config: Config) -> float:
        return GeneParameter.from_config(config, 'weight').draw()

    def mutate(self) -> None:
        """
        Perturb or replace the weight, following the configured 'weight' policy.
        The endpoints, innovation number and enabled status never change.
        """
        self.weight = GeneParameter.from_config(self._config, 'weight').mutate(self.weight)

    def __repr__(self):
        return (f"ConnectionGene(innovation={self.innovation:03d}, {self.node_in:03d}->{self.node_out:03d}, "
                f"weight={self.weight:+.6f}, enabled={self.enabled})")

    def __str__(self):
        state = 'E' if self.enabled else 'D'
        return f"[{self.innovation:03d},{state},{self.node_in:02d}=>{self.node_out:02d},{self.weight:+.02f}]"
