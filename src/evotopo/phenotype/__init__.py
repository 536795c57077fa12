"""
Phenotype Package

This package implements the phenotype representation: executable neural
networks expressed by genomes, and the individuals that carry them.

Modules:
    network:    Feed-forward network built from a genome
    individual: Evolved agent combining a genome, an ID and a fitness

Exported Classes:
    Connection: A weighted connection between two network nodes
    Individual: A genome with a unique ID and a fitness
    Network:    Feed-forward neural network (single-sample and batch processing)
    Node:       A network node (id, type, bias, activation)
"""

from evotopo.phenotype.individual import Individual
from evotopo.phenotype.network    import Connection, Network, Node

__all__ = ['Connection',
           'Individual',
           'Network',
           'Node']
