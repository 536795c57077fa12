"""
Genotype Package

This package implements the genotype representation of evolved networks.
It provides classes for encoding neural network structures and parameters
at the genetic level.

The genotype consists of two types of genes:
- Node genes:       Encode individual neurons with their parameters (bias, activation)
- Connection genes: Encode weighted connections between neurons with innovation numbers

Modules:
    node_gene:          NodeType enumeration and NodeGene class
    connection_gene:    ConnectionGene class
    gene_parameter:     GeneParameter, the policy for weights and biases
    genome:             Genome class
    innovation_tracker: InnovationTracker class

Exported Classes:
    NodeType:          Enumeration for node types (INPUT, HIDDEN, OUTPUT, BIAS)
    NodeGene:          Gene encoding a single network node
    ConnectionGene:    Gene encoding a weighted connection between nodes
    Genome:            Complete genome representing a neural network
    InnovationTracker: Run-wide tracker for innovation numbers and node IDs
"""

from evotopo.genotype.connection_gene    import ConnectionGene
from evotopo.genotype.genome             import Genome
from evotopo.genotype.innovation_tracker import InnovationTracker
from evotopo.genotype.node_gene          import NodeType, NodeGene

__all__ = ['ConnectionGene',
           'Genome',
           'InnovationTracker',
           'NodeGene',
           'NodeType']
