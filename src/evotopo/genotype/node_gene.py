"""
Node Gene Module.

This module implements the NodeGene class and NodeType enumeration.

Classes:
    NodeType: Enumeration for node types (INPUT, HIDDEN, OUTPUT, BIAS)
    NodeGene: Gene encoding a single network node with parameters
"""

import random
from enum import Enum

from evotopo.activations             import ActivationKind, activation_codes, parse_activation
from evotopo.run.config              import Config
from evotopo.genotype.gene_parameter import GeneParameter

class NodeType(Enum):
    """
    Nodes come in four types: input, hidden, output, and the bias node
    (a node without inputs whose output is always 1.0).
    """
    INPUT  = "I"
    HIDDEN = "H"
    OUTPUT = "O"
    BIAS   = "B"

class NodeGene:
    """
    A gene describing a node in a Neural Network.

    Each node gene encodes the properties of a single node in the neural network:
    its type, bias and activation function. Node genes are identified by a unique
    node ID which remains consistent across structural mutations and crossover.

    The node computes its output as: activation(weighted_input + bias)
    Input and bias nodes have no activation function and a bias of 0.

    Public Attributes:
        id:         Unique identifier for this node
        type:       Type of node (INPUT, HIDDEN, OUTPUT or BIAS)
        bias:       Bias value added to the node's weighted input
        activation: The activation function kind (None for INPUT and BIAS nodes)

    Public Methods:
        mutate(): Stochastically mutate the bias and activation function
    """

    def __init__(self,
                 node_id   : int,
                 node_type : NodeType,
                 config    : Config,
                 bias      : float                        | None = None,
                 activation: ActivationKind | str         | None = None):
        """
        Initialize a node gene.
        If the 'bias' parameter is not specified, it will be initialized with a
        random value, according to the configuration. If 'activation' is not
        specified, the configured initial activation function is used.

        Parameters:
            node_id:    Unique identifier for this node
            node_type:  Type of node (INPUT, HIDDEN, OUTPUT or BIAS)
            config:     Stores configuration parameters
            bias:       Bias value added to the node's weighted input
            activation: Activation function kind, or its name
        """
        self._config: Config   = config
        self.id     : int      = node_id
        self.type   : NodeType = node_type

        if node_type in (NodeType.INPUT, NodeType.BIAS):
            self.bias      : float                 = 0.0
            self.activation: ActivationKind | None = None
            return

        if bias is None:
            bias = GeneParameter.from_config(config, 'bias').draw()
        self.bias = float(bias)

        if activation is None:
            activation = config.activation_initial
        self.activation = parse_activation(activation)

    @property
    def is_sensor(self) -> bool:
        """Whether this node only emits a value (input or bias node)."""
        return self.type in (NodeType.INPUT, NodeType.BIAS)

    def mutate(self) -> None:
        """
        Stochastically mutate the (gene describing the) node.

        Both whether a mutation occurs and its nature & magnitude are stochastic.
        For a node gene, mutating means changing the 'bias' and 'activation'.
        Mutating the bias can be accomplished in two ways:
         + modifying the current value additively by a small amount
         + replacing the current value by a new one
        Input and bias nodes are never mutated.
        """
        if self.is_sensor:
            return

        self.bias = GeneParameter.from_config(self._config, 'bias').mutate(self.bias)

        # Attempt to mutate the activation function
        if random.random() < self._config.activation_mutate_prob:

            # Remove current activation to ensure we select a NEW activation
            available_activations = [a for a in self._config.activation_options if a != self.activation]
            if available_activations:
                self.activation = random.choice(available_activations)

    def __repr__(self):
        return (f"NodeGene(node_id={self.id:+03d}, node_type=NodeType.{self.type.name:6s}, "
                f"bias={self.bias}, activation={self.activation})")

    def __str__(self):
        if self.is_sensor:
            return f"[{self.type.value}{self.id}]"
        act_code = activation_codes.get(self.activation, "???")
        return f"[{self.type.value}{self.id},{act_code},b={self.bias:.2f}]"
