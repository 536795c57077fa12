"""
Network Module

This module implements the feed-forward neural network expressed by a genome.
The network is built once from the genome's enabled connections, stores its
nodes and connections in flat arrays, and can then be evaluated any number of
times, one input vector or a whole batch at a time.

Classes:
    Node:       A node of the network (id, type, bias, activation)
    Connection: A weighted connection between two nodes
    Network:    Feed-forward neural network evaluated in topological order
"""

import numpy as np
from collections import deque, defaultdict
from typing      import NamedTuple, Sequence, TYPE_CHECKING

from evotopo.activations        import ActivationKind, activate
from evotopo.errors             import StructuralError
from evotopo.genotype.node_gene import NodeType

if TYPE_CHECKING:
    from evotopo.genotype import Genome

class Node(NamedTuple):
    id        : int
    type      : NodeType
    bias      : float
    activation: ActivationKind | None

class Connection(NamedTuple):
    source: int
    target: int
    weight: float

class Network:
    """
    Feed-forward neural network built from a genome.

    The network holds only the enabled connections of the genome. Nodes are
    evaluated in topological order, each once, as:
        activation(sum(weight_i * value_i) + bias)
    Input nodes take the input values (in input-ID order), the bias node always
    outputs 1.0. Outputs are returned in output-ID order.

    Evaluating the network does not modify it: all intermediate values live in
    arrays local to the call, so a network can be evaluated concurrently.

    Public Properties:
        nodes:              Tuple of all nodes, sorted by ID
        connections:        Tuple of all (enabled) connections
        input_ids:          IDs of the input nodes
        output_ids:         IDs of the output nodes
        number_nodes:       Total number of nodes in the network
        number_connections: Number of connections in the network

    Public Methods:
        forward_pass(inputs):  Process one input vector through the network
        forward_batch(inputs): Process a batch of input vectors through the network

    Class Methods:
        from_genome(genome): Build the network expressed by a genome
    """

    def __init__(self, nodes: Sequence[Node], connections: Sequence[Connection]):
        """
        Build a network from its nodes and connections.

        Parameters:
            nodes:       The nodes of the network (any order, unique IDs)
            connections: The connections of the network, all of them active

        Raises:
            ValueError:      If a connection references an unknown node, or node IDs repeat
            StructuralError: If the connections form a cycle
        """
        self._nodes       = tuple(sorted(nodes, key=lambda n: n.id))
        self._connections = tuple(connections)

        # Create "node ID => array index" mapping
        self._node_id_to_idx = {node.id: idx for idx, node in enumerate(self._nodes)}
        if len(self._node_id_to_idx) != len(self._nodes):
            raise ValueError("Duplicate node IDs in network")
        for conn in self._connections:
            if conn.source not in self._node_id_to_idx or conn.target not in self._node_id_to_idx:
                raise ValueError(f"Connection {conn.source}->{conn.target} references an unknown node")

        self._input_ids  = tuple(node.id for node in self._nodes if node.type == NodeType.INPUT)
        self._output_ids = tuple(node.id for node in self._nodes if node.type == NodeType.OUTPUT)

        self._input_indices  = np.array([self._node_id_to_idx[i] for i in self._input_ids],  dtype=np.int64)
        self._output_indices = np.array([self._node_id_to_idx[i] for i in self._output_ids], dtype=np.int64)
        self._bias_indices   = np.array([idx for idx, node in enumerate(self._nodes)
                                         if node.type == NodeType.BIAS], dtype=np.int64)

        # Pre-compute, for each node to evaluate (in topological order),
        # its incoming connections as arrays of source indices and weights
        incoming = defaultdict(list)
        for conn in self._connections:
            incoming[conn.target].append((self._node_id_to_idx[conn.source], conn.weight))

        self._schedule = []
        for node_id in self._topological_sort():
            node = self._nodes[self._node_id_to_idx[node_id]]
            if node.type in (NodeType.INPUT, NodeType.BIAS):
                continue
            sources = np.array([src for src, _ in incoming[node_id]], dtype=np.int64)
            weights = np.array([w   for _, w   in incoming[node_id]], dtype=np.float64)
            self._schedule.append((self._node_id_to_idx[node_id], sources, weights, node.bias, node.activation))

    @classmethod
    def from_genome(cls, genome: 'Genome') -> 'Network':
        """
        Build the network expressed by a genome: all its nodes, and its enabled connections.

        Parameters:
            genome: The Genome encoding the network structure

        Returns:
            The new network

        Raises:
            StructuralError: If the enabled connections of the genome form a cycle
        """
        nodes = [Node(gene.id, gene.type, gene.bias, gene.activation) for gene in genome.node_genes.values()]
        connections = [Connection(conn.node_in, conn.node_out, conn.weight)
                       for conn in sorted(genome.conn_genes.values(), key=lambda c: c.innovation)
                       if conn.enabled]
        return cls(nodes, connections)

    def _topological_sort(self) -> list[int]:
        """
        Sort the network nodes in topological order using Kahn's algorithm.

        Returns:
            List of node IDs in topological order

        Raises:
            StructuralError: If the connections form a cycle
        """
        adjacency = defaultdict(list)
        in_degree = {node.id: 0 for node in self._nodes}
        for conn in self._connections:
            adjacency[conn.source].append(conn.target)
            in_degree[conn.target] += 1

        # Start with nodes that have no incoming edges
        queue  = deque(node_id for node_id, degree in in_degree.items() if degree == 0)
        result = []
        while queue:
            node_id = queue.popleft()
            result.append(node_id)
            for neighbor in adjacency[node_id]:
                in_degree[neighbor] -= 1
                if in_degree[neighbor] == 0:
                    queue.append(neighbor)

        if len(result) != len(self._nodes):
            raise StructuralError("Network connections contain a cycle")
        return result

    @property
    def nodes(self) -> tuple[Node, ...]:
        return self._nodes

    @property
    def connections(self) -> tuple[Connection, ...]:
        return self._connections

    @property
    def input_ids(self) -> tuple[int, ...]:
        return self._input_ids

    @property
    def output_ids(self) -> tuple[int, ...]:
        return self._output_ids

    @property
    def number_nodes(self) -> int:
        """Total number of nodes in the network."""
        return len(self._nodes)

    @property
    def number_nodes_hidden(self) -> int:
        """Number of hidden nodes in the network."""
        return sum(1 for node in self._nodes if node.type == NodeType.HIDDEN)

    @property
    def number_connections(self) -> int:
        """Number of connections in the network."""
        return len(self._connections)

    def forward_pass(self, inputs: Sequence[float]) -> np.ndarray:
        """
        Perform a forward pass through the network for a single input vector.

        Parameters:
            inputs: Input values, one per input node (in input-ID order)

        Returns:
            Output values as a 1D numpy array, one per output node (in output-ID order)

        Raises:
            ValueError: If the number of inputs does not match the number of input nodes
        """
        inputs = np.asarray(inputs, dtype=np.float64)
        if inputs.ndim != 1 or inputs.shape[0] != len(self._input_ids):
            raise ValueError(f"Expected {len(self._input_ids)} inputs, got {inputs.size}")

        return self.forward_batch(inputs.reshape(1, -1))[0]

    def forward_batch(self, inputs: np.ndarray) -> np.ndarray:
        """
        Perform a forward pass through the network for a batch of input vectors.

        Parameters:
            inputs: Input values, shape (batch_size, num_inputs)

        Returns:
            Output values, shape (batch_size, num_outputs)

        Raises:
            ValueError: If the input array does not have shape (batch_size, num_inputs)
        """
        inputs = np.asarray(inputs, dtype=np.float64)
        if inputs.ndim != 2:
            raise ValueError(f"Input must be a 2D array, got {inputs.ndim}D")
        if inputs.shape[1] != len(self._input_ids):
            raise ValueError(f"Expected {len(self._input_ids)} inputs, got {inputs.shape[1]}")

        node_values = np.zeros((inputs.shape[0], len(self._nodes)), dtype=np.float64)
        node_values[:, self._input_indices] = inputs
        node_values[:, self._bias_indices]  = 1.0

        # Propagate through hidden and output nodes in topological order
        for node_idx, sources, weights, bias, activation in self._schedule:
            if len(sources) == 0:
                weighted_sum = np.zeros(inputs.shape[0], dtype=np.float64)
            else:
                weighted_sum = node_values[:, sources] @ weights
            node_values[:, node_idx] = activate(activation, weighted_sum + bias)

        return node_values[:, self._output_indices]

    def __str__(self):
        node_info = [f"  Node {node.id} ({node.type.name}): bias={node.bias:.2f}, "
                     f"activation={node.activation.value if node.activation else '-'}" for node in self._nodes]
        conn_info = [f"  {conn.source:02d}=>{conn.target:02d}, w={conn.weight:+.2f}" for conn in self._connections]
        return "\n".join(node_info) + "\n\n" + "\n".join(conn_info)

    def __repr__(self):
        return (f"Network(nodes={self.number_nodes}, "
                f"hidden={self.number_nodes_hidden}, "
                f"connections={self.number_connections})")
