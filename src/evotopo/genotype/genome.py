"""
Genome Module

This module implements the Genome class, the genotype of an evolved
feed-forward neural network.

Classes:
    Genome: Complete genome representing a neural network structure
"""

import copy
import random
from collections import deque

from evotopo.run.config                  import Config
from evotopo.genotype.connection_gene    import ConnectionGene
from evotopo.genotype.innovation_tracker import InnovationTracker
from evotopo.genotype.node_gene          import NodeType, NodeGene

class Genome:
    """
    A genome representing a neural network as a collection of node and connection genes.

    A genome encodes the structure and parameters of a neural network at the genotype level.
    It consists of:
    - Node genes: describe network nodes (input, bias, hidden, output) with their parameters
    - Connection genes: describe weighted connections between nodes, each with a unique
      innovation number for tracking historical markings during crossover

    A minimal genome contains only the input, output and bias nodes, and no connections.
    Via mutation operations, genomes grow by adding nodes and connections, forming
    increasingly complex network topologies, and shrink by deleting them. The graph
    formed by ALL connection genes (enabled or disabled) is kept acyclic, so
    re-enabling a connection never creates a cycle.

    Node numbering convention:
        - Input nodes:  [0, num_inputs)
        - Output nodes: [num_inputs, num_inputs + num_outputs)
        - Bias node:    num_inputs + num_outputs
        - Hidden nodes: [num_inputs + num_outputs + 1, ...)

    Attributes:
        node_genes: Dictionary mapping node IDs to NodeGene objects
        conn_genes: Dictionary mapping innovation numbers to ConnectionGene objects

    Public Properties:
        input_nodes:  List of all input node genes
        output_nodes: List of all output node genes
        hidden_nodes: List of all hidden node genes
        bias_node:    The bias node gene

    Public Methods:
        copy():                                     Create an independent copy of this genome
        distance(other):                            Calculate genetic distance to another genome
        prune():                                    Create a pruned copy without dead-ends and disabled connections
        crossover(other, self_fitness, other_fitness): Create offspring by crossing this genome with another
        mutate(tracker):                            Apply all possible mutation operations stochastically
        has_cycle():                                Check whether the connection graph contains a cycle
        to_dict():                                  Convert genome to dictionary representation

    Class Methods:
        from_dict(genome_dict, config, tracker): Create a genome from a dictionary description

    Static Methods:
        show_aligned(genome1, genome2): Print two genomes with aligned genes for comparison
    """

    # Maximum number of random node pairs tried when adding a connection
    ADD_CONNECTION_ATTEMPTS = 20

    def __init__(self, config: Config):
        """
        Initialize a minimal Genome.

        A minimal genome describes the smallest possible network: the input and output
        nodes (whose number never changes and is retrieved from the configuration) plus
        the bias node, and no connections.

        Parameters:
            config: Stores configuration parameters
        """
        self._config = config

        self.node_genes: dict[int, NodeGene]       = {}  # node ID => node gene
        self.conn_genes: dict[int, ConnectionGene] = {}  # innovation number => connection gene

        # Input nodes are numbered: [0, NUMBER INPUT NODES)
        for node_id in range(config.num_inputs):
            self.node_genes[node_id] = NodeGene(node_id, NodeType.INPUT, config)

        # Output nodes are numbered: [NUMBER INPUT NODES, NUMBER INPUT NODES + NUMBER OUTPUT NODES)
        for i in range(config.num_outputs):
            node_id = config.num_inputs + i
            self.node_genes[node_id] = NodeGene(node_id, NodeType.OUTPUT, config)

        # The bias node comes right after the output nodes
        bias_id = config.num_inputs + config.num_outputs
        self.node_genes[bias_id] = NodeGene(bias_id, NodeType.BIAS, config)

    @classmethod
    def from_dict(cls,
                  genome_dict: dict,
                  config     : Config,
                  tracker    : InnovationTracker | None = None) -> 'Genome':
        """
        Create a Genome from a dictionary description.

        Dictionary format (the inverse of to_dict()):
            {
                "nodes": [
                    {"id": 0, "type": "input"},
                    {"id": 1, "type": "output", "bias": 0.0, "activation": "sigmoid"},
                    {"id": 2, "type": "bias"},
                    {"id": 3, "type": "hidden", "bias": 0.5, "activation": "relu"}
                ],
                "connections": [
                    {"innovation": 0, "from": 0, "to": 3, "weight": 0.5, "enabled": true},
                    {"from": 3, "to": 1, "weight": 1.5}
                ]
            }

        Input, output and bias nodes missing from the description are created with
        default parameters. A connection without an "innovation" field is assigned
        one by 'tracker'.

        Parameters:
            genome_dict: Dictionary describing the genome structure
            config:      Stores configuration parameters (defines number of inputs/outputs)
            tracker:     Innovation tracker used for connections lacking an innovation number

        Returns:
            A new Genome object with the specified structure

        Raises:
            ValueError: If the structure is invalid (wrong node numbering, cycles, etc.)
            KeyError:   If required fields are missing from the dictionary
        """
        genome = cls(config)
        first_hidden_id = config.num_inputs + config.num_outputs + 1

        for node_data in genome_dict.get("nodes", []):
            node_id   = node_data["id"]
            node_type = NodeType[node_data["type"].upper()]
            expected  = genome._expected_type(node_id, first_hidden_id)
            if node_type != expected:
                raise ValueError(f"Node {node_id} must be of type {expected.name.lower()}, "
                                 f"got {node_type.name.lower()}")
            if node_type in (NodeType.INPUT, NodeType.BIAS):
                continue

            genome.node_genes[node_id] = NodeGene(node_id, node_type, config,
                                                  bias       = node_data.get("bias", 0.0),
                                                  activation = node_data.get("activation"))

        for conn_data in genome_dict.get("connections", []):
            node_in  = conn_data["from"]
            node_out = conn_data["to"]

            # Validate that nodes exist
            if node_in not in genome.node_genes:
                raise ValueError(f"Connection references non-existent source node: {node_in}")
            if node_out not in genome.node_genes:
                raise ValueError(f"Connection references non-existent destination node: {node_out}")
            if not genome._valid_endpoints(node_in, node_out):
                raise ValueError(f"Connection from {node_in} to {node_out} violates node roles")

            # Validate that connection wouldn't create a cycle
            if genome._would_create_cycle(node_in, node_out):
                raise ValueError(f"Connection from {node_in} to {node_out} would create a cycle")

            innovation = conn_data.get("innovation")
            if innovation is None:
                if tracker is None:
                    raise ValueError(f"Connection from {node_in} to {node_out} has no innovation number")
                innovation = tracker.get_innovation_number(node_in, node_out)
            if innovation in genome.conn_genes:
                raise ValueError(f"Duplicate innovation number {innovation}")

            genome.conn_genes[innovation] = ConnectionGene(node_in, node_out, conn_data["weight"], innovation,
                                                           config, enabled=conn_data.get("enabled", True))
        return genome

    def to_dict(self) -> dict:
        """
        Convert the genome to a dictionary representation.

        This is the inverse operation of from_dict(): nodes are listed by ID and
        connections by innovation number.
        """
        nodes = []
        for node in sorted(self.node_genes.values(), key=lambda n: n.id):
            node_dict = {"id": node.id, "type": node.type.name.lower()}
            if not node.is_sensor:
                node_dict["bias"]       = node.bias
                node_dict["activation"] = node.activation.value
            nodes.append(node_dict)

        connections = []
        for conn in sorted(self.conn_genes.values(), key=lambda c: c.innovation):
            connections.append({
                "innovation": conn.innovation,
                "from"      : conn.node_in,
                "to"        : conn.node_out,
                "weight"    : conn.weight,
                "enabled"   : conn.enabled
            })

        return {"nodes": nodes, "connections": connections}

    def _expected_type(self, node_id: int, first_hidden_id: int) -> NodeType:
        if node_id < 0:
            raise ValueError(f"Node IDs cannot be negative, got {node_id}")
        if node_id < self._config.num_inputs:
            return NodeType.INPUT
        if node_id < first_hidden_id - 1:
            return NodeType.OUTPUT
        if node_id == first_hidden_id - 1:
            return NodeType.BIAS
        return NodeType.HIDDEN

    @property
    def input_nodes(self) -> list[NodeGene]:
        return [node for node in self.node_genes.values() if node.type == NodeType.INPUT]

    @property
    def output_nodes(self) -> list[NodeGene]:
        return [node for node in self.node_genes.values() if node.type == NodeType.OUTPUT]

    @property
    def hidden_nodes(self) -> list[NodeGene]:
        return [node for node in self.node_genes.values() if node.type == NodeType.HIDDEN]

    @property
    def bias_node(self) -> NodeGene:
        return self.node_genes[self._config.num_inputs + self._config.num_outputs]

    @property
    def enabled_connections(self) -> list[ConnectionGene]:
        return [conn for conn in self.conn_genes.values() if conn.enabled]

    def copy(self) -> 'Genome':
        """
        Create an independent copy of this genome.
        The genes are copied, the configuration is shared.
        """
        genome = Genome.__new__(Genome)
        genome._config    = self._config
        genome.node_genes = {node_id: copy.copy(node) for node_id, node in self.node_genes.items()}
        genome.conn_genes = {innov: copy.copy(conn) for innov, conn in self.conn_genes.items()}
        return genome

    def distance(self, other: 'Genome') -> float:
        """
        Calculate genetic distance between this genome and another.

        The genetic distance is the sum of two components:
        + a term calculated using the classic NEAT formula, based on connection genes
        + a term quantifying the parameter difference between the matching nodes in the
          two networks, included only if 'distance_includes_nodes' is set

        Parameters:
            other: the genome relative to which we are calculating the distance

        Returns:
            the genetic distance between this genome and 'other'
        """
        distance = self._distance_NEAT(other)
        if self._config.distance_includes_nodes:
            distance += self._distance_nodes(other)
        return distance

    def _distance_NEAT(self, other: 'Genome') -> float:
        """
        Calculate genetic distance between this genome and another using the NEAT formula.

        The NEAT formula only looks at connections.
           distance = (c1 * E / N) + (c2 * D / N) + c3 * W̄

        Where:
        - E = number of excess connection genes
        - D = number of disjoint connection genes
        - N = number of connection genes in larger genome
        - W̄ = average weight difference of matching connection genes
        - c1, c2, c3 = weight of various terms (from configuration)
        """
        innovs1 = set(self.conn_genes.keys())
        innovs2 = set(other.conn_genes.keys())
        if not innovs1 and not innovs2:
            return 0.0

        matching_innovs     =  innovs1 & innovs2
        non_matching_innovs = (innovs1 | innovs2) - matching_innovs

        max_innov1 = max(innovs1) if innovs1 else -1
        max_innov2 = max(innovs2) if innovs2 else -1

        # Excess   genes: beyond the smaller genome's max innovation number
        # Disjoint genes: within the overlapping range but not matching
        num_excess   = 0
        num_disjoint = 0
        for innov in non_matching_innovs:
            if innov > min(max_innov1, max_innov2):
                num_excess += 1
            else:
                num_disjoint += 1

        avg_weight_diff = 0.0
        if matching_innovs:
            weight_diff = sum(abs(self.conn_genes[i].weight - other.conn_genes[i].weight) for i in matching_innovs)
            avg_weight_diff = weight_diff / len(matching_innovs)

        N = max(len(self.conn_genes), len(other.conn_genes))
        return (self._config.distance_excess_coeff   * num_excess   / N +
                self._config.distance_disjoint_coeff * num_disjoint / N +
                self._config.distance_params_coeff   * avg_weight_diff)

    def _distance_nodes(self, other: 'Genome') -> float:
        """
        Calculate the node based component of the genetic distance.

        For each node (hidden or output) present in both genomes, the difference
        in bias is added, plus 1.0 if the activation functions differ. The sum is
        averaged over the matching nodes.
        """
        matching_ids = [node_id for node_id, node in self.node_genes.items()
                        if not node.is_sensor and node_id in other.node_genes]
        if not matching_ids:
            return 0.0

        params_diff = 0.0
        for node_id in matching_ids:
            node1 = self.node_genes [node_id]
            node2 = other.node_genes[node_id]
            params_diff += abs(node1.bias - node2.bias)
            if node1.activation != node2.activation:
                params_diff += 1.0

        return self._config.distance_params_coeff * params_diff / len(matching_ids)

    def prune(self) -> 'Genome':
        """
        Create a pruned copy of this genome by removing dead-end nodes and disabled connections.

        The copy has:
        1. All hidden nodes that cannot reach any output node via enabled connections removed
        2. All disabled connections removed

        The network expressed by the pruned genome computes the same outputs.
        """
        pruned_genome = self.copy()

        for node_id in pruned_genome._get_dead_end_nodes():
            pruned_genome._delete_node(node_id)

        disabled_innovations = [i for i, conn in pruned_genome.conn_genes.items() if not conn.enabled]
        for innov in disabled_innovations:
            pruned_genome._delete_connection(innov)

        return pruned_genome

    def crossover(self, other: 'Genome', self_fitness: float, other_fitness: float) -> 'Genome':
        """
        Perform crossover between this genome and another to create offspring.

        Crossover rules:
        - Matching genes: randomly inherit from either parent
        - Disjoint/excess genes: inherit from the fitter parent only,
          or from both parents if their fitness is the same
        - A matching gene disabled in both parents stays disabled; one disabled in
          exactly one parent is disabled with probability 'disable_inherit_probability'

        The offspring is NOT guaranteed to be acyclic when inheriting extra genes from
        both parents; callers check has_cycle() and fall back to a copy of the fitter parent.

        Parameters:
            other:         the other parent genome
            self_fitness:  fitness of this genome
            other_fitness: fitness of the other parent genome

        Returns:
            New offspring genome
        """
        # Create empty (no node or connection genes) offspring genome
        offspring = Genome.__new__(Genome)
        offspring._config    = self._config
        offspring.node_genes = {}
        offspring.conn_genes = {}

        # Decide first which connections are part of the new network; the ends
        # of these connections give the set of nodes of the new network.

        innovs_self  = set(self.conn_genes.keys())
        innovs_other = set(other.conn_genes.keys())

        matching_innovs   = innovs_self  & innovs_other
        only_self_innovs  = innovs_self  - innovs_other
        only_other_innovs = innovs_other - innovs_self

        # Matching connections: inherit connection gene randomly from either parent
        for innov in sorted(matching_innovs):
            conn_self  = self.conn_genes [innov]
            conn_other = other.conn_genes[innov]
            conn_gene  = copy.copy(conn_self if random.random() < 0.5 else conn_other)

            if conn_self.enabled != conn_other.enabled:
                conn_gene.enabled = random.random() >= self._config.disable_inherit_probability
            else:
                conn_gene.enabled = conn_self.enabled

            offspring.conn_genes[innov] = conn_gene

        # Disjoint & excess connections: inherit from the fitter parent, or both on a tie
        extras = []
        if self_fitness >= other_fitness:
            extras += [self.conn_genes[innov] for innov in sorted(only_self_innovs)]
        if other_fitness >= self_fitness:
            extras += [other.conn_genes[innov] for innov in sorted(only_other_innovs)]
        for conn_gene in extras:
            offspring.conn_genes[conn_gene.innovation] = copy.copy(conn_gene)

        # Collect the IDs of all nodes needed by the offspring's connections,
        # plus all the input, output and bias nodes (even if unconnected).
        node_ids = set(range(self._config.num_inputs + self._config.num_outputs + 1))
        for conn_gene in offspring.conn_genes.values():
            node_ids.add(conn_gene.node_in)
            node_ids.add(conn_gene.node_out)

        # Inherit node genes:
        # - matching nodes:     inherit randomly from either parent
        # - non-matching nodes: inherit from whichever parent has it
        for nid in sorted(node_ids):
            if nid in self.node_genes and nid in other.node_genes:
                node_gene = self.node_genes[nid] if random.random() < 0.5 else other.node_genes[nid]
            elif nid in self.node_genes:
                node_gene = self.node_genes[nid]
            elif nid in other.node_genes:
                node_gene = other.node_genes[nid]
            else:
                raise RuntimeError(f"node ID {nid} cannot be found in either parent")
            offspring.node_genes[nid] = copy.copy(node_gene)

        return offspring

    def mutate(self, tracker: InnovationTracker) -> None:
        """
        Apply to the current genome all possible mutation operations.

        The list of possible mutations is:
          + add a node
          + delete a node
          + add a connection
          + delete a connection
          + toggle the enabled status of a connection
          + mutate connection parameters (enabled connections only)
          + mutate node parameters
        Each mutation occurs independently with a given probability.

        Parameters:
            tracker: the run's innovation tracker, assigning IDs to structural changes
        """
        if random.random() < self._config.node_add_probability:
            self._mutate_add_node(tracker)
        if random.random() < self._config.node_delete_probability:
            self._mutate_delete_node(tracker)
        if random.random() < self._config.connection_add_probability:
            self._mutate_add_connection(tracker)
        if random.random() < self._config.connection_delete_probability:
            self._mutate_delete_connection()
        if random.random() < self._config.connection_toggle_probability:
            self._mutate_toggle_connection()

        for conn in self.conn_genes.values():
            if conn.enabled:
                conn.mutate()

        for node in self.node_genes.values():
            node.mutate()

    def _mutate_add_node(self, tracker: InnovationTracker) -> None:
        """
        Split an existing connection by adding a new node.
        The connection to split is selected at random from all 'enabled' connections.
        It is disabled and replaced by two connections: one from its source to the
        new node (weight 1.0) and one from the new node to its destination (with the
        weight of the split connection).
        """
        enabled_conn_genes = self.enabled_connections
        if not enabled_conn_genes:
            return
        split_conn_gene = random.choice(enabled_conn_genes)
        node_in, node_out = split_conn_gene.node_in, split_conn_gene.node_out

        # From the registry, get the ID for the new node and the
        # innovation numbers (connection IDs) for the two new connections
        new_node_id, innov1, innov2 = tracker.get_split_IDs(split_conn_gene)

        # The genome may already carry (part of) the genes produced by this split,
        # inherited from a parent. Missing connections are only re-created when they
        # keep the graph acyclic.
        if innov1 not in self.conn_genes and self._would_create_cycle(node_in, new_node_id):
            return
        if innov2 not in self.conn_genes and self._would_create_cycle(new_node_id, node_out):
            return

        split_conn_gene.enabled = False

        if new_node_id not in self.node_genes:
            self.node_genes[new_node_id] = NodeGene(new_node_id, NodeType.HIDDEN, self._config)

        # First new connection: input -> new node (weight = 1.0)
        if innov1 in self.conn_genes:
            self.conn_genes[innov1].enabled = True
        else:
            self.conn_genes[innov1] = ConnectionGene(node_in, new_node_id, 1.0, innov1, self._config)

        # Second new connection: new node -> output (weight = old weight)
        if innov2 in self.conn_genes:
            self.conn_genes[innov2].enabled = True
        else:
            self.conn_genes[innov2] = ConnectionGene(new_node_id, node_out, split_conn_gene.weight,
                                                     innov2, self._config)

    def _mutate_delete_node(self, tracker: InnovationTracker) -> None:
        """
        Delete a randomly chosen hidden node, wiring its inputs directly to its outputs.

        Only hidden nodes with at least one enabled incoming and one enabled outgoing
        connection are candidates. The node and all its connection genes are removed;
        then every (source, target) pair formerly linked through the node gets an
        enabled direct connection. An existing gene for the pair is re-enabled (this
        undoes a split), otherwise a new gene with a random weight is added.

        Bridging never creates a cycle: the path source -> node -> target already
        existed in the (acyclic) graph of all connection genes.
        """
        incoming: dict[int, list[int]] = {}
        outgoing: dict[int, list[int]] = {}
        for conn in self.enabled_connections:
            incoming.setdefault(conn.node_out, []).append(conn.node_in)
            outgoing.setdefault(conn.node_in, []).append(conn.node_out)

        candidates = [node.id for node in self.hidden_nodes if node.id in incoming and node.id in outgoing]
        if not candidates:
            return
        node_id = random.choice(candidates)

        self._delete_node(node_id)

        genes_by_pair = {conn.endpoints: conn for conn in self.conn_genes.values()}
        for node_in in sorted(incoming[node_id]):
            for node_out in sorted(outgoing[node_id]):
                if (node_in, node_out) in genes_by_pair:
                    genes_by_pair[(node_in, node_out)].enabled = True
                    continue
                innovation_num = tracker.get_innovation_number(node_in, node_out)
                weight         = ConnectionGene.random_weight(self._config)
                self.conn_genes[innovation_num] = ConnectionGene(node_in, node_out, weight, innovation_num, self._config)

    def _mutate_delete_connection(self) -> None:
        """
        Delete a randomly chosen connection gene (either enabled or disabled).
        """
        if self.conn_genes:
            conn = random.choice(list(self.conn_genes.values()))
            self._delete_connection(conn.innovation)

    def _mutate_add_connection(self, tracker: InnovationTracker) -> None:
        """
        Add a new connection between two existing nodes.

        The nodes representing the two ends of the new connection
        are selected at random, however we cannot add a connection:
         + starting at an OUTPUT node
         + ending   at an INPUT or BIAS node
         + between two nodes already connected by a direct connection
         + which would create a cycle in the network graph

        The method gives up (leaving the genome unchanged) after a fixed
        number of failed attempts.
        """
        connected_nodes = {(conn.node_in, conn.node_out) for conn in self.conn_genes.values()}
        node_IDs = list(self.node_genes.keys())

        for _ in range(self.ADD_CONNECTION_ATTEMPTS):
            node_in  = random.choice(node_IDs)
            node_out = random.choice(node_IDs)

            # Carry out quick checks first
            if not self._valid_endpoints(node_in, node_out):
                continue
            if (node_in, node_out) in connected_nodes:
                continue

            # Carry out expensive check last
            if self._would_create_cycle(node_in, node_out):
                continue

            innovation_num = tracker.get_innovation_number(node_in, node_out)
            weight         = ConnectionGene.random_weight(self._config)
            self.conn_genes[innovation_num] = ConnectionGene(node_in, node_out, weight, innovation_num, self._config)
            break

    def _mutate_toggle_connection(self) -> None:
        """
        Flip the enabled status of a randomly chosen connection.
        """
        if self.conn_genes:
            conn = random.choice(list(self.conn_genes.values()))
            conn.enabled = not conn.enabled

    def _valid_endpoints(self, node_in: int, node_out: int) -> bool:
        """
        Whether the node roles allow a connection node_in -> node_out.
        """
        if node_in == node_out:
            return False
        if self.node_genes[node_in].type == NodeType.OUTPUT:
            return False
        if self.node_genes[node_out].is_sensor:
            return False
        return True

    def _delete_node(self, node_id: int) -> None:
        """
        Delete a hidden node from the genome, along with all connections starting or ending at it.

        Raises:
            ValueError: If the node is not a hidden node
            KeyError:   If the node ID does not exist in the genome
        """
        if node_id not in self.node_genes:
            raise KeyError(f"Node with ID {node_id} does not exist in the genome")
        node = self.node_genes[node_id]

        if node.type != NodeType.HIDDEN:
            raise ValueError(f"Cannot delete node {node_id}: only hidden nodes can be deleted (node type is {node.type.name})")

        connections_to_remove = [innov for innov, conn in self.conn_genes.items()
                                 if conn.node_in == node_id or conn.node_out == node_id]
        for innov in connections_to_remove:
            self._delete_connection(innov)

        del self.node_genes[node_id]

    def _delete_connection(self, innovation_number: int) -> None:
        if innovation_number not in self.conn_genes:
            raise KeyError(f"Connection with innovation number {innovation_number} does not exist in the genome")
        del self.conn_genes[innovation_number]

    def _get_dead_end_nodes(self) -> list[int]:
        """
        Find all hidden nodes from which no output node can be reached via enabled connections.

        Performs a single backward search starting from all output nodes;
        hidden nodes not reached are dead-ends.
        """
        reverse_adjacency: dict[int, list[int]] = {}
        for conn in self.enabled_connections:
            reverse_adjacency.setdefault(conn.node_out, []).append(conn.node_in)

        reachable = set()
        stack = [node.id for node in self.output_nodes]
        while stack:
            current = stack.pop()
            if current in reachable:
                continue
            reachable.add(current)
            for predecessor in reverse_adjacency.get(current, []):
                if predecessor not in reachable:
                    stack.append(predecessor)

        return [node.id for node in self.hidden_nodes if node.id not in reachable]

    def _would_create_cycle(self, from_node: int, to_node: int) -> bool:
        """
        Check if adding a connection from_node -> to_node would create a cycle.
        Uses DFS to check if there's already a path from 'to_node' back to 'from_node'.
        Considers ALL connections (both enabled and disabled).

        Parameters:
            from_node: proposed start of the new connection
            to_node:   proposed end   of the new connections

        Returns:
            whether adding the new connection would create a cycle in the network
        """
        if from_node == to_node:
            return True

        adjacency: dict[int, list[int]] = {}
        for conn_gene in self.conn_genes.values():
            adjacency.setdefault(conn_gene.node_in, []).append(conn_gene.node_out)

        # If we can reach 'from_node' starting at 'to_node', then adding a
        # connection 'from_node' -> 'to_node' would create a network cycle
        visited = set()
        stack = [to_node]
        while stack:
            current = stack.pop()
            if current == from_node:
                return True
            if current in visited:
                continue
            visited.add(current)
            stack.extend(adjacency.get(current, []))

        return False

    def has_cycle(self) -> bool:
        """
        Check whether the graph of all connection genes (enabled or not) contains a cycle.
        Uses Kahn's algorithm: the graph is acyclic if and only if all nodes get sorted.
        """
        node_ids = set(self.node_genes.keys())
        for conn in self.conn_genes.values():
            node_ids.add(conn.node_in)
            node_ids.add(conn.node_out)

        in_degree = {node_id: 0 for node_id in node_ids}
        adjacency: dict[int, list[int]] = {}
        for conn in self.conn_genes.values():
            adjacency.setdefault(conn.node_in, []).append(conn.node_out)
            in_degree[conn.node_out] += 1

        queue = deque(node_id for node_id, degree in in_degree.items() if degree == 0)
        num_sorted = 0
        while queue:
            current = queue.popleft()
            num_sorted += 1
            for successor in adjacency.get(current, []):
                in_degree[successor] -= 1
                if in_degree[successor] == 0:
                    queue.append(successor)

        return num_sorted != len(node_ids)

    def __str__(self):
        node_genes_str  = ''.join(str(node) for node in self.input_nodes)
        node_genes_str += str(self.bias_node)
        node_genes_str += ''.join(str(node) for node in self.hidden_nodes)
        node_genes_str += ''.join(str(node) for node in self.output_nodes)
        conn_genes_str  = ''.join(str(conn) for conn in self.conn_genes.values())
        return f"Nodes: {node_genes_str}\nConns: {conn_genes_str}"

    def __repr__(self):
        return f"Genome(nodes={len(self.node_genes)}, connections={len(self.conn_genes)})"

    @staticmethod
    def show_aligned(genome1: 'Genome', genome2: 'Genome') -> None:
        """
        Print two genomes aligning the node and connection genes.
        """
        node_ids_all = sorted(set(genome1.node_genes.keys()) | set(genome2.node_genes.keys()))
        node_str1 = ""
        node_str2 = ""
        for node_id in node_ids_all:
            width = max(len(str(g.node_genes[node_id])) for g in (genome1, genome2) if node_id in g.node_genes)
            node_str1 += str(genome1.node_genes[node_id]).ljust(width) if node_id in genome1.node_genes else ' ' * width
            node_str2 += str(genome2.node_genes[node_id]).ljust(width) if node_id in genome2.node_genes else ' ' * width

        print(f"Nodes:\n{node_str1}\n{node_str2}\n")

        innovs_all = sorted(set(genome1.conn_genes.keys()) | set(genome2.conn_genes.keys()))
        conn_str1 = ""
        conn_str2 = ""
        padding   = ' ' * 20
        for innov in innovs_all:
            conn_str1 += str(genome1.conn_genes[innov]) if innov in genome1.conn_genes else padding
            conn_str2 += str(genome2.conn_genes[innov]) if innov in genome2.conn_genes else padding

        print(f"Connections:\n{conn_str1}\n{conn_str2}\n")
