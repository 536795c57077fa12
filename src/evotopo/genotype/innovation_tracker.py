"""
Innovation Tracker Module

This module implements the InnovationTracker class, the registry that gives
structural mutations a stable identity across all genomes of a run.

Classes:
    InnovationTracker: Run-wide tracker for innovation numbers and node IDs
"""

import threading
from itertools import count
from typing    import TYPE_CHECKING

from evotopo.errors import RegistryExhaustedError
if TYPE_CHECKING:
    from evotopo.genotype.connection_gene import ConnectionGene

class InnovationTracker:
    """
    Tracks structural changes across all genomes of a run.
    Ensures the same structural change gets the same innovation
    number (for connections) and ID (for nodes).

    A tracker is created by the evolution driver at the start of a run and is
    handed by reference to every mutation; it is never reset during the run.
    Node IDs and innovation numbers come from two separate, strictly increasing
    counters. All lookups are serialized by a lock so that genomes mutated
    concurrently still agree on the identity of identical mutations.

    Public Methods:
        get_innovation_number(node_in, node_out): ID of the connection node_in -> node_out
        get_split_IDs(conn_to_split):             IDs produced by splitting a connection
    """

    MAX_ID = 2**63 - 1

    def __init__(self, num_inputs: int, num_outputs: int, max_id: int = MAX_ID):
        """
        Parameters:
            num_inputs:  number of input nodes of every genome
            num_outputs: number of output nodes of every genome
            max_id:      largest identifier either counter may hand out
        """
        # Nodes [0, num_inputs + num_outputs] are the input, output and bias nodes
        self.first_hidden_id = num_inputs + num_outputs + 1
        self._max_id         = max_id
        self._lock           = threading.Lock()

        self._next_innovation_number = count(0)
        self._next_node_id           = count(self.first_hidden_id)

        # For each connection ever created, map its endpoints to its innovation number
        self._innovation_numbers: dict[tuple[int, int], int] = {}

        # When a connection is split, tracks what node was created and
        # what innovation numbers were assigned to the new connections.
        self._split_IDs: dict[int, tuple[int, int, int]] = {}   # split innovation -> (new_node_id, innov1, innov2)

    @property
    def num_innovations(self) -> int:
        """The number of distinct connections registered so far."""
        return len(self._innovation_numbers)

    @property
    def num_splits(self) -> int:
        """The number of distinct connection splits registered so far."""
        return len(self._split_IDs)

    def get_innovation_number(self, node_in: int, node_out: int) -> int:
        """
        Get innovation number for a connection, identified by its endpoints.
        Returns existing innovation number if this connection was created
        before, otherwise assigns a new innovation number.

        Parameters:
            node_in:  node ID for the 'from' end of the connection
            node_out: node ID for the 'to'   end of the connection

        Returns:
            connection ID (a.k.a. innovation number)
        """
        with self._lock:
            return self._innovation_number(node_in, node_out)

    def get_split_IDs(self, conn_to_split: 'ConnectionGene') -> tuple[int, int, int]:
        """
        Get node ID and innovation numbers for splitting a connection.
        If this exact connection has been split before, returns the same
        values, otherwise creates new ones.

        Parameters:
            conn_to_split: the connection being split

        Returns:
            3-tuple: (new_node_id, innovation1, innovation2)
            innovation1 is for the connection from the 'from' node of 'conn_to_split' to the new node
            innovation2 is for the connection from the new node to the 'to' node of 'conn_to_split'
        """
        with self._lock:
            key = conn_to_split.innovation
            if key not in self._split_IDs:
                new_node_id = self._draw(self._next_node_id, "node ID")
                innov1 = self._innovation_number(conn_to_split.node_in, new_node_id)
                innov2 = self._innovation_number(new_node_id, conn_to_split.node_out)
                self._split_IDs[key] = (new_node_id, innov1, innov2)
            return self._split_IDs[key]

    # Names used by the registry contract
    get_or_create_connection_innovation = get_innovation_number
    get_or_create_split_innovation      = get_split_IDs

    def _innovation_number(self, node_in: int, node_out: int) -> int:
        # caller must hold the lock
        key = (node_in, node_out)
        if key not in self._innovation_numbers:
            self._innovation_numbers[key] = self._draw(self._next_innovation_number, "innovation number")
        return self._innovation_numbers[key]

    def _draw(self, counter, what: str) -> int:
        value = next(counter)
        if value > self._max_id:
            raise RegistryExhaustedError(f"Ran out of {what}s (limit {self._max_id})")
        return value

    def __repr__(self):
        return (f"InnovationTracker(first_hidden_id={self.first_hidden_id}, "
                f"innovations={self.num_innovations}, splits={self.num_splits})")
