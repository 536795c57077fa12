"""
Unit tests for InnovationTracker class.

Tests cover innovation number assignment, connection splits,
concurrent use and identifier exhaustion.
"""

import pytest
from concurrent.futures import ThreadPoolExecutor

from evotopo.errors import RegistryExhaustedError
from evotopo.genotype.innovation_tracker import InnovationTracker
from evotopo.genotype.connection_gene import ConnectionGene


# ============================================================================
# Test: Initialization
# ============================================================================

class TestInnovationTrackerInit:
    """Test InnovationTracker initialization."""

    def test_first_hidden_id_follows_the_bias_node(self):
        tracker = InnovationTracker(3, 2)
        assert tracker.first_hidden_id == 6

    def test_starts_empty(self):
        tracker = InnovationTracker(3, 2)
        assert tracker.num_innovations == 0
        assert tracker.num_splits == 0

    def test_repr(self):
        assert "first_hidden_id=6" in repr(InnovationTracker(3, 2))


# ============================================================================
# Test: Innovation numbers
# ============================================================================

class TestInnovationNumbers:
    """Test innovation numbers assigned to connections."""

    def test_numbers_start_at_zero_and_increase(self, tracker):
        assert tracker.get_innovation_number(0, 2) == 0
        assert tracker.get_innovation_number(1, 2) == 1
        assert tracker.get_innovation_number(3, 2) == 2

    def test_same_endpoints_same_number(self, tracker):
        first  = tracker.get_innovation_number(0, 2)
        tracker.get_innovation_number(1, 2)
        second = tracker.get_innovation_number(0, 2)
        assert first == second
        assert tracker.num_innovations == 2

    def test_direction_matters(self, tracker):
        assert tracker.get_innovation_number(4, 5) != tracker.get_innovation_number(5, 4)

    def test_registry_contract_alias(self, tracker):
        innov = tracker.get_or_create_connection_innovation(0, 2)
        assert innov == tracker.get_innovation_number(0, 2)


# ============================================================================
# Test: Connection splits
# ============================================================================

class TestConnectionSplits:
    """Test the identifiers produced when a connection is split."""

    def test_split_ids(self, config, tracker):
        innov = tracker.get_innovation_number(0, 2)
        conn  = ConnectionGene(0, 2, 0.5, innov, config)

        node_id, innov1, innov2 = tracker.get_split_IDs(conn)

        assert node_id == tracker.first_hidden_id
        assert (innov1, innov2) == (1, 2)
        assert tracker.get_innovation_number(0, node_id) == innov1
        assert tracker.get_innovation_number(node_id, 2) == innov2

    def test_same_split_same_ids(self, config, tracker):
        """Splitting the same connection in two genomes yields the same node and connections."""
        innov = tracker.get_innovation_number(0, 2)
        conn_a = ConnectionGene(0, 2,  0.5, innov, config)
        conn_b = ConnectionGene(0, 2, -1.5, innov, config)

        assert tracker.get_split_IDs(conn_a) == tracker.get_split_IDs(conn_b)
        assert tracker.num_splits == 1

    def test_different_splits_get_different_nodes(self, config, tracker):
        conn_a = ConnectionGene(0, 2, 0.5, tracker.get_innovation_number(0, 2), config)
        conn_b = ConnectionGene(1, 2, 0.5, tracker.get_innovation_number(1, 2), config)

        node_a, _, _ = tracker.get_split_IDs(conn_a)
        node_b, _, _ = tracker.get_split_IDs(conn_b)

        assert node_a != node_b
        assert node_b == node_a + 1

    def test_registry_contract_alias(self, config, tracker):
        conn = ConnectionGene(0, 2, 0.5, tracker.get_innovation_number(0, 2), config)
        assert tracker.get_or_create_split_innovation(conn) == tracker.get_split_IDs(conn)


# ============================================================================
# Test: Concurrency
# ============================================================================

class TestConcurrentUse:
    """Test that concurrent lookups agree on the identity of identical mutations."""

    def test_concurrent_innovation_numbers(self):
        tracker = InnovationTracker(5, 5)
        pairs   = [(i, 5 + j) for i in range(5) for j in range(5)] * 20

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(lambda pair: (pair, tracker.get_innovation_number(*pair)), pairs))

        numbers_by_pair = {}
        for pair, innov in results:
            numbers_by_pair.setdefault(pair, set()).add(innov)

        assert all(len(numbers) == 1 for numbers in numbers_by_pair.values())
        assert tracker.num_innovations == 25
        assert sorted(n.pop() for n in numbers_by_pair.values()) == list(range(25))

    def test_concurrent_splits(self, config):
        tracker = InnovationTracker(2, 1)
        conn    = ConnectionGene(0, 2, 1.0, tracker.get_innovation_number(0, 2), config)

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = set(executor.map(lambda _: tracker.get_split_IDs(conn), range(100)))

        assert len(results) == 1
        assert tracker.num_splits == 1


# ============================================================================
# Test: Exhaustion
# ============================================================================

class TestRegistryExhaustion:
    """Test the identifier limit."""

    def test_innovation_numbers_exhausted(self):
        tracker = InnovationTracker(2, 1, max_id=1)
        tracker.get_innovation_number(0, 2)
        tracker.get_innovation_number(1, 2)
        with pytest.raises(RegistryExhaustedError):
            tracker.get_innovation_number(3, 2)

    def test_known_connections_still_resolved_when_exhausted(self):
        tracker = InnovationTracker(2, 1, max_id=0)
        assert tracker.get_innovation_number(0, 2) == 0
        assert tracker.get_innovation_number(0, 2) == 0

    def test_node_ids_exhausted(self, config):
        tracker = InnovationTracker(2, 1, max_id=3)
        conn    = ConnectionGene(0, 2, 1.0, tracker.get_innovation_number(0, 2), config)
        with pytest.raises(RegistryExhaustedError, match="node ID"):
            tracker.get_split_IDs(conn)
