"""
Shared fixtures for integration tests.
"""

import numpy as np
import pytest


@pytest.fixture
def and_inputs():
    """Inputs of the logical AND (and XOR) truth table."""
    return np.array([[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]])


@pytest.fixture
def and_outputs():
    """Expected outputs of the logical AND."""
    return np.array([[0.0], [0.0], [0.0], [1.0]])


@pytest.fixture
def truth_table_fitness():
    """
    Build a fitness function scoring a network on a truth table.
    The score is 4 minus the sum of squared errors (4.0 for a perfect solution).
    """
    def _make(inputs, outputs):
        def fitness(network):
            errors = network.forward_batch(inputs) - outputs
            return float(4.0 - np.sum(errors ** 2))
        return fitness
    return _make
