"""Pytest configuration and shared fixtures."""

import random
import numpy as np
import pytest
from itertools import count

from evotopo.run.config import Config
from evotopo.genotype.innovation_tracker import InnovationTracker
from evotopo.phenotype.individual import Individual


@pytest.fixture(autouse=True)
def set_random_seeds():
    """Seed both random number generators and restart individual IDs at 0."""
    np.random.seed(42)
    random.seed(42)
    Individual._id_generator = count(0)

    yield

    np.random.seed(None)
    random.seed(None)


@pytest.fixture
def config():
    """A small configuration: 2 inputs, 1 output (bias node is 3, hidden nodes start at 4)."""
    return Config(num_inputs=2, num_outputs=1, population_size=20)


@pytest.fixture
def tracker(config):
    """A fresh innovation tracker matching 'config'."""
    return InnovationTracker(config.num_inputs, config.num_outputs)
