"""
Integration tests for the configuration system.

These tests verify that the Config class properly loads configuration files,
and that the loaded parameters correctly control the behavior of a run.
"""

import pytest
from pathlib import Path

from evotopo import Config, ConfigError, Evolution
from evotopo.activations import ActivationKind

EXAMPLE_CONFIG = Path(__file__).parents[2] / "examples" / "config_xor.ini"


@pytest.fixture
def write_config(tmp_path):
    """Write an INI configuration file and return its path."""
    def _write(text):
        path = tmp_path / "config.ini"
        path.write_text(text)
        return str(path)
    return _write


# ============================================================================
# Test Config Integration - Shipped configuration
# ============================================================================

class TestExampleConfig:
    """Test the configuration file shipped with the XOR example."""

    def test_load_example_config(self):
        config = Config(str(EXAMPLE_CONFIG))

        assert config.population_size == 150
        assert config.num_inputs == 2
        assert config.num_outputs == 1
        assert config.initial_cxn_policy == 'full'
        assert config.fitness_goal == 3.9
        assert config.max_generations == 300
        assert config.target_species_count is None
        assert config.seed is None
        assert config.activation_initial is ActivationKind.SIGMOID
        assert config.activation_options == [ActivationKind.SIGMOID]

    def test_short_run_from_example_config(self, and_inputs, and_outputs, truth_table_fitness):
        """Overrides take precedence over the file, and the run honors them."""
        config = Config(str(EXAMPLE_CONFIG), population_size=30, max_generations=3, seed=2)
        sizes  = []

        evolution = Evolution(config, truth_table_fitness(and_inputs, and_outputs))
        evolution.add_hook(1, lambda generation, snapshot: sizes.append(snapshot.population_size))
        evolution.start()

        assert config.population_size == 30
        assert evolution.generation <= 3
        assert all(size == 30 for size in sizes)


# ============================================================================
# Test Config Integration - Parameters controlling the run
# ============================================================================

class TestConfigControlsRun:
    """Test that parameters read from a file change what the algorithm does."""

    def test_initial_connection_policy(self, write_config):
        """The first 12 evaluations are the initial generation."""
        path   = write_config("[POPULATION_INIT]\n"
                              "population_size    = 12\n"
                              "num_inputs         = 3\n"
                              "num_outputs        = 2\n"
                              "initial_cxn_policy = none\n"
                              "[TERMINATION]\n"
                              "max_generations = 1\n")
        counts = []

        def fitness(network):
            counts.append(network.number_connections)
            return 0.0

        Evolution(Config(path), fitness).start()
        assert counts[:12] == [0] * 12

    def test_full_connection_policy(self, write_config):
        path   = write_config("[POPULATION_INIT]\n"
                              "population_size    = 12\n"
                              "num_inputs         = 3\n"
                              "num_outputs        = 2\n"
                              "initial_cxn_policy = full\n"
                              "[TERMINATION]\n"
                              "max_generations = 1\n")
        counts = []

        def fitness(network):
            counts.append(network.number_connections)
            return 0.0

        Evolution(Config(path), fitness).start()

        # (3 inputs + bias) x 2 outputs
        assert counts[:12] == [8] * 12

    def test_fitness_goal_stops_run(self, write_config):
        path = write_config("[POPULATION_INIT]\n"
                            "population_size = 10\n"
                            "num_inputs      = 2\n"
                            "[TERMINATION]\n"
                            "max_generations = 50\n"
                            "fitness_goal    = 1.0\n")
        evolution = Evolution(Config(path), lambda network: 1.0)
        _, best_fitness = evolution.start()

        assert best_fitness == 1.0
        assert evolution.generation == 0

    def test_connection_cost_lowers_fitness(self, write_config):
        path = write_config("[POPULATION_INIT]\n"
                            "population_size    = 10\n"
                            "num_inputs         = 2\n"
                            "initial_cxn_policy = full\n"
                            "[FITNESS]\n"
                            "connection_cost = 0.25\n"
                            "[STRUCTURAL_MUTATIONS]\n"
                            "connection_toggle_probability = 0.0\n"
                            "[TERMINATION]\n"
                            "max_generations = 1\n")
        _, best_fitness = Evolution(Config(path), lambda network: 1.0).start()

        # 2 inputs + bias, all connected to the single output
        assert best_fitness == pytest.approx(1.0 - 3 * 0.25)

    def test_target_species_count_moves_threshold(self, write_config):
        path = write_config("[POPULATION_INIT]\n"
                            "population_size = 20\n"
                            "num_inputs      = 2\n"
                            "[SPECIATION]\n"
                            "compatibility_threshold     = 3.0\n"
                            "target_species_count        = 100\n"
                            "threshold_step              = 0.5\n"
                            "min_compatibility_threshold = 1.0\n"
                            "[TERMINATION]\n"
                            "max_generations = 5\n"
                            "[RUN]\n"
                            "seed = 4\n")
        thresholds = []

        evolution = Evolution(Config(path), lambda network: 1.0)
        evolution.add_hook(1, lambda generation, snapshot: thresholds.append(snapshot.compatibility_threshold))
        evolution.start()

        assert thresholds == pytest.approx([2.5, 2.0, 1.5, 1.0, 1.0])


# ============================================================================
# Test Config Integration - Invalid files
# ============================================================================

class TestInvalidConfigFile:
    """Test that invalid configuration files are rejected before a run starts."""

    def test_malformed_value(self, write_config):
        path = write_config("[POPULATION_INIT]\npopulation_size = many\n")
        with pytest.raises(ConfigError, match="population_size"):
            Config(path)

    def test_out_of_range_value(self, write_config):
        path = write_config("[STRUCTURAL_MUTATIONS]\nnode_add_probability = 1.5\n")
        with pytest.raises(ConfigError, match="node_add_probability"):
            Config(path)

    def test_unknown_activation(self, write_config):
        path = write_config("[NODE]\nactivation_options = sigmoid, squiggle\n")
        with pytest.raises(ConfigError):
            Config(path)
