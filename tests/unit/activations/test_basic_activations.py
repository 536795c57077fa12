"""
Unit tests for the basic activation functions.
"""

import math
import numpy as np
import pytest

from evotopo.activations import ActivationKind, activations, activation_codes, activate, parse_activation


# ============================================================================
# Test: Registry
# ============================================================================

class TestActivationRegistry:
    """Test the mapping between activation kinds, functions and codes."""

    def test_every_kind_has_a_function(self):
        assert set(activations.keys()) == set(ActivationKind)

    def test_every_kind_has_a_unique_three_letter_code(self):
        codes = [activation_codes[kind] for kind in ActivationKind]
        assert all(len(code) == 3 for code in codes)
        assert len(set(codes)) == len(codes)

    @pytest.mark.parametrize("kind", list(ActivationKind))
    def test_functions_are_elementwise(self, kind):
        """Every activation keeps the shape of its argument and returns finite values."""
        z = np.array([[-100.0, -1.0, 0.0], [0.5, 1.0, 100.0]])
        result = activate(kind, z)
        assert result.shape == z.shape
        assert np.all(np.isfinite(result))


# ============================================================================
# Test: Function values
# ============================================================================

class TestActivationValues:
    """Spot check the value of each activation function."""

    def test_sigmoid_is_steepened(self):
        assert activate(ActivationKind.SIGMOID, 0.0) == pytest.approx(0.5)
        assert activate(ActivationKind.SIGMOID, 1.0) == pytest.approx(1.0 / (1.0 + math.exp(-4.9)))

    def test_sigmoid_does_not_overflow(self):
        with np.errstate(over='raise'):
            assert activate(ActivationKind.SIGMOID, -1e6) == pytest.approx(0.0)
            assert activate(ActivationKind.SIGMOID,  1e6) == pytest.approx(1.0)

    def test_logistic(self):
        assert activate(ActivationKind.LOGISTIC, 0.0) == pytest.approx(0.5)
        assert activate(ActivationKind.LOGISTIC, 1.0) == pytest.approx(1.0 / (1.0 + math.exp(-1.0)))

    def test_piecewise_functions(self):
        assert activate(ActivationKind.RELU, -2.0) == 0.0
        assert activate(ActivationKind.RELU,  2.0) == 2.0
        assert activate(ActivationKind.LEAKY_RELU, -1.0) == pytest.approx(-0.01)
        assert activate(ActivationKind.STEP, 0.0) == 0.0
        assert activate(ActivationKind.STEP, 0.1) == 1.0
        assert activate(ActivationKind.BIPOLAR, -1.0) == -1.0
        assert activate(ActivationKind.BIPOLAR,  1.0) ==  1.0
        assert activate(ActivationKind.CLAMPED, 5.0) == 1.0
        assert activate(ActivationKind.CLAMPED, -5.0) == -1.0

    def test_smooth_functions(self):
        assert activate(ActivationKind.IDENTITY, 1.5) == 1.5
        assert activate(ActivationKind.TANH, 0.5) == pytest.approx(math.tanh(0.5))
        assert activate(ActivationKind.SOFTSIGN, 1.0) == pytest.approx(0.5)
        assert activate(ActivationKind.SIN, math.pi / 2) == pytest.approx(1.0)
        assert activate(ActivationKind.GAUSSIAN, 0.0) == pytest.approx(1.0)
        assert activate(ActivationKind.BENT_IDENTITY, 0.0) == pytest.approx(0.0)
        assert activate(ActivationKind.INVERSE, 0.25) == pytest.approx(0.75)
        assert activate(ActivationKind.SELU, 0.0) == pytest.approx(0.0)
        assert activate(ActivationKind.SELU, 1.0) == pytest.approx(1.05070098735548)
        assert activate(ActivationKind.ABS, -3.0) == 3.0


# ============================================================================
# Test: Parsing
# ============================================================================

class TestParseActivation:
    """Test resolving activation functions from their names."""

    def test_parse_by_name(self):
        assert parse_activation("tanh") is ActivationKind.TANH

    def test_parse_ignores_case_and_whitespace(self):
        assert parse_activation("  Leaky_ReLU ") is ActivationKind.LEAKY_RELU

    def test_parse_passes_kinds_through(self):
        assert parse_activation(ActivationKind.RELU) is ActivationKind.RELU

    def test_parse_unknown_name_raises(self):
        with pytest.raises(ValueError, match="Unknown activation function"):
            parse_activation("swish")

    def test_parse_non_string_raises(self):
        with pytest.raises(ValueError):
            parse_activation(42)
