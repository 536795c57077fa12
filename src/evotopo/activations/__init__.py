"""
Activations Package

This package provides activation functions for evotopo neural networks.

Exported:
    ActivationKind:   Closed enumeration of the available activation functions
    activations:      Dictionary mapping each ActivationKind to its function
    activation_codes: Dictionary mapping each ActivationKind to a 3-letter code
    activate:         Evaluate an activation function by kind
    parse_activation: Resolve an activation function from its name
"""

from evotopo.activations.basic_activations import (
    ActivationKind,
    activations,
    activation_codes,
    activate,
    parse_activation
)

__all__ = [
    'ActivationKind',
    'activations',
    'activation_codes',
    'activate',
    'parse_activation'
]
