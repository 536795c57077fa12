import numpy as np
from enum import Enum

class ActivationKind(Enum):
    """
    The closed set of activation functions a node can use.
    The value of each member is the name used in configuration files.
    """
    IDENTITY      = "identity"
    CLAMPED       = "clamped"
    RELU          = "relu"
    LEAKY_RELU    = "leaky_relu"
    STEP          = "step"
    SIGMOID       = "sigmoid"
    LOGISTIC      = "logistic"
    TANH          = "tanh"
    SOFTSIGN      = "softsign"
    SIN           = "sin"
    GAUSSIAN      = "gaussian"
    BENT_IDENTITY = "bent_identity"
    BIPOLAR       = "bipolar"
    INVERSE       = "inverse"
    SELU          = "selu"
    ABS           = "abs"

def identity_activation(z):
    return z

def clamped_activation(z):
    return np.clip(z, -1.0, 1.0)

def relu_activation(z):
    return np.maximum(0.0, z)

def leaky_relu_activation(z):
    return np.where(z > 0.0, z, 0.01 * z)

def step_activation(z):
    return np.where(z > 0.0, 1.0, 0.0)

def sigmoid_activation(z):
    # Steepened logistic, slope 4.9 as in the original NEAT paper
    Z = 4.9 * z
    Z = np.clip(Z, -60, 60)   # to prevent under/overflow when calculating exp
    return 1.0 / (1.0 + np.exp(-Z))

def logistic_activation(z):
    Z = np.clip(z, -60, 60)
    return 1.0 / (1.0 + np.exp(-Z))

def tanh_activation(z):
    return np.tanh(z)

def softsign_activation(z):
    return z / (1.0 + np.abs(z))

def sin_activation(z):
    return np.sin(z)

def gaussian_activation(z):
    # exp(-z^2) underflows to 0 long before z^2 overflows
    z_clipped = np.clip(z, -1e150, 1e150)
    return np.exp(-(z_clipped ** 2))

def bent_identity_activation(z):
    z_clipped = np.clip(z, -1e150, 1e150)
    return (np.sqrt(z_clipped ** 2 + 1.0) - 1.0) / 2.0 + z_clipped

def bipolar_activation(z):
    return np.where(z > 0.0, 1.0, -1.0)

def inverse_activation(z):
    return 1.0 - z

def selu_activation(z):
    alpha = 1.6732632423543772
    scale = 1.05070098735548
    z_neg = np.minimum(z, 0.0)   # exp only sees the non-positive branch
    return scale * np.where(z > 0.0, z, alpha * np.exp(z_neg) - alpha)

def abs_activation(z):
    return np.abs(z)

activations = {
    ActivationKind.IDENTITY     : identity_activation,
    ActivationKind.CLAMPED      : clamped_activation,
    ActivationKind.RELU         : relu_activation,
    ActivationKind.LEAKY_RELU   : leaky_relu_activation,
    ActivationKind.STEP         : step_activation,
    ActivationKind.SIGMOID      : sigmoid_activation,
    ActivationKind.LOGISTIC     : logistic_activation,
    ActivationKind.TANH         : tanh_activation,
    ActivationKind.SOFTSIGN     : softsign_activation,
    ActivationKind.SIN          : sin_activation,
    ActivationKind.GAUSSIAN     : gaussian_activation,
    ActivationKind.BENT_IDENTITY: bent_identity_activation,
    ActivationKind.BIPOLAR      : bipolar_activation,
    ActivationKind.INVERSE      : inverse_activation,
    ActivationKind.SELU         : selu_activation,
    ActivationKind.ABS          : abs_activation
    }

# 3-letter identifiers for each activation function
activation_codes = {
    ActivationKind.IDENTITY     : "IDN",
    ActivationKind.CLAMPED      : "CLP",
    ActivationKind.RELU         : "RLU",
    ActivationKind.LEAKY_RELU   : "LRU",
    ActivationKind.STEP         : "STP",
    ActivationKind.SIGMOID      : "SIG",
    ActivationKind.LOGISTIC     : "LGS",
    ActivationKind.TANH         : "TNH",
    ActivationKind.SOFTSIGN     : "SSG",
    ActivationKind.SIN          : "SIN",
    ActivationKind.GAUSSIAN     : "GAU",
    ActivationKind.BENT_IDENTITY: "BID",
    ActivationKind.BIPOLAR      : "BIP",
    ActivationKind.INVERSE      : "INV",
    ActivationKind.SELU         : "SLU",
    ActivationKind.ABS          : "ABS"
    }

def activate(kind: ActivationKind, z):
    """
    Evaluate the activation function 'kind' at 'z' (a scalar or a numpy array).
    """
    return activations[kind](z)

def parse_activation(name) -> ActivationKind:
    """
    Resolve an activation given by name (or already an ActivationKind).

    Raises:
        ValueError: if 'name' does not identify a known activation function
    """
    if isinstance(name, ActivationKind):
        return name
    try:
        return ActivationKind(name.strip().lower())
    except (ValueError, AttributeError):
        raise ValueError(f"Unknown activation function '{name}'") from None
