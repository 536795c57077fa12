"""
Exceptions raised by the evotopo package.

Classes:
    ConfigError:            Invalid configuration, detected before any generation runs
    StructuralError:        A genome violates a structural invariant (cycle, dangling node)
    ExtinctionError:        No species survived, the run cannot continue
    RegistryExhaustedError: The innovation tracker ran out of identifiers
"""

class ConfigError(ValueError):
    """
    Raised when a configuration value is missing, malformed or out of range.
    """

class StructuralError(RuntimeError):
    """
    Raised when a genome breaks a structural invariant.

    Mutation and crossover are built so this never happens; seeing it
    means there is a bug in the engine, not in the caller's code.
    """

class ExtinctionError(RuntimeError):
    """
    Raised when every species has been removed and no offspring can be produced.
    """

class RegistryExhaustedError(RuntimeError):
    """
    Raised when the innovation tracker exceeds its identifier limit.
    """
