"""
Run Package

This package implements the execution of an evolutionary run: its configuration,
the generation loop, the hooks observing it, and the persistence of its results.

Modules:
    config:      Configuration management
    reporter:    Hook registry and run snapshots
    evolution:   The evolution driver
    persistence: Saving and loading evolved networks

Exported Classes:
    Config:    Configuration parameters of a run
    Evolution: Runs the evolutionary algorithm for a fitness function
    Reporter:  Registry of periodic hooks
    Snapshot:  Immutable view of the run's state passed to hooks

Exported Functions:
    network_to_bytes, network_from_bytes, save_network, load_network
"""

from evotopo.run.config      import Config
from evotopo.run.reporter    import Reporter, Snapshot, SpeciesSummary
from evotopo.run.evolution   import Evolution, FAILED_FITNESS
from evotopo.run.persistence import network_to_bytes, network_from_bytes, save_network, load_network

__all__ = ['Config',
           'Evolution',
           'FAILED_FITNESS',
           'Reporter',
           'Snapshot',
           'SpeciesSummary',
           'network_to_bytes',
           'network_from_bytes',
           'save_network',
           'load_network']
