"""
Reporter Module

This module implements the hook registry through which callers observe a run,
and the immutable snapshot of the run's state handed to each hook.

Classes:
    SpeciesSummary: Immutable summary of one species
    Snapshot:       Immutable view of the run's state after a generation
    Reporter:       Registry of periodic hooks
"""

import logging
from dataclasses import dataclass
from typing      import Callable, TYPE_CHECKING

if TYPE_CHECKING:
    from evotopo.genotype import Genome

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class SpeciesSummary:
    id           : int
    size         : int
    fitness      : float
    max_fitness  : float
    created      : int
    last_improved: int

@dataclass(frozen=True)
class Snapshot:
    """
    The state of a run after a generation has been reproduced.

    Attributes:
        generation:              Number of generations completed so far
        population_size:         Number of individuals per generation
        fitness_values:          Fitness of each individual of the last evaluated generation
        species:                 Summary of each species of the last evaluated generation
        best_genome:             Copy of the best genome found so far (None if all evaluations failed)
        best_fitness:            Fitness of the best genome found so far
        compatibility_threshold: Current compatibility threshold used for speciation
    """
    generation             : int
    population_size        : int
    fitness_values         : tuple[float, ...]
    species                : tuple[SpeciesSummary, ...]
    best_genome            : 'Genome | None'
    best_fitness           : float
    compatibility_threshold: float

    @property
    def num_species(self) -> int:
        return len(self.species)

class Reporter:
    """
    Registry of hooks called periodically during a run.

    Each hook is a callable taking the generation number and a Snapshot.
    A hook registered with period N is called after every generation whose
    number is a multiple of N. Hooks are called in registration order; an
    exception raised by a hook is logged and does not stop the run.

    Public Methods:
        add_hook(every, callback):         Register a hook
        fire(generation, make_snapshot):   Call the hooks due at a given generation
    """

    def __init__(self):
        self._hooks: list[tuple[int, Callable[[int, Snapshot], None]]] = []

    def add_hook(self, every: int, callback: Callable[[int, Snapshot], None]) -> None:
        """
        Register a hook.

        Parameters:
            every:    The hook is called every 'every' generations
            callback: Called as callback(generation, snapshot)

        Raises:
            ValueError: if 'every' is not a positive integer
        """
        if not isinstance(every, int) or every < 1:
            raise ValueError(f"Hook period must be a positive integer, got {every!r}")
        self._hooks.append((every, callback))

    def __len__(self):
        return len(self._hooks)

    def fire(self, generation: int, make_snapshot: Callable[[], Snapshot]) -> None:
        """
        Call, in registration order, all hooks due at 'generation'.
        The snapshot is only built if at least one hook is due.

        Parameters:
            generation:    Number of generations completed so far
            make_snapshot: Builds the snapshot passed to the hooks
        """
        snapshot = None
        for every, callback in self._hooks:
            if generation % every != 0:
                continue
            if snapshot is None:
                snapshot = make_snapshot()
            try:
                callback(generation, snapshot)
            except Exception:
                logger.exception("Hook %r failed in generation %d", callback, generation)
