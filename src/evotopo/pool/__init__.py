"""
Pool Package

This package manages the evolving population: the individuals of each
generation and the species they are split into.

Modules:
    species:         A cluster of genetically similar individuals
    species_manager: Speciation, stagnation and offspring allocation
    population:      The individuals of one generation

Exported Classes:
    Population:     Manages the individuals and species of the current generation
    Species:        A single species with members and fitness tracking
    SpeciesManager: Manages all species across generations
"""

from evotopo.pool.population      import Population
from evotopo.pool.species         import Species
from evotopo.pool.species_manager import SpeciesManager

__all__ = ['Population',
           'Species',
           'SpeciesManager']
