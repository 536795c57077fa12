"""
Gene Parameter Module

Real-valued gene parameters (the 'weight' of a connection, the 'bias' of a node)
share one policy for how they are initialized and mutated. The policy of a
parameter is read from the configuration entries named after it:

    <name>_init_mean, <name>_init_stdev:  normal distribution of initial values
    min_<name>, max_<name>:               allowed range
    <name>_perturb_prob, <name>_perturb_strength: additive gaussian change
    <name>_replace_prob:                  replacement by a uniform value in range

Classes:
    GeneParameter: Initialization and mutation policy of a gene parameter
"""

import random
import numpy as np
from typing import NamedTuple

from evotopo.run.config import Config

class GeneParameter(NamedTuple):
    init_mean    : float
    init_stdev   : float
    min_value    : float
    max_value    : float
    perturb_prob : float
    replace_prob : float
    perturb_stdev: float

    @classmethod
    def from_config(cls, config: Config, name: str) -> 'GeneParameter':
        """
        Read the policy of parameter 'name' ("weight" or "bias") from the configuration.
        """
        return cls(init_mean     = getattr(config, f'{name}_init_mean'),
                   init_stdev    = getattr(config, f'{name}_init_stdev'),
                   min_value     = getattr(config, f'min_{name}'),
                   max_value     = getattr(config, f'max_{name}'),
                   perturb_prob  = getattr(config, f'{name}_perturb_prob'),
                   replace_prob  = getattr(config, f'{name}_replace_prob'),
                   perturb_stdev = getattr(config, f'{name}_perturb_strength'))

    def clip(self, value: float) -> float:
        return float(np.clip(value, self.min_value, self.max_value))

    def draw(self) -> float:
        """
        Draw an initial value from the normal distribution, clipped to the allowed range.
        """
        return self.clip(np.random.normal(self.init_mean, self.init_stdev))

    def mutate(self, value: float) -> float:
        """
        Return the mutated value of the parameter.

        A single uniform draw decides what happens: with 'perturb_prob' a gaussian
        change is added (and the result clipped), with 'replace_prob' the value is
        replaced by one drawn uniformly from the allowed range, otherwise it is kept.
        """
        r = random.random()
        if r < self.perturb_prob:
            return self.clip(value + random.gauss(0, self.perturb_stdev))
        if r < self.perturb_prob + self.replace_prob:
            return random.uniform(self.min_value, self.max_value)
        return value
