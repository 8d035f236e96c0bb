"""
Configuration consumed by an external evolutionary driver.

Plain value fields only: no defaults and no validation. Range checks such as
probabilities in [0, 1] belong to the driver that interprets them.
"""

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Mapping


@dataclass
class GeneticAlgorithmConfig:
    generations: int          # generational budget
    max_evaluations: int      # fitness evaluation budget
    local_iterations: int     # local search (constant tuning) iterations per individual
    population_size: int
    pool_size: int            # offspring pool size per generation
    p_crossover: float
    p_mutation: float
    epsilon: float            # tolerance when comparing fitness values
    seed: int
    time_limit: int           # wall-clock limit in seconds

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> 'GeneticAlgorithmConfig':
        names = {f.name for f in fields(cls)}
        unknown = set(values) - names
        if unknown:
            raise KeyError(f"unknown configuration keys: {sorted(unknown)}")
        missing = names - set(values)
        if missing:
            raise KeyError(f"missing configuration keys: {sorted(missing)}")
        return cls(**values)
