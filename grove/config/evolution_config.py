"""Run configuration for interactive evolution."""

import os
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Mapping, Optional

from grove.config.evolution import (
    DEFAULT_WEIGHT,
    LSYSTEM_ITERATIONS,
    MUTATION_RATE,
    POPULATION_SIZE,
    REQUIRED_GENERATIONS,
    REQUIRED_PICKS,
)
from grove.config.rendering import BRANCH_LENGTH
from grove.exceptions import ConfigurationError

ENV_PREFIX = "GROVE_"


@dataclass
class EvolutionConfig:
    """Tunables for one interactive evolution run.

    Attributes:
        population_size: Number of trees per generation.
        default_weight: Weight assigned to fresh and reset trees, in (0, 1).
        mutation_rate: Per-symbol substitution probability, in [0, 1].
        required_picks: Picks needed before a generation can be bred.
        required_generations: Generations bred before the run is finished.
        iterations: Rewrites applied to each fresh axiom.
        branch_length: Length of one forward turtle move.
        seed: Optional seed for the run's RNG.
    """

    population_size: int = POPULATION_SIZE
    default_weight: float = DEFAULT_WEIGHT
    mutation_rate: float = MUTATION_RATE
    required_picks: int = REQUIRED_PICKS
    required_generations: int = REQUIRED_GENERATIONS
    iterations: int = LSYSTEM_ITERATIONS
    branch_length: float = BRANCH_LENGTH
    seed: Optional[int] = None

    def validate(self) -> "EvolutionConfig":
        """Check ranges, raising ConfigurationError on the first problem.

        Returns self so calls can be chained.
        """
        if self.population_size < 1:
            raise ConfigurationError(f"population_size must be >= 1, got {self.population_size}")
        if not 0.0 < self.default_weight < 1.0:
            raise ConfigurationError(
                f"default_weight must be in (0, 1), got {self.default_weight}"
            )
        if not 0.0 <= self.mutation_rate <= 1.0:
            raise ConfigurationError(f"mutation_rate must be in [0, 1], got {self.mutation_rate}")
        if not 1 <= self.required_picks <= self.population_size:
            raise ConfigurationError(
                f"required_picks must be in [1, {self.population_size}], got {self.required_picks}"
            )
        if self.required_generations < 1:
            raise ConfigurationError(
                f"required_generations must be >= 1, got {self.required_generations}"
            )
        if self.iterations < 0:
            raise ConfigurationError(f"iterations must be >= 0, got {self.iterations}")
        if self.branch_length <= 0:
            raise ConfigurationError(f"branch_length must be > 0, got {self.branch_length}")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EvolutionConfig":
        """Build a config from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown)}")
        return cls(**dict(data)).validate()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EvolutionConfig":
        """Build a config from ``GROVE_*`` environment variables.

        ``GROVE_POPULATION_SIZE=12`` overrides ``population_size`` and so on;
        unset variables keep their defaults.
        """
        environ = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None or raw == "":
                continue
            caster = float if f.name in ("default_weight", "mutation_rate", "branch_length") else int
            try:
                values[f.name] = caster(raw)
            except ValueError as e:
                raise ConfigurationError(
                    f"{ENV_PREFIX}{f.name.upper()}={raw!r} is not a valid {caster.__name__}"
                ) from e
        return cls(**values).validate()
