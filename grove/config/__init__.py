"""Configuration package for Grove.

Constants are grouped by concern; ``EvolutionConfig`` bundles the tunables a
single evolution run needs.
"""

from grove.config.evolution_config import EvolutionConfig

__all__ = ["EvolutionConfig"]
