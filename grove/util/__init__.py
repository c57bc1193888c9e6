"""Shared utilities for the evolution core."""

from grove.util.rng import MissingRNGError, make_rng, require_rng_param

__all__ = [
    "MissingRNGError",
    "make_rng",
    "require_rng_param",
]
