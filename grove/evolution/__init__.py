"""Evolution operators for interactive tree breeding.

Unlike an automated genetic algorithm, the selection pressure here comes from
a person: picked trees gain weight, and weights drive which sentences are
recombined into the next generation.

The module consolidates:
- Crossover: Head of one parent's sentence joined to the tail of another's
- Mutation: Per-symbol substitution that never touches brackets
- Selection: Elitism plus roulette-wheel picks over normalized weights
"""

from grove.evolution.crossover import draw_cut_point, midpoint_crossover, splice_sentences
from grove.evolution.mutation import non_bracket_symbols, point_mutation
from grove.evolution.selection import (
    normalize_weights,
    pick_random_weighted,
    select_parents,
    stretch_weights,
    walk_cumulative,
    weights_normalized,
)

__all__ = [
    # Crossover
    "midpoint_crossover",
    "draw_cut_point",
    "splice_sentences",
    # Mutation
    "point_mutation",
    "non_bracket_symbols",
    # Selection
    "normalize_weights",
    "weights_normalized",
    "stretch_weights",
    "walk_cumulative",
    "pick_random_weighted",
    "select_parents",
]
