"""Grove: interactive evolution of L-system trees.

A grammar (L-system) grows each tree, a human picks favourites from the
displayed generation, and the picks drive weighted selection, midpoint
crossover and point mutation of the grammar sentences that make up the next
generation.
"""

__version__ = "0.1.0"
