"""Interactive evolution configuration constants."""

# Selection weights
DEFAULT_WEIGHT = 0.01  # Weight of a fresh or unpicked tree
WEIGHT_SUM_TOLERANCE = 1e-9  # Allowed drift of normalized weights from 1.0

# Population
POPULATION_SIZE = 10  # Trees shown per generation
REQUIRED_PICKS = 3  # Picks that trigger breeding the next generation
REQUIRED_GENERATIONS = 10  # Generations bred before the run is saved and stops

# Operators
MUTATION_RATE = 0.01  # Per-symbol substitution probability

# L-System growth
LSYSTEM_ITERATIONS = 3  # Rewrites applied to a fresh axiom

# Showcase
BEST_TREE_COUNT = 10  # Trees loaded by the "display best" feature
