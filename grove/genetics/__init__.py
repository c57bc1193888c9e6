"""Grammar genetics: L-system genomes and the starting tree types."""

from grove.genetics.lsystem import (
    BASE_SYMBOLS,
    BRACKETS,
    LSystemGenome,
    alphabet_from_rules,
    combine_alphabets,
    count_brackets,
    is_bracket,
    is_nesting_valid,
    rewrite,
)
from grove.genetics.presets import (
    DEFAULT_RULESET,
    TREE_TYPE_CONFIGS,
    TreeType,
    TreeTypeConfig,
    create_genome,
    random_tree_type,
)

__all__ = [
    # Genome
    "LSystemGenome",
    "rewrite",
    "count_brackets",
    "is_bracket",
    "is_nesting_valid",
    "combine_alphabets",
    "alphabet_from_rules",
    "BASE_SYMBOLS",
    "BRACKETS",
    # Presets
    "TreeType",
    "TreeTypeConfig",
    "TREE_TYPE_CONFIGS",
    "DEFAULT_RULESET",
    "create_genome",
    "random_tree_type",
]
