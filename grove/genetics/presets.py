"""Starting tree types for the first generation.

Each tree type fixes an axiom and a turn angle. All types share one rule set,
so crossover between any two trees only ever mixes symbols both can grow.
"""

import random
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from grove.config.evolution import LSYSTEM_ITERATIONS
from grove.genetics.lsystem import LSystemGenome, alphabet_from_rules
from grove.util.rng import require_rng_param


class TreeType(Enum):
    """The four starting shapes a fresh tree is drawn from."""

    SET1 = "set1"
    SET2 = "set2"
    SET3 = "set3"
    SET4 = "set4"


@dataclass(frozen=True)
class TreeTypeConfig:
    """Axiom and turn angle for a tree type."""

    axiom: str
    angle: float


TREE_TYPE_CONFIGS: Dict[TreeType, TreeTypeConfig] = {
    TreeType.SET1: TreeTypeConfig(axiom="X", angle=35.0),
    TreeType.SET2: TreeTypeConfig(axiom="G", angle=25.0),
    TreeType.SET3: TreeTypeConfig(axiom="G", angle=20.0),
    TreeType.SET4: TreeTypeConfig(axiom="Y", angle=22.5),
}

DEFAULT_RULESET: Dict[str, str] = {
    "F": "FF",
    "X": "F[+X][-X]FX",
    "G": "G[+G]G[-G]G",
    "H": "H[+H]H[-H]H",
    "Y": "HH",
}


def default_rules() -> Dict[str, str]:
    """A fresh copy of the shared rule set."""
    return dict(DEFAULT_RULESET)


def default_alphabet() -> List[str]:
    return alphabet_from_rules(DEFAULT_RULESET)


def random_tree_type(rng: Optional[random.Random] = None) -> TreeType:
    """Pick a starting tree type uniformly."""
    rng = require_rng_param(rng, "random_tree_type")
    return rng.choice(list(TreeType))


def create_genome(tree_type: TreeType, iteration_target: int = LSYSTEM_ITERATIONS) -> LSystemGenome:
    """Create an ungrown genome for a tree type."""
    config = TREE_TYPE_CONFIGS[tree_type]
    return LSystemGenome(
        sentence=config.axiom,
        alphabet=default_alphabet(),
        rules=default_rules(),
        iteration_target=iteration_target,
    )
