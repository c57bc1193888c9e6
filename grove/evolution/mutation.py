"""Point mutation for L-system genomes.

Each symbol of a sentence may be swapped for another symbol of the genome's
alphabet. Brackets are structural: they are never mutated and are never
chosen as replacements, so mutation cannot change the nesting shape.
"""

import logging
import random
from typing import List, Optional, Sequence

from grove.exceptions import PreconditionError
from grove.genetics.lsystem import LSystemGenome, is_bracket
from grove.util.rng import require_rng_param

logger = logging.getLogger(__name__)


def non_bracket_symbols(alphabet: Sequence[str]) -> List[str]:
    """Alphabet symbols that may be written by a mutation."""
    return [symbol for symbol in alphabet if not is_bracket(symbol)]


def point_mutation(
    genome: LSystemGenome,
    mutation_rate: float,
    rng: Optional[random.Random] = None,
) -> LSystemGenome:
    """Mutate a genome symbol by symbol.

    Args:
        genome: Genome to mutate; left untouched
        mutation_rate: Probability (0.0-1.0) that each position is replaced
        rng: Random number generator

    Returns:
        A new genome carrying the mutated sentence

    Raises:
        PreconditionError: If the rate is outside [0, 1], or a non-zero rate
            is used with an alphabet made only of brackets
    """
    rng = require_rng_param(rng, "point_mutation")

    if not 0.0 <= mutation_rate <= 1.0:
        raise PreconditionError(f"mutation_rate must be in [0, 1], got {mutation_rate}")

    candidates = non_bracket_symbols(genome.alphabet)
    if not candidates and mutation_rate > 0.0:
        raise PreconditionError(
            f"Alphabet {genome.alphabet!r} has no non-bracket symbols to mutate into"
        )

    symbols = list(genome.sentence)
    changed = 0
    for i, symbol in enumerate(symbols):
        if rng.random() < mutation_rate and not is_bracket(symbol):
            replacement = rng.choice(candidates)
            if replacement != symbol:
                changed += 1
            symbols[i] = replacement

    mutated = genome.copy()
    mutated.sentence = "".join(symbols)
    if changed:
        logger.debug("Mutation changed %d of %d symbols", changed, len(symbols))
    return mutated
